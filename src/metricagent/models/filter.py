"""
Metric filter model.

A Filter holds the glob criteria configured on a plugin instance (namepass,
namedrop, fieldpass, fielddrop, tagpass, tagdrop, taginclude, tagexclude) and
evaluates metrics against them. Criteria are compiled once; after compilation
the filter cannot be modified and may be evaluated concurrently from any
number of threads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from ..filter import GlobError, compile_filter
from ..validation import FilterCompileError


@dataclass(frozen=True)
class TagFilter:
    """Glob patterns applied to the value of one tag key."""

    name: str
    patterns: Sequence[str] = ()

    def __post_init__(self):
        object.__setattr__(self, "patterns", tuple(self.patterns))


@dataclass
class Filter:
    """
    Inclusion and exclusion rules for the metrics of one plugin instance.

    Matching rules:
      - A drop pattern always wins over a pass pattern of the same criterion.
      - An empty pass list lets everything through.
      - tagpass: every configured tag key present on the metric must match one
        of its patterns; keys missing from the metric are not evaluated.
      - tagdrop: the metric is rejected if any configured tag key present on
        the metric matches one of its patterns.
      - taginclude/tagexclude select which tag keys are kept.
    """

    name_pass: Sequence[str] = field(default_factory=list)
    name_drop: Sequence[str] = field(default_factory=list)
    field_pass: Sequence[str] = field(default_factory=list)
    field_drop: Sequence[str] = field(default_factory=list)
    tag_pass: Sequence[TagFilter] = field(default_factory=list)
    tag_drop: Sequence[TagFilter] = field(default_factory=list)
    tag_include: Sequence[str] = field(default_factory=list)
    tag_exclude: Sequence[str] = field(default_factory=list)

    _name_pass: Any = field(default=None, init=False, repr=False, compare=False)
    _name_drop: Any = field(default=None, init=False, repr=False, compare=False)
    _field_pass: Any = field(default=None, init=False, repr=False, compare=False)
    _field_drop: Any = field(default=None, init=False, repr=False, compare=False)
    _tag_pass: Tuple = field(default=(), init=False, repr=False, compare=False)
    _tag_drop: Tuple = field(default=(), init=False, repr=False, compare=False)
    _tag_include: Any = field(default=None, init=False, repr=False, compare=False)
    _tag_exclude: Any = field(default=None, init=False, repr=False, compare=False)
    _active: bool = field(default=False, init=False, repr=False, compare=False)
    _compiled: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, key: str, value: Any) -> None:
        if self.__dict__.get("_compiled"):
            raise AttributeError(f"cannot set '{key}': filter is already compiled")
        super().__setattr__(key, value)

    @property
    def compiled(self) -> bool:
        return self._compiled

    def is_active(self) -> bool:
        """True when at least one criterion is configured."""
        if self._compiled:
            return self._active
        return any((
            self.name_pass, self.name_drop, self.field_pass, self.field_drop,
            self.tag_pass, self.tag_drop, self.tag_include, self.tag_exclude,
        ))

    def compile(self) -> "Filter":
        """
        Compile every glob criterion. Calling it again is a no-op.

        Returns:
            The filter itself

        Raises:
            FilterCompileError: If any pattern has invalid syntax
        """
        if self._compiled:
            return self

        self._active = self.is_active()
        self._name_pass = _compile("namepass", self.name_pass)
        self._name_drop = _compile("namedrop", self.name_drop)
        self._field_pass = _compile("fieldpass", self.field_pass)
        self._field_drop = _compile("fielddrop", self.field_drop)
        self._tag_include = _compile("taginclude", self.tag_include)
        self._tag_exclude = _compile("tagexclude", self.tag_exclude)
        self._tag_pass = tuple(
            (tf.name, _compile("tagpass", tf.patterns)) for tf in self.tag_pass
        )
        self._tag_drop = tuple(
            (tf.name, _compile("tagdrop", tf.patterns)) for tf in self.tag_drop
        )

        self.name_pass = tuple(self.name_pass)
        self.name_drop = tuple(self.name_drop)
        self.field_pass = tuple(self.field_pass)
        self.field_drop = tuple(self.field_drop)
        self.tag_pass = tuple(self.tag_pass)
        self.tag_drop = tuple(self.tag_drop)
        self.tag_include = tuple(self.tag_include)
        self.tag_exclude = tuple(self.tag_exclude)

        self._compiled = True
        return self

    def _require_compiled(self) -> None:
        if not self._compiled:
            raise RuntimeError("filter must be compiled before it is evaluated")

    def should_name_pass(self, name: str) -> bool:
        """Check a measurement name against namepass/namedrop."""
        self._require_compiled()
        return _pass_drop(self._name_pass, self._name_drop, name)

    def should_field_pass(self, key: str) -> bool:
        """Check a field key against fieldpass/fielddrop."""
        self._require_compiled()
        return _pass_drop(self._field_pass, self._field_drop, key)

    def should_tags_pass(self, tags: Dict[str, str]) -> bool:
        """Check a tag set against tagpass/tagdrop."""
        self._require_compiled()
        for key, matcher in self._tag_drop:
            if matcher is not None and key in tags and matcher.match(tags[key]):
                return False
        for key, matcher in self._tag_pass:
            if matcher is None or key not in tags:
                continue
            if not matcher.match(tags[key]):
                return False
        return True

    def filter_tags(self, tags: Dict[str, str]) -> Dict[str, str]:
        """Return the tags that taginclude/tagexclude keep."""
        self._require_compiled()
        return {k: v for k, v in tags.items() if self._keep_tag(k)}

    def _keep_tag(self, key: str) -> bool:
        if self._tag_include is not None and not self._tag_include.match(key):
            return False
        if self._tag_exclude is not None and self._tag_exclude.match(key):
            return False
        return True

    def apply(self, name: str, fields: Dict[str, Any], tags: Dict[str, str]) -> bool:
        """
        Evaluate one metric and prune it in place.

        Fields rejected by fieldpass/fielddrop and tag keys rejected by
        taginclude/tagexclude are removed from the given maps.

        Returns:
            False if the metric should be dropped entirely
        """
        self._require_compiled()
        if not self._active:
            return True

        if not self.should_name_pass(name):
            return False
        if not self.should_tags_pass(tags):
            return False

        for key in [k for k in fields if not self.should_field_pass(k)]:
            del fields[key]
        if not fields:
            return False

        for key in [k for k in tags if not self._keep_tag(k)]:
            del tags[key]
        return True


def _compile(criterion: str, patterns: Sequence[str]):
    try:
        return compile_filter(patterns)
    except GlobError as e:
        raise FilterCompileError(f"Error compiling '{criterion}', {e}") from e


def _pass_drop(pass_matcher: Optional[Any], drop_matcher: Optional[Any], value: str) -> bool:
    if drop_matcher is not None and drop_matcher.match(value):
        return False
    if pass_matcher is not None:
        return pass_matcher.match(value)
    return True

