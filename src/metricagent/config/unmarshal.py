"""
Assignment of the plugin-private keys of a table onto a plugin instance.

After the builders have removed every control key, whatever remains in a
plugin's table is assigned onto the instance by attribute name. Plugins are
dataclasses, so the target's fields define what is accepted and each value
must match its field's annotation; for other objects any existing public
attribute may be set.
"""

import dataclasses
import logging
import typing
from datetime import timedelta
from typing import Any, Dict

from ..validation import ConfigValueError, ValidationError, coerce_duration

logger = logging.getLogger(__name__)


def _is_duration(annotation: Any) -> bool:
    if annotation is timedelta:
        return True
    return timedelta in typing.get_args(annotation)


def _settable_fields(target: Any) -> Dict[str, Any]:
    """Map of assignable attribute name to its annotation (or None)."""
    if dataclasses.is_dataclass(target):
        try:
            hints = typing.get_type_hints(type(target))
        except NameError:
            hints = {}
        return {
            f.name: hints.get(f.name, f.type)
            for f in dataclasses.fields(target) if f.init
        }
    return {
        name: None for name in vars(target)
        if not name.startswith("_")
    }


def _matches(annotation: Any, value: Any) -> bool:
    """
    Check a value against a field annotation.

    Covers the shapes plugin options use: scalars, lists, string maps and
    Optional/Union of those. Annotations outside that set accept anything.
    """
    if annotation is None or annotation is Any:
        return True
    if annotation is type(None):
        return value is None
    if annotation is bool:
        return isinstance(value, bool)
    if annotation is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if annotation is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if annotation is str:
        return isinstance(value, str)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin is typing.Union:
        return any(_matches(arg, value) for arg in args)
    if origin is list:
        if not isinstance(value, list):
            return False
        return not args or all(_matches(args[0], item) for item in value)
    if origin is dict:
        if not isinstance(value, dict):
            return False
        return not args or all(
            _matches(args[0], k) and _matches(args[1], v) for k, v in value.items()
        )
    if origin is None and isinstance(annotation, type):
        return isinstance(value, annotation)
    return True


def _type_name(annotation: Any) -> str:
    if isinstance(annotation, type):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def unmarshal_table(table: Dict[str, Any], target: Any, plugin: str = "") -> None:
    """
    Assign every key of a table onto the matching field of target.

    Args:
        table: Remaining plugin-private keys
        target: Plugin instance to configure
        plugin: Plugin name, used in error messages

    Raises:
        ConfigValueError: If a key has no matching field, a duration field
            holds a value that cannot be converted, or a value does not have
            the type of its field
    """
    fields = _settable_fields(target)
    for key, value in table.items():
        if key not in fields:
            raise ConfigValueError(
                f"plugin {plugin}: field corresponding to '{key}' is not defined in {type(target).__name__}",
                plugin=plugin,
            )
        annotation = fields[key]
        if _is_duration(annotation):
            try:
                value = coerce_duration(value, field_name=key)
            except ValidationError as e:
                raise ConfigValueError(f"plugin {plugin}: {e}", plugin=plugin) from e
        elif not _matches(annotation, value):
            raise ConfigValueError(
                f"plugin {plugin}: cannot assign {type(value).__name__} value {value!r} "
                f"to field '{key}' of type {_type_name(annotation)}",
                plugin=plugin,
            )
        setattr(target, key, value)
        logger.debug(f"Set {plugin}.{key} = {value!r}")
