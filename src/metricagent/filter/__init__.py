"""
Glob matching used by metric filters.
"""

from .glob import (
    ExactMatcher,
    GlobError,
    GlobMatcher,
    compile_filter,
    compile_glob,
    expand_braces,
    has_meta,
)

__all__ = [
    "ExactMatcher",
    "GlobError",
    "GlobMatcher",
    "compile_filter",
    "compile_glob",
    "expand_braces",
    "has_meta",
]
