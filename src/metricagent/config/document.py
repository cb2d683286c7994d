"""
Typed accessors over a parsed configuration document.

A document is the plain ``dict`` produced by the TOML parser: tables are
dicts, arrays of tables are lists of dicts and everything else is a scalar or
a list of scalars. The accessors return None when a key is missing or holds a
value of a different shape, so callers decide whether a mismatch is ignored
or reported.
"""

from typing import Any, Dict, List, Optional

Table = Dict[str, Any]


def is_table(value: Any) -> bool:
    return isinstance(value, dict)


def is_table_array(value: Any) -> bool:
    """True for a non-empty list whose every element is a table."""
    return isinstance(value, list) and bool(value) and all(isinstance(v, dict) for v in value)


def get_string(table: Table, key: str) -> Optional[str]:
    value = table.get(key)
    return value if isinstance(value, str) else None


def get_bool(table: Table, key: str) -> Optional[bool]:
    value = table.get(key)
    return value if isinstance(value, bool) else None


def get_string_list(table: Table, key: str) -> Optional[List[str]]:
    """
    Return a list of strings stored under key.

    Non-string elements are skipped; a value that is not a list gives None.
    """
    value = table.get(key)
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def get_table(table: Table, key: str) -> Optional[Table]:
    value = table.get(key)
    return value if isinstance(value, dict) else None


def get_string_table(table: Table, key: str) -> Optional[Dict[str, str]]:
    """Return a table of string values; non-string values are skipped."""
    value = get_table(table, key)
    if value is None:
        return None
    return {k: v for k, v in value.items() if isinstance(v, str)}
