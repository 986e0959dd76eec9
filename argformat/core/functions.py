"""Template functions: built-in helpers and the per-formatter registry.

Built-in helpers are process-wide and read-only. User functions live in a
``FunctionRegistry`` owned by a single ``Formatter``.

Example:
    registry = FunctionRegistry()
    registry.add("shout", lambda value: f"{value}!")

    table = merge_function_tables(BUILTIN_FUNCTIONS, placeholders, registry.as_dict())
"""

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

Functions = dict[str, Callable[..., Any]]


def _quote(value: Any) -> str:
    return json.dumps(str(value), ensure_ascii=False)


def _join(values: Iterable[Any], separator: str = ", ") -> str:
    return separator.join(str(value) for value in values)


def _json(value: Any, indent: int | None = None) -> str:
    return json.dumps(value, indent=indent, default=str, ensure_ascii=False)


def _pad_left(value: Any, width: int, fill: str = " ") -> str:
    return str(value).rjust(width, fill)


def _pad_right(value: Any, width: int, fill: str = " ") -> str:
    return str(value).ljust(width, fill)


BUILTIN_FUNCTIONS: Mapping[str, Callable[..., Any]] = MappingProxyType(
    {
        "upper": lambda value: str(value).upper(),
        "lower": lambda value: str(value).lower(),
        "title": lambda value: str(value).title(),
        "trim": lambda value: str(value).strip(),
        "quote": _quote,
        "join": _join,
        "json": _json,
        "repr": repr,
        "str": str,
        "len": len,
        "pad_left": _pad_left,
        "pad_right": _pad_right,
    }
)


class FunctionRegistry:
    """Mutable name -> callable table for user-registered template functions."""

    def __init__(self, functions: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._functions: Functions = dict(functions or {})

    def add(self, name: str, function: Callable[..., Any]) -> None:
        """Register a function, replacing any previous one with the same name."""
        self._functions[name] = function

    def add_many(self, functions: Mapping[str, Callable[..., Any]]) -> None:
        """Register every function in ``functions``."""
        for name, function in functions.items():
            self.add(name, function)

    def replace(self, functions: Mapping[str, Callable[..., Any]]) -> None:
        """Replace the whole table with ``functions``."""
        self._functions = dict(functions)

    def remove(self, name: str) -> None:
        """Remove a function. Unknown names are ignored."""
        if name not in self._functions:
            logger.debug("Function %r not registered, nothing to remove", name)
            return

        del self._functions[name]

    def remove_many(self, names: Iterable[str]) -> None:
        """Remove every function in ``names``."""
        for name in names:
            self.remove(name)

    def reset(self) -> None:
        """Remove all registered functions."""
        self._functions = {}

    def get(self, name: str) -> Callable[..., Any] | None:
        """Get a registered function, or None."""
        return self._functions.get(name)

    def as_dict(self) -> Functions:
        """Return a copy of the registered functions."""
        return dict(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)


def merge_function_tables(*tables: Mapping[str, Callable[..., Any]]) -> Functions:
    """Merge function tables in increasing precedence.

    A name defined in a later table replaces the same name from an earlier one.

    Args:
        *tables: Function tables, lowest precedence first

    Returns:
        New merged table
    """
    merged: Functions = {}
    for table in tables:
        merged.update(table)
    return merged
