"""Argument resolution: which placeholder names each argument satisfies.

Each argument passed to ``Formatter.format`` is classified once into an
``ArgumentKind`` and contributes placeholders accordingly:

- every argument: a positional placeholder ``{p0}``, ``{p1}``, ...
- all arguments in order: the automatic placeholder ``{p}``
- ``NAMED`` mappings: one placeholder per key, ``{name}``
- ``RECORD`` values: the current object, whose fields are referenced bare

Placeholders are lazy. An argument is only marked consumed when the template
actually reads a placeholder bound to it.

Caveat: when several ``RECORD`` arguments are passed, only the last one becomes
the current object. Earlier records are silently demoted and stay reachable
through their positional placeholder only.
"""

import dataclasses
import logging
import operator
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from types import SimpleNamespace
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Named(dict):
    """Explicit named arguments.

    Example:
        format("{greeting}, {name}", Named(greeting="Hello", name="Ann"))
    """


class ArgumentKind(Enum):
    """What an argument contributes to the placeholder set, in priority order."""

    ERROR = auto()  # exceptions: positional only
    NAMED = auto()  # str-keyed mappings: positional + one name per key
    RECORD = auto()  # dataclasses, pydantic models, named tuples: positional + current object
    SCALAR = auto()  # everything else: positional only


def _is_record(value: Any) -> bool:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    if isinstance(value, BaseModel | SimpleNamespace):
        return True
    # Named tuples
    return isinstance(value, tuple) and hasattr(value, "_fields")


def record_fields(value: Any) -> tuple[str, ...]:
    """Names of the data fields of a record.

    Methods and other attributes are not fields. Values that are not records
    have no fields.

    Args:
        value: Any runtime value

    Returns:
        Field names in declaration order
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return tuple(f.name for f in dataclasses.fields(value))
    if isinstance(value, BaseModel):
        model = type(value)
        extra = value.model_extra or {}
        return (*model.model_fields, *model.model_computed_fields, *extra)
    if isinstance(value, SimpleNamespace):
        return tuple(vars(value))
    if isinstance(value, tuple) and hasattr(value, "_fields"):
        return tuple(value._fields)
    return ()


def classify_argument(value: Any) -> ArgumentKind:
    """Classify an argument.

    Args:
        value: Any runtime value

    Returns:
        The first matching kind: ERROR, NAMED, RECORD, then SCALAR
    """
    if isinstance(value, BaseException):
        return ArgumentKind.ERROR
    if isinstance(value, Mapping) and all(isinstance(key, str) for key in value):
        return ArgumentKind.NAMED
    if _is_record(value):
        return ArgumentKind.RECORD
    return ArgumentKind.SCALAR


def _forward(op: Callable[[Any, Any], Any]) -> Callable[["Placeholder", Any], Any]:
    def method(self: "Placeholder", other: Any) -> Any:
        return op(self(), resolve_value(other))

    return method


def _reflected(op: Callable[[Any, Any], Any]) -> Callable[["Placeholder", Any], Any]:
    def method(self: "Placeholder", other: Any) -> Any:
        return op(resolve_value(other), self())

    return method


class Placeholder:
    """Lazy reference to an argument value.

    Calling the placeholder reads the value and records consumption. The
    template engine calls it whenever a template uses the value; converting,
    iterating, comparing or applying an operator to the placeholder reads it
    as well.
    """

    __slots__ = ("_read", "name")

    def __init__(self, name: str, read: Callable[[], Any]) -> None:
        self.name = name
        self._read = read

    def __call__(self) -> Any:
        return self._read()

    def __str__(self) -> str:
        value = self()
        return "" if value is None else str(value)

    def __bool__(self) -> bool:
        return bool(self())

    def __iter__(self) -> Iterator[Any]:
        return iter(self())

    def __len__(self) -> int:
        return len(self())

    def __getitem__(self, key: Any) -> Any:
        return self()[resolve_value(key)]

    def __contains__(self, item: Any) -> bool:
        return resolve_value(item) in self()

    def __int__(self) -> int:
        return int(self())

    def __float__(self) -> float:
        return float(self())

    def __index__(self) -> int:
        return operator.index(self())

    def __format__(self, format_spec: str) -> str:
        return format(self(), format_spec)

    def __neg__(self) -> Any:
        return -self()

    def __pos__(self) -> Any:
        return +self()

    def __abs__(self) -> Any:
        return abs(self())

    __eq__ = _forward(operator.eq)
    __ne__ = _forward(operator.ne)
    __lt__ = _forward(operator.lt)
    __le__ = _forward(operator.le)
    __gt__ = _forward(operator.gt)
    __ge__ = _forward(operator.ge)
    __add__ = _forward(operator.add)
    __sub__ = _forward(operator.sub)
    __mul__ = _forward(operator.mul)
    __truediv__ = _forward(operator.truediv)
    __floordiv__ = _forward(operator.floordiv)
    __mod__ = _forward(operator.mod)
    __pow__ = _forward(operator.pow)
    __radd__ = _reflected(operator.add)
    __rsub__ = _reflected(operator.sub)
    __rmul__ = _reflected(operator.mul)
    __rtruediv__ = _reflected(operator.truediv)
    __rfloordiv__ = _reflected(operator.floordiv)
    __rmod__ = _reflected(operator.mod)
    __rpow__ = _reflected(operator.pow)
    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"Placeholder({self.name!r})"


def resolve_value(value: Any) -> Any:
    """Read a placeholder; any other value is returned unchanged."""
    if isinstance(value, Placeholder):
        return value()
    return value


@dataclass
class ResolutionContext:
    """Per-call resolution state.

    Attributes:
        arguments: The arguments, in call order
        kinds: Classification of each argument
        placeholders: Placeholder name -> lazy placeholder
        current_object: The last RECORD argument, or None
        consumed: Indices of arguments read during rendering
        cursor: Next index returned by the automatic placeholder
    """

    arguments: tuple[Any, ...]
    kinds: tuple[ArgumentKind, ...]
    placeholders: dict[str, Placeholder] = field(default_factory=dict)
    current_object: Any = None
    consumed: set[int] = field(default_factory=set)
    cursor: int = 0

    def read_automatic(self) -> Any:
        """Return the next argument, or None once all have been returned."""
        if self.cursor >= len(self.arguments):
            return None

        position = self.cursor
        self.cursor += 1
        self.consumed.add(position)
        return self.arguments[position]

    def read_position(self, position: int) -> Any:
        self.consumed.add(position)
        return self.arguments[position]

    def read_named(self, position: int, value: Any) -> Any:
        self.consumed.add(position)
        return value

    def is_consumed(self, position: int) -> bool:
        """Whether the argument at ``position`` counts as used.

        NAMED and RECORD arguments always count as used.
        """
        if self.kinds[position] in (ArgumentKind.NAMED, ArgumentKind.RECORD):
            return True
        return position in self.consumed


def resolve_arguments(arguments: Sequence[Any], prefix: str) -> ResolutionContext:
    """Build the placeholders and current object for one format call.

    Later declarations win: a mapping key replaces an earlier placeholder of the
    same name, including positional and automatic ones.

    Args:
        arguments: Arguments in call order
        prefix: Placeholder prefix (automatic name, positional name prefix)

    Returns:
        Fresh resolution context
    """
    arguments = tuple(arguments)
    ctx = ResolutionContext(
        arguments=arguments,
        kinds=tuple(classify_argument(argument) for argument in arguments),
    )

    ctx.placeholders[prefix] = Placeholder(prefix, ctx.read_automatic)

    for position, (argument, kind) in enumerate(zip(arguments, ctx.kinds, strict=True)):
        name = f"{prefix}{position}"
        ctx.placeholders[name] = Placeholder(name, lambda i=position: ctx.read_position(i))

        if kind is ArgumentKind.NAMED:
            for key, value in argument.items():
                ctx.placeholders[key] = Placeholder(
                    key, lambda i=position, v=value: ctx.read_named(i, v)
                )
        elif kind is ArgumentKind.RECORD:
            if ctx.current_object is not None:
                logger.debug(
                    "Argument %d replaces %s as current object",
                    position,
                    type(ctx.current_object).__name__,
                )
            ctx.current_object = argument

    return ctx
