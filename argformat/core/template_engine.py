"""Jinja2 adapter used by the formatter.

The formatter treats the template language as a black box: it hands the engine
a delimiter pair, a table of named functions and a current object, and the
engine parses and executes the message.

Jinja2 is configured so that placeholders behave like bare names:

- ``variable_start_string``/``variable_end_string`` are the formatter
  delimiters, so ``{p}`` is an expression with the default configuration
- placeholders are lazy; they are read when printed, accessed, filtered,
  tested, called, passed to a function or used as an operand
- ``None`` renders as empty text
- undefined names fail the render (``StrictUndefined``)

Example:
    engine = TemplateEngine()
    compiled = engine.parse("Hello {name}!", "{", "}")
    engine.execute(compiled, {"name": "Ann"}, None, sink)
"""

import functools
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from jinja2 import Environment, StrictUndefined, Template, TemplateSyntaxError, nodes
from jinja2.compiler import CodeGenerator, Frame, operators, optimizeconst
from jinja2.defaults import (
    BLOCK_START_STRING,
    COMMENT_START_STRING,
    VARIABLE_END_STRING,
    VARIABLE_START_STRING,
)
from jinja2.runtime import Context

from argformat.core.arguments import record_fields, resolve_value
from argformat.core.errors import (
    FormatError,
    FormatExecutionError,
    FormatSyntaxError,
    SinkWriteError,
)
from argformat.core.functions import merge_function_tables

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 256


class TextSink(Protocol):
    """Anything with a text ``write`` method (``io.StringIO``, ``sys.stdout``, files)."""

    def write(self, text: str, /) -> Any: ...


def _finalize(value: Any) -> Any:
    value = resolve_value(value)
    return "" if value is None else value


def _resolving(function: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a filter or test so placeholder arguments are read first.

    ``functools.wraps`` copies ``jinja_pass_arg`` so pass_context and friends
    keep working.
    """

    @functools.wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return function(
            *(resolve_value(arg) for arg in args),
            **{key: resolve_value(value) for key, value in kwargs.items()},
        )

    return wrapper


def _binop(op: str) -> Callable[["ResolvingCodeGenerator", nodes.BinExpr, Frame], None]:
    @optimizeconst
    def visitor(self: "ResolvingCodeGenerator", node: nodes.BinExpr, frame: Frame) -> None:
        self.write("(")
        self.write_resolved(node.left, frame)
        self.write(f" {op} ")
        self.write_resolved(node.right, frame)
        self.write(")")

    return visitor


def _unop(op: str) -> Callable[["ResolvingCodeGenerator", nodes.UnaryExpr, Frame], None]:
    @optimizeconst
    def visitor(self: "ResolvingCodeGenerator", node: nodes.UnaryExpr, frame: Frame) -> None:
        self.write(f"({op}")
        self.write_resolved(node.node, frame)
        self.write(")")

    return visitor


class ResolvingCodeGenerator(CodeGenerator):
    """Code generator that reads placeholder operands before applying an operator.

    Each operand is read exactly once, so ``p in [1, 2]`` or ``-p`` advance the
    automatic placeholder by one argument.
    """

    def write_resolved(self, node: nodes.Node, frame: Frame) -> None:
        self.write("environment.resolve_operand(")
        self.visit(node, frame)
        self.write(")")

    visit_Add = _binop("+")
    visit_Sub = _binop("-")
    visit_Mul = _binop("*")
    visit_Div = _binop("/")
    visit_FloorDiv = _binop("//")
    visit_Pow = _binop("**")
    visit_Mod = _binop("%")
    visit_And = _binop("and")
    visit_Or = _binop("or")
    visit_Pos = _unop("+")
    visit_Neg = _unop("-")
    visit_Not = _unop("not ")

    @optimizeconst
    def visit_Compare(self, node: nodes.Compare, frame: Frame) -> None:
        self.write("(")
        self.write_resolved(node.expr, frame)
        for op in node.ops:
            self.visit(op, frame)
        self.write(")")

    def visit_Operand(self, node: nodes.Operand, frame: Frame) -> None:
        self.write(f" {operators[node.op]} ")
        self.write_resolved(node.expr, frame)


class ResolvingContext(Context):
    """Jinja2 context that reads placeholders passed to function calls."""

    def call(__self, __obj: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:  # noqa: N805
        args = tuple(resolve_value(arg) for arg in args)
        kwargs = {key: resolve_value(value) for key, value in kwargs.items()}
        return super().call(__obj, *args, **kwargs)


class FormatterEnvironment(Environment):
    """Jinja2 environment for one delimiter pair.

    Empty delimiters stand for Jinja2's own defaults (``{{`` and ``}}``).
    """

    code_generator_class = ResolvingCodeGenerator
    context_class = ResolvingContext
    resolve_operand = staticmethod(resolve_value)

    def __init__(self, left_delimiter: str, right_delimiter: str) -> None:
        super().__init__(
            variable_start_string=left_delimiter or VARIABLE_START_STRING,
            variable_end_string=right_delimiter or VARIABLE_END_STRING,
            undefined=StrictUndefined,  # Fail on undefined placeholders and fields
            autoescape=False,  # Plain text output
            keep_trailing_newline=True,  # Literal text is reproduced exactly
            finalize=_finalize,
        )

        self.filters = {name: _resolving(f) for name, f in self.filters.items()}
        self.tests = {name: _resolving(t) for name, t in self.tests.items()}

    def getattr(self, obj: Any, attribute: str) -> Any:
        return super().getattr(resolve_value(obj), attribute)

    def getitem(self, obj: Any, argument: Any) -> Any:
        return super().getitem(resolve_value(obj), resolve_value(argument))


class RenderNamespace(Mapping[str, Any]):
    """Root lookup for a render.

    Lookup order: ``functions``, then data fields of the current object, then
    ``helpers``. Only declared fields count (dataclass fields, pydantic model
    fields, named tuple fields, ``SimpleNamespace`` attributes); methods of the
    current object are never looked up. Names starting with an underscore are
    skipped.
    """

    def __init__(
        self,
        functions: Mapping[str, Any],
        current_object: Any = None,
        helpers: Mapping[str, Any] | None = None,
    ) -> None:
        self._functions = functions
        self._current_object = current_object
        self._fields = tuple(
            name for name in record_fields(current_object) if not name.startswith("_")
        )
        self._helpers = helpers or {}

    def _has_field(self, name: str) -> bool:
        return name in self._fields

    def __getitem__(self, name: str) -> Any:
        if name in self._functions:
            return self._functions[name]
        if self._has_field(name):
            return getattr(self._current_object, name)
        if name in self._helpers:
            return self._helpers[name]
        raise KeyError(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and (
            name in self._functions or self._has_field(name) or name in self._helpers
        )

    def __iter__(self) -> Iterator[str]:
        seen = set(self._functions)
        yield from self._functions
        for name in self._fields:
            if name not in seen:
                seen.add(name)
                yield name
        yield from (name for name in self._helpers if name not in seen)

    def __len__(self) -> int:
        return sum(1 for _ in self)


@dataclass(frozen=True)
class CompiledTemplate:
    """A parsed template and the delimiters it was parsed with."""

    source: str
    left_delimiter: str
    right_delimiter: str
    template: Template


def write_output(sink: TextSink, text: str, template: str) -> None:
    """Write text to the sink.

    Raises:
        SinkWriteError: If the sink refuses the write, whatever the exception
    """
    if not text:
        return

    try:
        sink.write(text)
    except Exception as e:
        raise SinkWriteError(template, e) from e


class TemplateEngine:
    """Parses and executes formatter templates with Jinja2.

    Environments are shared per delimiter pair and compiled templates are kept
    in a bounded LRU cache. Both are immutable once built.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._environments: dict[tuple[str, str], FormatterEnvironment] = {}
        self._compile = functools.lru_cache(maxsize=cache_size)(self._compile_uncached)

    def environment(self, left_delimiter: str, right_delimiter: str) -> FormatterEnvironment:
        """Get the environment for a delimiter pair."""
        key = (left_delimiter, right_delimiter)
        env = self._environments.get(key)
        if env is None:
            env = FormatterEnvironment(left_delimiter, right_delimiter)
            self._environments[key] = env
            logger.debug("Created template environment for delimiters %r %r", *key)
        return env

    def _compile_uncached(
        self, source: str, left_delimiter: str, right_delimiter: str
    ) -> Template:
        logger.debug("Compiling template: %s...", source[:50])
        return self.environment(left_delimiter, right_delimiter).from_string(source)

    def parse(self, source: str, left_delimiter: str, right_delimiter: str) -> CompiledTemplate:
        """Compile a template.

        Args:
            source: Template text
            left_delimiter: Left expression delimiter
            right_delimiter: Right expression delimiter

        Returns:
            Compiled template

        Raises:
            FormatSyntaxError: If the template cannot be compiled
        """
        if left_delimiter in (BLOCK_START_STRING, COMMENT_START_STRING):
            error = ValueError(
                f"Left delimiter {left_delimiter!r} collides with block or comment syntax"
            )
            raise FormatSyntaxError(source, error)

        try:
            template = self._compile(source, left_delimiter, right_delimiter)
        except TemplateSyntaxError as e:
            raise FormatSyntaxError(source, e) from e

        return CompiledTemplate(
            source=source,
            left_delimiter=left_delimiter,
            right_delimiter=right_delimiter,
            template=template,
        )

    def execute(
        self,
        compiled: CompiledTemplate,
        functions: Mapping[str, Any],
        current_object: Any,
        sink: TextSink,
        helpers: Mapping[str, Any] | None = None,
    ) -> None:
        """Render a compiled template into a sink, chunk by chunk.

        Output written before a failure stays in the sink.

        Args:
            compiled: Template from ``parse``
            functions: Name -> callable table (placeholders included)
            current_object: Object whose fields resolve bare names missing from
                ``functions``, or None
            sink: Text sink
            helpers: Lowest precedence functions, layered over Jinja2's globals

        Raises:
            FormatExecutionError: If rendering fails
            SinkWriteError: If the sink refuses a write
        """
        template = compiled.template
        namespace = RenderNamespace(
            functions,
            current_object,
            merge_function_tables(template.globals, helpers or {}),
        )
        context = template.new_context(namespace, shared=True)

        for chunk in self._render(compiled, context):
            write_output(sink, chunk, compiled.source)

    def _render(self, compiled: CompiledTemplate, context: Context) -> Iterator[str]:
        """Yield output chunks; template failures become FormatExecutionError."""
        try:
            yield from compiled.template.root_render_func(context)
        except FormatError:
            raise
        except Exception as e:
            raise FormatExecutionError(compiled.source, e) from e

    def clear_cache(self) -> None:
        """Drop compiled templates."""
        self._compile.cache_clear()
