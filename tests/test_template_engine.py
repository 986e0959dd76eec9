"""Tests for the Jinja2 template engine adapter."""

import io

import pytest
from jinja2 import TemplateSyntaxError

from argformat.core.arguments import Placeholder
from argformat.core.errors import FormatExecutionError, FormatSyntaxError, SinkWriteError
from argformat.core.template_engine import (
    CompiledTemplate,
    RenderNamespace,
    TemplateEngine,
    write_output,
)
from tests.models import Account, Book, FailingSink


@pytest.fixture
def engine() -> TemplateEngine:
    return TemplateEngine(cache_size=8)


def render(engine: TemplateEngine, source: str, functions=None, current_object=None) -> str:
    sink = io.StringIO()
    compiled = engine.parse(source, "{", "}")
    engine.execute(compiled, functions or {}, current_object, sink)
    return sink.getvalue()


class TestParse:
    """Test template compilation."""

    def test_returns_compiled_template(self, engine: TemplateEngine) -> None:
        compiled = engine.parse("Hi {name}", "{", "}")

        assert isinstance(compiled, CompiledTemplate)
        assert compiled.source == "Hi {name}"
        assert (compiled.left_delimiter, compiled.right_delimiter) == ("{", "}")

    def test_syntax_error_wraps_jinja_error(self, engine: TemplateEngine) -> None:
        with pytest.raises(FormatSyntaxError) as exc_info:
            engine.parse("{p", "{", "}")

        assert isinstance(exc_info.value.original_error, TemplateSyntaxError)
        assert exc_info.value.template == "{p"

    def test_unclosed_block(self, engine: TemplateEngine) -> None:
        with pytest.raises(FormatSyntaxError):
            engine.parse("{% if p %}open", "{", "}")

    @pytest.mark.parametrize("left", ["{%", "{#"])
    def test_delimiter_collision(self, engine: TemplateEngine, left: str) -> None:
        with pytest.raises(FormatSyntaxError, match="collides"):
            engine.parse("text", left, "}")

    def test_empty_delimiters_use_jinja_defaults(self, engine: TemplateEngine) -> None:
        sink = io.StringIO()
        compiled = engine.parse("{{ name }}", "", "")
        engine.execute(compiled, {"name": "Ann"}, None, sink)

        assert sink.getvalue() == "Ann"

    def test_compiled_templates_are_cached(self, engine: TemplateEngine) -> None:
        first = engine.parse("{p}", "{", "}")
        second = engine.parse("{p}", "{", "}")

        assert first.template is second.template

    def test_cache_keyed_by_delimiters(self, engine: TemplateEngine) -> None:
        braces = engine.parse("{p}", "{", "}")
        angles = engine.parse("{p}", "<", ">")

        assert braces.template is not angles.template

    def test_clear_cache(self, engine: TemplateEngine) -> None:
        first = engine.parse("{p}", "{", "}")
        engine.clear_cache()

        assert engine.parse("{p}", "{", "}").template is not first.template

    def test_environment_shared_per_delimiters(self, engine: TemplateEngine) -> None:
        assert engine.environment("{", "}") is engine.environment("{", "}")
        assert engine.environment("{", "}") is not engine.environment("[", "]")


class TestExecute:
    """Test rendering into a sink."""

    def test_functions_and_literals(self, engine: TemplateEngine) -> None:
        assert render(engine, "Hi {name}!", {"name": "Ann"}) == "Hi Ann!"

    def test_none_renders_empty(self, engine: TemplateEngine) -> None:
        assert render(engine, "[{value}]", {"value": None}) == "[]"

    def test_placeholder_read_on_output(self, engine: TemplateEngine) -> None:
        reads = []
        placeholder = Placeholder("p", lambda: reads.append(1) or "v")

        assert render(engine, "{p}{p}", {"p": placeholder}) == "vv"
        assert len(reads) == 2

    def test_placeholder_passed_to_function(self, engine: TemplateEngine) -> None:
        functions = {
            "p": Placeholder("p", lambda: "v"),
            "wrap": lambda value: f"<{value!r}>",
        }

        assert render(engine, "{wrap(p)}", functions) == "<'v'>"

    def test_placeholder_attribute_and_filter(self, engine: TemplateEngine) -> None:
        book = Book("Dune", "Herbert")
        functions = {"p0": Placeholder("p0", lambda: book)}

        assert render(engine, "{p0.title | upper}", functions) == "DUNE"

    def test_current_object_fields(self, engine: TemplateEngine) -> None:
        book = Book("Dune", "Herbert")

        assert render(engine, "{title}/{author}", current_object=book) == "Dune/Herbert"

    def test_undefined_name_fails(self, engine: TemplateEngine) -> None:
        with pytest.raises(FormatExecutionError):
            render(engine, "{missing}")

    def test_function_error_wrapped(self, engine: TemplateEngine) -> None:
        def broken() -> str:
            raise KeyError("nope")

        with pytest.raises(FormatExecutionError) as exc_info:
            render(engine, "{broken()}", {"broken": broken})

        assert isinstance(exc_info.value.original_error, KeyError)

    def test_helpers_have_lowest_precedence(self, engine: TemplateEngine) -> None:
        sink = io.StringIO()
        compiled = engine.parse("{name}-{extra}", "{", "}")
        engine.execute(
            compiled,
            {"name": "fn"},
            None,
            sink,
            helpers={"name": "helper", "extra": "helper"},
        )

        assert sink.getvalue() == "fn-helper"

    def test_sink_error(self, engine: TemplateEngine) -> None:
        compiled = engine.parse("text", "{", "}")

        with pytest.raises(SinkWriteError):
            engine.execute(compiled, {}, None, FailingSink(limit=0))

    def test_sink_type_error_is_not_a_render_error(self, engine: TemplateEngine) -> None:
        compiled = engine.parse("text", "{", "}")

        with pytest.raises(SinkWriteError):
            engine.execute(compiled, {}, None, io.BytesIO())


class TestRenderNamespace:
    """Test root name lookup order."""

    def test_lookup_order(self) -> None:
        book = Book("Dune", "Herbert")
        namespace = RenderNamespace(
            {"title": "function"},
            book,
            {"title": "helper", "author": "helper", "upper": "helper"},
        )

        assert namespace["title"] == "function"
        assert namespace["author"] == "Herbert"
        assert namespace["upper"] == "helper"

    def test_private_fields_hidden(self) -> None:
        namespace = RenderNamespace({}, Book("Dune", "Herbert"))

        assert "__class__" not in namespace
        with pytest.raises(KeyError):
            namespace["__class__"]

    def test_methods_are_not_fields(self) -> None:
        namespace = RenderNamespace({}, Account(owner="Ann", balance=1), {"json": "helper"})

        assert namespace["json"] == "helper"
        assert namespace["owner"] == "Ann"
        assert "copy" not in namespace
        assert "copy" not in list(namespace)

    def test_missing_name(self) -> None:
        namespace = RenderNamespace({}, None)

        assert "anything" not in namespace
        with pytest.raises(KeyError):
            namespace["anything"]

    def test_iteration_has_no_duplicates(self) -> None:
        namespace = RenderNamespace({"title": 1}, Book("Dune", "Herbert"), {"title": 2, "x": 3})
        names = list(namespace)

        assert len(names) == len(set(names))
        assert {"title", "author", "x"} <= set(names)
        assert len(namespace) == len(names)


class TestWriteOutput:
    """Test the sink write helper."""

    def test_skips_empty_text(self) -> None:
        sink = FailingSink(limit=0)

        write_output(sink, "", "template")

        assert sink.written == []

    def test_wraps_value_error(self) -> None:
        sink = io.StringIO()
        sink.close()

        with pytest.raises(SinkWriteError) as exc_info:
            write_output(sink, "text", "template")

        assert isinstance(exc_info.value.original_error, ValueError)

    def test_wraps_any_exception(self) -> None:
        with pytest.raises(SinkWriteError) as exc_info:
            write_output(io.BytesIO(), "text", "template")

        assert isinstance(exc_info.value.original_error, TypeError)


class TestResolvingCodeGenerator:
    """Test that operator operands are read once."""

    def test_operand_read_once(self, engine: TemplateEngine) -> None:
        reads = []
        functions = {"p": Placeholder("p", lambda: reads.append(1) or 5)}

        assert render(engine, "{p in [1, 2, 3, 4]}", functions) == "False"
        assert len(reads) == 1

    def test_unary_and_power(self, engine: TemplateEngine) -> None:
        functions = {"p0": Placeholder("p0", lambda: 3)}

        assert render(engine, "{ -p0 }/{p0 ** 2}/{p0 // 2}", functions) == "-3/9/1"

    def test_constants_still_fold(self, engine: TemplateEngine) -> None:
        assert render(engine, "{1 + 2}") == "3"
