"""Tests for building whole materials from source text."""

import pytest

from smfparser.config import DEFAULT_GRAMMAR_PATH, ParserConfig
from smfparser.parser import parse_material, parse_material_file
from smfparser.parser.assembler import assemble_material
from smfparser.parser.errors import (
    ArrayLiteralNotAllowedAsParameter,
    GrammarRejected,
    InvalidArraySize,
    MalformedIndex,
    MalformedNumber,
    MaterialError,
    MissingShaderIdentifier,
    NoShaderSpecified,
    UnsupportedArrayElement,
)
from smfparser.parser.models import (
    MaterialValue,
    ParameterReference,
    ReferenceKind,
    ValueKind,
)
from smfparser.parser.syntax import NodeKind, leaf, node


class TestParseMaterial:
    """Test cases for parse_material."""

    def test_smallest_material(self, foo_source):
        """Test the shader, variables and proxy of a small material."""
        # Act
        material = parse_material(foo_source)

        # Assert
        assert material.shader == "Foo"
        assert dict(material.variables) == {
            "a": MaterialValue.integer(3),
            "b": MaterialValue.float32(1.5),
        }
        assert material.render_proxies == ()
        assert len(material.setup_proxies) == 1
        init = material.setup_proxies[0]
        assert init.name == "Init"
        assert dict(init.parameters) == {"x": ParameterReference.variable("a")}

    def test_full_material(self, full_source):
        """Test a material that uses every construct."""
        material = parse_material(full_source)

        assert material.shader == "LightmappedGeneric"
        kinds = {name: value.kind for name, value in material.variables.items()}
        assert kinds == {
            "basetexture": ValueKind.STRING,
            "alpha": ValueKind.FLOAT,
            "frame": ValueKind.INTEGER,
            "scale": ValueKind.DOUBLE,
            "bias": ValueKind.DOUBLE,
            "color": ValueKind.ARRAY3F,
            "offset": ValueKind.ARRAY4D,
            "size": ValueKind.ARRAY2,
        }
        assert material.variables["frame"].to_python() == -2
        assert material.variables["scale"].to_python() == 1000.0
        assert material.variables["size"].to_python() == (640, 480)

        assert [p.name for p in material.setup_proxies] == ["Init"]
        assert [p.name for p in material.render_proxies] == ["Sine", "Scroll", "Clamp"]

    def test_full_material_parameters(self, full_source):
        """Test every parameter shape in a full material."""
        sine, scroll, clamp = parse_material(full_source).render_proxies

        assert sine.parameters["resultVar"] == ParameterReference.variable("alpha")
        assert sine.parameters["sineperiod"] == ParameterReference.literal(
            MaterialValue.integer(8)
        )
        assert sine.parameters["sinemin"] == ParameterReference.literal(
            MaterialValue.double(-1.5)
        )
        assert scroll.parameters["rate"] == ParameterReference.array_index("offset", 2)
        assert scroll.parameters["label"] == ParameterReference.literal(
            MaterialValue.string("scroll")
        )
        assert clamp.parameters["srcVar1"].kind == ReferenceKind.ARRAY_INDEX
        assert clamp.parameters["min"].value == MaterialValue.float32(0.0)
        assert clamp.parameters["max"].value == MaterialValue.double(1.0)

    def test_references_resolve(self, full_source):
        """Test that references of a parsed material resolve to its variables."""
        material = parse_material(full_source)
        sine, scroll, clamp = material.render_proxies

        assert material.resolve(sine.parameters["resultVar"]) == (
            MaterialValue.float32(0.75)
        )
        assert material.resolve(scroll.parameters["rate"]) == MaterialValue.double(3.0)
        assert material.resolve(clamp.parameters["srcVar1"]) == (
            MaterialValue.float32(1.0)
        )

    def test_empty_material(self):
        """Test a material that only names its shader."""
        material = parse_material("Foo { }")

        assert material.shader == "Foo"
        assert material.variables == {}
        assert material.setup_proxies == ()
        assert material.render_proxies == ()

    def test_redeclared_variable(self):
        """Test that the last declaration of a variable wins."""
        material = parse_material('Foo { var a = 1; var a = "two"; }')

        assert dict(material.variables) == {"a": MaterialValue.string("two")}

    def test_multiple_proxy_blocks(self):
        """Test that repeated proxy blocks are concatenated in source order."""
        source = """
        Foo {
            SetupProxies { A { } }
            RenderProxies { R { } }
            SetupProxies { B { } C { } }
        }
        """

        material = parse_material(source)

        assert [p.name for p in material.setup_proxies] == ["A", "B", "C"]
        assert [p.name for p in material.render_proxies] == ["R"]

    def test_declarations_after_proxies(self):
        """Test that variables may follow the proxy blocks that use them."""
        material = parse_material("Foo { SetupProxies { P { x = a; } } var a = 1; }")

        proxy = material.setup_proxies[0]
        assert material.resolve(proxy.parameters["x"]) == MaterialValue.integer(1)

    def test_material_is_immutable(self, foo_source):
        """Test that a parsed material cannot be changed."""
        material = parse_material(foo_source)

        with pytest.raises(TypeError):
            material.variables["c"] = MaterialValue.integer(1)  # type: ignore[index]
        with pytest.raises(AttributeError):
            material.shader = "Bar"  # type: ignore[misc]
        with pytest.raises(TypeError):
            material.setup_proxies[0].parameters["y"] = (  # type: ignore[index]
                ParameterReference.variable("b")
            )

    @pytest.mark.parametrize(
        "source, error",
        [
            ("{ var a = 1; }", MissingShaderIdentifier),
            ("Foo { var a = [1]; }", InvalidArraySize),
            ("Foo { var a = [1, 2, 3, 4, 5]; }", InvalidArraySize),
            ('Foo { var a = [1, "x"]; }', UnsupportedArrayElement),
            ("Foo { var a = 2147483648; }", MalformedNumber),
            ("Foo { var a = 1e40f; }", MalformedNumber),
            (
                "Foo { RenderProxies { P { x = [1, 2]; } } }",
                ArrayLiteralNotAllowedAsParameter,
            ),
            ("Foo { RenderProxies { P { x = a[4294967296]; } } }", MalformedIndex),
            ("Foo { var a = ; }", GrammarRejected),
        ],
    )
    def test_invalid_materials(self, source, error):
        """Test that each kind of invalid material raises its error."""
        with pytest.raises(error):
            parse_material(source)

    def test_errors_share_base_class(self):
        """Test that every failure can be caught as MaterialError."""
        with pytest.raises(MaterialError):
            parse_material("Foo { var a = [1]; }")

    def test_error_reports_location(self):
        """Test that value errors report where the value is."""
        with pytest.raises(InvalidArraySize) as excinfo:
            parse_material("Foo {\n    var a = [1];\n}")

        assert excinfo.value.line == 2
        assert "at line 2" in str(excinfo.value)

    def test_unknown_rules_are_skipped(self, tmp_path, caplog):
        """Test that unknown top-level constructs only log a warning."""
        # Arrange
        grammar = DEFAULT_GRAMMAR_PATH.read_text(encoding="utf-8")
        grammar = grammar.replace(
            "(vardec | setupproxies | renderproxies)*",
            "(vardec | setupproxies | renderproxies | pragma)*",
        )
        grammar += '\npragma: "#pragma" IDENT ";"\n'
        grammar_path = tmp_path / "extended.lark"
        grammar_path.write_text(grammar, encoding="utf-8")
        config = ParserConfig(grammar_path=grammar_path)

        # Act
        material = parse_material("Foo { #pragma fast; var a = 1; }", config)

        # Assert
        assert dict(material.variables) == {"a": MaterialValue.integer(1)}
        assert "Unsupported rule: pragma" in caplog.text


class TestAssembleMaterial:
    """Test cases for assemble_material on hand-built trees."""

    def test_no_shader(self):
        """Test that a tree without a shader block is rejected."""
        root = node(
            NodeKind.MATERIAL,
            node(
                NodeKind.VARIABLE_DECLARATION,
                leaf(NodeKind.IDENTIFIER, "a"),
                node(NodeKind.VALUE, leaf(NodeKind.INTEGER, "1")),
            ),
        )

        with pytest.raises(NoShaderSpecified, match="No shader specified"):
            assemble_material(root)

    def test_unknown_nodes_are_skipped(self, caplog):
        """Test that unknown children of the root are skipped."""
        root = node(
            NodeKind.MATERIAL,
            node(NodeKind.SHADER_BLOCK, leaf(NodeKind.IDENTIFIER, "Foo")),
            node(NodeKind.UNKNOWN),
        )

        material = assemble_material(root)

        assert material.shader == "Foo"
        assert "Unsupported rule: unknown" in caplog.text

    def test_error_aborts_build(self):
        """Test that an error in a later declaration aborts the whole build."""
        root = node(
            NodeKind.MATERIAL,
            node(NodeKind.SHADER_BLOCK, leaf(NodeKind.IDENTIFIER, "Foo")),
            node(
                NodeKind.VARIABLE_DECLARATION,
                leaf(NodeKind.IDENTIFIER, "a"),
                node(NodeKind.VALUE, node(NodeKind.ARRAY, leaf(NodeKind.INTEGER, "1"))),
            ),
        )

        with pytest.raises(InvalidArraySize):
            assemble_material(root)


class TestParseMaterialFile:
    """Test cases for parse_material_file."""

    def test_parse_file(self, tmp_path, foo_source):
        """Test parsing a material from disk."""
        path = tmp_path / "foo.smf"
        path.write_text(foo_source, encoding="utf-8")

        material = parse_material_file(path)

        assert material.shader == "Foo"

    def test_encoding(self, tmp_path):
        """Test that the configured encoding is used."""
        path = tmp_path / "latin.smf"
        path.write_text('Foo { var name = "café"; }', encoding="latin-1")

        material = parse_material_file(path, ParserConfig(encoding="latin-1"))

        assert material.variables["name"] == MaterialValue.string("café")

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises OSError."""
        with pytest.raises(OSError):
            parse_material_file(tmp_path / "missing.smf")
