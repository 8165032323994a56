"""
Material description parser.

This module provides the top-level interface for turning material source text
into a :class:`MaterialFile`.
"""

from pathlib import Path

from loguru import logger

from smfparser.config import ParserConfig
from smfparser.parser.assembler import assemble_material
from smfparser.parser.errors import MaterialError
from smfparser.parser.models import (
    MaterialFile,
    MaterialProxy,
    MaterialValue,
    ParameterReference,
    ReferenceKind,
    ValueKind,
)
from smfparser.parser.syntax import parse_tree


def parse_material(text: str, config: ParserConfig | None = None) -> MaterialFile:
    """Parse material source text.

    Args:
        text: Material source text
        config: Parser configuration (defaults to the packaged grammar)

    Returns:
        The parsed material

    Raises:
        MaterialError: If the text is not a valid material description

    Examples:
        material = parse_material('Foo { var a = 3; }')
        assert material.shader == "Foo"
    """
    tree = parse_tree(text, config)
    return assemble_material(tree)


def parse_material_file(
    path: str | Path, config: ParserConfig | None = None
) -> MaterialFile:
    """Read and parse a material file.

    Args:
        path: Path of the ``.smf`` file
        config: Parser configuration

    Returns:
        The parsed material
    """
    config = config or ParserConfig()
    logger.info(f"Parsing material file {path}")
    text = Path(path).read_text(encoding=config.encoding)
    return parse_material(text, config)


__all__ = [
    "MaterialError",
    "MaterialFile",
    "MaterialProxy",
    "MaterialValue",
    "ParameterReference",
    "ReferenceKind",
    "ValueKind",
    "parse_material",
    "parse_material_file",
]
