"""Classification of proxy parameter values."""

import re

from smfparser.parser.errors import (
    ArrayLiteralNotAllowedAsParameter,
    ExpectedIdentifier,
    InvalidReferenceShape,
    MalformedIndex,
)
from smfparser.parser.models import ParameterReference
from smfparser.parser.syntax import NUMERIC_KINDS, NodeKind, SyntaxNode
from smfparser.parser.values import interpret_value, unwrap_value

_UINT32_MAX = 2**32 - 1
_INDEX_RE = re.compile(r"[0-9]+")


def identifier_text(node: SyntaxNode | None, context: str) -> str:
    """Return the text of an identifier node.

    Raises:
        ExpectedIdentifier: If the node is missing or not an identifier
    """
    if node is None or node.kind != NodeKind.IDENTIFIER:
        found = node.kind.name if node is not None else "nothing"
        raise ExpectedIdentifier(f"Expected identifier in {context}, got {found}", node)
    return node.text


def parse_index(node: SyntaxNode | None, owner: SyntaxNode) -> int:
    """Parse an array index as an unsigned 32-bit integer."""
    if node is None:
        raise MalformedIndex("Missing array index", owner)
    if not _INDEX_RE.fullmatch(node.text) or int(node.text) > _UINT32_MAX:
        raise MalformedIndex(f"Invalid array index: {node.text!r}", node)
    return int(node.text)


def resolve_reference(node: SyntaxNode) -> ParameterReference:
    """Classify the right-hand side of a proxy parameter.

    Args:
        node: Variable reference, indexed reference or literal value node

    Returns:
        A VARIABLE, ARRAY_INDEX or LITERAL reference

    Raises:
        ArrayLiteralNotAllowedAsParameter: If the value is an array literal
        MalformedIndex: If an array index is not an unsigned 32-bit integer
        InvalidReferenceShape: For any other node
    """
    match node.kind:
        case NodeKind.IDENTIFIER:
            return ParameterReference.variable(node.text)

        case NodeKind.VARIABLE_REFERENCE:
            name = node.children[0] if node.children else None
            name_text = identifier_text(name, "variable reference")
            return ParameterReference.variable(name_text)

        case NodeKind.ARRAY_INDEX_REFERENCE:
            children = list(node.children)
            name = identifier_text(children[0] if children else None, "array reference")
            index = parse_index(children[1] if len(children) > 1 else None, node)
            return ParameterReference.array_index(name, index)

        case NodeKind.VALUE | NodeKind.ARRAY | NodeKind.STRING:
            literal = unwrap_value(node)
            if literal.kind == NodeKind.ARRAY:
                raise ArrayLiteralNotAllowedAsParameter(
                    "Array literals are only allowed in variable declarations; "
                    "declare a variable and reference it instead",
                    literal,
                )
            if literal.kind != NodeKind.STRING and literal.kind not in NUMERIC_KINDS:
                raise InvalidReferenceShape(
                    f"Invalid proxy parameter value: {literal.kind.name}", literal
                )
            return ParameterReference.literal(interpret_value(literal))

        case kind if kind in NUMERIC_KINDS:
            return ParameterReference.literal(interpret_value(node))

        case _:
            raise InvalidReferenceShape(
                f"Invalid proxy parameter value: {node.kind.name}", node
            )
