"""
Interpretation of literal values.

Scalars are typed by the suffix and lexical class of their literal text:

- ``1.5f`` is a 32-bit float, ``1.5d`` a 64-bit double (suffix stripped)
- unsuffixed non-integral text (``1.5``, ``1e3``) is a double
- integral text (``3``, ``-3``) is a 32-bit signed integer

Arrays of 2 to 4 numbers are unified to the widest element type present
(integer < float < double) and every element is re-parsed at that width.
"""

import math
import re
from enum import IntEnum

import numpy as np
from loguru import logger

from smfparser.parser.errors import (
    AmbiguousArrayElementType,
    InvalidArraySize,
    MalformedNumber,
    UnsupportedArrayElement,
    UnsupportedValueKind,
)
from smfparser.parser.models import ARRAY_SIZES, MaterialValue
from smfparser.parser.syntax import NUMERIC_KINDS, NodeKind, SyntaxNode


class NumericWidth(IntEnum):
    """Numeric representations, ordered from narrowest to widest."""

    INTEGER = 1
    FLOAT = 2
    DOUBLE = 3


_KIND_WIDTHS = {
    NodeKind.INTEGER: NumericWidth.INTEGER,
    NodeKind.SIGNED_INTEGER: NumericWidth.INTEGER,
    NodeKind.FLOAT: NumericWidth.FLOAT,
    NodeKind.DOUBLE: NumericWidth.DOUBLE,
    NodeKind.NON_INT: NumericWidth.DOUBLE,
    NodeKind.SIGNED_NON_INT: NumericWidth.DOUBLE,
}

_DTYPES = {
    NumericWidth.INTEGER: np.int32,
    NumericWidth.FLOAT: np.float32,
    NumericWidth.DOUBLE: np.float64,
}

_INT32 = np.iinfo(np.int32)

_INTEGRAL_RE = re.compile(r"[+-]?[0-9]+")
_NON_INTEGRAL_RE = re.compile(
    r"[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?[0-9]+[eE][+-]?[0-9]+"
)
_SUFFIXES = {"f": NumericWidth.FLOAT, "d": NumericWidth.DOUBLE}

_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r"}


def lexical_width(text: str) -> NumericWidth | None:
    """Classify numeric literal text by its suffix and lexical form.

    Returns None when the text is not a numeric literal at all.
    """
    if text and text[-1] in _SUFFIXES:
        digits = text[:-1]
        if _INTEGRAL_RE.fullmatch(digits) or _NON_INTEGRAL_RE.fullmatch(digits):
            return _SUFFIXES[text[-1]]
        return None
    if _INTEGRAL_RE.fullmatch(text):
        return NumericWidth.INTEGER
    if _NON_INTEGRAL_RE.fullmatch(text):
        return NumericWidth.DOUBLE
    return None


def strip_suffix(text: str) -> str:
    """Remove a trailing ``f`` or ``d`` type suffix."""
    return text[:-1] if text and text[-1] in _SUFFIXES else text


def parse_number(node: SyntaxNode, width: NumericWidth) -> np.generic:
    """Parse the text of a numeric node at the given width.

    The node's own suffix is always stripped, so ``2.0f`` can be read as a
    double and ``1`` as a float.

    Raises:
        MalformedNumber: If the text does not fit the target width
    """
    digits = strip_suffix(node.text)

    if width == NumericWidth.INTEGER:
        try:
            value = int(digits)
        except ValueError:
            raise MalformedNumber(f"Invalid integer: {node.text}", node) from None
        if not _INT32.min <= value <= _INT32.max:
            raise MalformedNumber(
                f"Integer {node.text} out of range for a 32-bit integer", node
            )
        return np.int32(value)

    try:
        value = float(digits)
    except ValueError:
        raise MalformedNumber(
            f"Invalid {width.name.lower()} literal: {node.text}", node
        ) from None
    with np.errstate(over="ignore"):
        result = _DTYPES[width](value)
    if np.isinf(result) and not math.isinf(value):
        raise MalformedNumber(
            f"{node.text} out of range for a {width.name.lower()}", node
        )
    return result


def decode_string(text: str) -> str:
    """Return the inner content of a quoted string literal with escapes decoded."""
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        text = text[1:-1]
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


def unwrap_value(node: SyntaxNode) -> SyntaxNode:
    """Return the literal inside a VALUE wrapper node (or the node itself)."""
    if node.kind == NodeKind.VALUE:
        if len(node.children) != 1:
            raise UnsupportedValueKind("Value node must hold exactly one literal", node)
        return node.children[0]
    return node


def interpret_value(node: SyntaxNode) -> MaterialValue:
    """Convert a string or numeric leaf into a scalar value.

    Args:
        node: STRING or numeric leaf (a VALUE wrapper is unwrapped)

    Returns:
        A STRING, INTEGER, FLOAT or DOUBLE value

    Raises:
        MalformedNumber: If the number does not parse at its width
        UnsupportedValueKind: If the node is not a string or a number
    """
    node = unwrap_value(node)

    match node.kind:
        case NodeKind.STRING:
            return MaterialValue.string(decode_string(node.text))
        case kind if kind in NUMERIC_KINDS:
            width = _KIND_WIDTHS[kind]
            if lexical_width(node.text) != width:
                raise MalformedNumber(
                    f"Literal {node.text!r} is not a valid {kind.name.lower()}", node
                )
            return MaterialValue.scalar(parse_number(node, width))
        case _:
            raise UnsupportedValueKind(
                f"Unsupported value kind: {node.kind.name}", node
            )


def _classify_element(element: SyntaxNode) -> NumericWidth:
    if element.kind not in NUMERIC_KINDS:
        raise UnsupportedArrayElement(
            f"Array elements must be numbers, got {element.kind.name}", element
        )
    width = _KIND_WIDTHS[element.kind]
    if lexical_width(element.text) != width:
        raise AmbiguousArrayElementType(
            f"Cannot determine the type of array element {element.text!r}", element
        )
    return width


def unify_array(node: SyntaxNode) -> MaterialValue:
    """Convert an array literal into a homogeneous array value.

    Element types are widened left to right (integer < float < double), then
    every element is parsed again at the final width.

    Args:
        node: ARRAY node (a VALUE wrapper is unwrapped)

    Returns:
        One of the ARRAY2..ARRAY4D values

    Raises:
        InvalidArraySize: If the array does not have 2, 3 or 4 elements
        UnsupportedArrayElement: If an element is not numeric
        AmbiguousArrayElementType: If an element's kind and text disagree
        MalformedNumber: If an element does not fit the unified width
    """
    node = unwrap_value(node)
    if node.kind != NodeKind.ARRAY:
        raise UnsupportedValueKind(f"Expected an array, got {node.kind.name}", node)

    elements = [unwrap_value(child) for child in node.children]
    if len(elements) not in ARRAY_SIZES:
        raise InvalidArraySize(
            f"Arrays must have 2, 3 or 4 elements, got {len(elements)}", node
        )

    width: NumericWidth | None = None
    for element in elements:
        element_width = _classify_element(element)
        if width is None or element_width > width:
            width = element_width

    data = np.array([parse_number(e, width) for e in elements], dtype=_DTYPES[width])
    logger.debug(f"Unified array of {len(elements)} elements to {width.name}")
    return MaterialValue.array(data)


def interpret_literal(node: SyntaxNode) -> MaterialValue:
    """Interpret a scalar or array literal, as found in a variable declaration."""
    node = unwrap_value(node)
    if node.kind == NodeKind.ARRAY:
        return unify_array(node)
    return interpret_value(node)
