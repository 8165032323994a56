"""
Exceptions raised while building a material.

Every failure is reported as a subclass of :class:`MaterialError`. Errors carry
the offending parse-tree node when one is known and append its source position
to the message.
"""

from typing import Any


class MaterialError(Exception):
    """Base exception for errors while parsing a material description.

    Examples:
        >>> raise MaterialError("Invalid value")
        MaterialError: Invalid value
    """

    def __init__(
        self,
        message: str,
        node: Any | None = None,
        line: int | None = None,
        column: int | None = None,
    ):
        """Initialize the exception with a message and optional location.

        Args:
            message: The error message
            node: Optional parse-tree node where the error occurred
            line: Source line, used when no node is given
            column: Source column, used when no node is given
        """
        self.message = message
        self.node = node
        self.line = getattr(node, "line", None) if node is not None else line
        self.column = getattr(node, "column", None) if node is not None else column

        location_info = ""
        if self.line is not None and self.line > 0:
            location_info = f" at line {self.line}"
            if self.column is not None and self.column > 0:
                location_info += f", column {self.column}"

        super().__init__(f"{message}{location_info}")


class GrammarRejected(MaterialError):
    """The source text does not match the material grammar."""


class MissingShaderIdentifier(MaterialError):
    """The shader block is absent or empty."""


class ExpectedIdentifier(MaterialError):
    """An identifier token was expected but something else was found."""


class NoShaderSpecified(MaterialError):
    """The whole description was consumed without naming a shader."""


class MalformedNumber(MaterialError):
    """A numeric literal does not parse at its target width."""


class UnsupportedValueKind(MaterialError):
    """A value node is neither a string nor a number."""


class InvalidArraySize(MaterialError):
    """An array literal does not have 2, 3 or 4 elements."""


class AmbiguousArrayElementType(MaterialError):
    """A numeric array element cannot be classified as integer, float or double."""


class UnsupportedArrayElement(MaterialError):
    """An array element is not numeric."""


class MalformedIndex(MaterialError):
    """An array index is not an unsigned 32-bit integer."""


class ArrayLiteralNotAllowedAsParameter(MaterialError):
    """An array literal was used directly as a proxy parameter value."""


class InvalidReferenceShape(MaterialError):
    """A proxy parameter value is not a literal, a variable or an indexed variable."""


class ReferenceResolutionError(MaterialError):
    """Base class for errors raised while dereferencing a parameter reference."""


class UnresolvedReference(ReferenceResolutionError):
    """A reference names a variable that is not declared."""


class NotAnArray(ReferenceResolutionError):
    """An indexed reference targets a variable that is not an array."""


class IndexOutOfRange(ReferenceResolutionError):
    """An indexed reference is past the end of its array."""


__all__ = [
    "MaterialError",
    "GrammarRejected",
    "MissingShaderIdentifier",
    "ExpectedIdentifier",
    "NoShaderSpecified",
    "MalformedNumber",
    "UnsupportedValueKind",
    "InvalidArraySize",
    "AmbiguousArrayElementType",
    "UnsupportedArrayElement",
    "MalformedIndex",
    "ArrayLiteralNotAllowedAsParameter",
    "InvalidReferenceShape",
    "ReferenceResolutionError",
    "UnresolvedReference",
    "NotAnArray",
    "IndexOutOfRange",
]
