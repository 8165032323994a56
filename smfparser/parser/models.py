"""
Data models for parsed materials.

This module contains the value, reference and material types produced by the
parser, plus the mutable collector used while the material is being built.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Any

import numpy as np

from smfparser.parser.errors import IndexOutOfRange, NotAnArray, UnresolvedReference


class ValueKind(Enum):
    """Variants of a material value."""

    NONE = auto()
    FLOAT = auto()
    DOUBLE = auto()
    INTEGER = auto()
    STRING = auto()

    ARRAY2 = auto()
    ARRAY3 = auto()
    ARRAY4 = auto()

    ARRAY2F = auto()
    ARRAY3F = auto()
    ARRAY4F = auto()

    ARRAY2D = auto()
    ARRAY3D = auto()
    ARRAY4D = auto()


ARRAY_SIZES = (2, 3, 4)

_ARRAY_KINDS: dict[tuple[int, np.dtype], ValueKind] = {
    (2, np.dtype(np.int32)): ValueKind.ARRAY2,
    (3, np.dtype(np.int32)): ValueKind.ARRAY3,
    (4, np.dtype(np.int32)): ValueKind.ARRAY4,
    (2, np.dtype(np.float32)): ValueKind.ARRAY2F,
    (3, np.dtype(np.float32)): ValueKind.ARRAY3F,
    (4, np.dtype(np.float32)): ValueKind.ARRAY4F,
    (2, np.dtype(np.float64)): ValueKind.ARRAY2D,
    (3, np.dtype(np.float64)): ValueKind.ARRAY3D,
    (4, np.dtype(np.float64)): ValueKind.ARRAY4D,
}

_SCALAR_KINDS: dict[np.dtype, ValueKind] = {
    np.dtype(np.int32): ValueKind.INTEGER,
    np.dtype(np.float32): ValueKind.FLOAT,
    np.dtype(np.float64): ValueKind.DOUBLE,
}


@dataclass(frozen=True, eq=False)
class MaterialValue:
    """A typed value of a material variable or proxy parameter.

    Numbers are numpy scalars (``int32``, ``float32`` or ``float64``); arrays
    are read-only one-dimensional numpy arrays whose dtype fixes the element
    width for every element.

    Attributes:
        kind: Value variant
        data: Python string, numpy scalar, numpy array or None
    """

    kind: ValueKind
    data: Any = None

    @classmethod
    def none(cls) -> "MaterialValue":
        return cls(ValueKind.NONE)

    @classmethod
    def string(cls, value: str) -> "MaterialValue":
        return cls(ValueKind.STRING, value)

    @classmethod
    def integer(cls, value: int) -> "MaterialValue":
        return cls(ValueKind.INTEGER, np.int32(value))

    @classmethod
    def float32(cls, value: float) -> "MaterialValue":
        return cls(ValueKind.FLOAT, np.float32(value))

    @classmethod
    def double(cls, value: float) -> "MaterialValue":
        return cls(ValueKind.DOUBLE, np.float64(value))

    @classmethod
    def scalar(cls, value: np.generic) -> "MaterialValue":
        """Wrap a numpy scalar, picking the variant from its dtype."""
        return cls(_SCALAR_KINDS[np.dtype(value.dtype)], value)

    @classmethod
    def array(cls, values: np.ndarray) -> "MaterialValue":
        """Wrap a one-dimensional array of 2, 3 or 4 homogeneous numbers."""
        data = np.array(values, copy=True)
        key = (data.shape[0] if data.ndim == 1 else -1, data.dtype)
        if key not in _ARRAY_KINDS:
            raise ValueError(f"Unsupported array shape {data.shape} of {data.dtype}")
        data.setflags(write=False)
        return cls(_ARRAY_KINDS[key], data)

    @property
    def is_array(self) -> bool:
        return isinstance(self.data, np.ndarray)

    def __len__(self) -> int:
        if not self.is_array:
            raise TypeError(f"{self.kind.name} value has no length")
        return len(self.data)

    def element(self, index: int) -> "MaterialValue":
        """Return one element of an array value as a scalar value."""
        return MaterialValue.scalar(self.data[index])

    def to_python(self) -> Any:
        """Return the value as plain Python objects."""
        if self.is_array:
            return tuple(self.data.tolist())
        if isinstance(self.data, np.generic):
            return self.data.item()
        return self.data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MaterialValue):
            return NotImplemented
        if self.kind != other.kind:
            return False
        if self.is_array:
            return bool(np.array_equal(self.data, other.data))
        return bool(self.data == other.data)

    def __repr__(self) -> str:
        if self.kind == ValueKind.NONE:
            return "NONE"
        if self.kind == ValueKind.STRING:
            return f'STRING("{self.data}")'
        if self.is_array:
            return f"{self.kind.name}({', '.join(str(x) for x in self.data)})"
        return f"{self.kind.name}({self.data})"


class ReferenceKind(Enum):
    """Shapes of a proxy parameter value."""

    LITERAL = auto()
    VARIABLE = auto()
    ARRAY_INDEX = auto()


@dataclass(frozen=True)
class ParameterReference:
    """Value of a proxy parameter, not yet resolved against the variables.

    Attributes:
        kind: Reference shape
        value: Literal value (LITERAL only)
        name: Variable name (VARIABLE and ARRAY_INDEX)
        index: Element index (ARRAY_INDEX only)
    """

    kind: ReferenceKind
    value: MaterialValue | None = None
    name: str | None = None
    index: int | None = None

    @classmethod
    def literal(cls, value: MaterialValue) -> "ParameterReference":
        return cls(ReferenceKind.LITERAL, value=value)

    @classmethod
    def variable(cls, name: str) -> "ParameterReference":
        return cls(ReferenceKind.VARIABLE, name=name)

    @classmethod
    def array_index(cls, name: str, index: int) -> "ParameterReference":
        return cls(ReferenceKind.ARRAY_INDEX, name=name, index=index)

    def __str__(self) -> str:
        match self.kind:
            case ReferenceKind.LITERAL:
                return repr(self.value)
            case ReferenceKind.VARIABLE:
                return f"${self.name}"
            case ReferenceKind.ARRAY_INDEX:
                return f"${self.name}[{self.index}]"


@dataclass(frozen=True)
class MaterialProxy:
    """A named, parameterized proxy invocation.

    Attributes:
        name: Proxy name
        parameters: Mapping from parameter name to reference
    """

    name: str
    parameters: Mapping[str, ParameterReference] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class MaterialFile:
    """A fully parsed material description.

    Attributes:
        shader: Name of the shader the material uses
        variables: Mapping from variable name to value
        setup_proxies: Setup-time proxies in declaration order
        render_proxies: Render-time proxies in declaration order
    """

    shader: str
    variables: Mapping[str, MaterialValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    setup_proxies: tuple[MaterialProxy, ...] = ()
    render_proxies: tuple[MaterialProxy, ...] = ()

    def resolve(self, reference: ParameterReference) -> MaterialValue:
        """Dereference a proxy parameter against this material's variables.

        Args:
            reference: Reference taken from one of this material's proxies

        Returns:
            The literal value, the referenced variable, or the referenced
            array element as a scalar value

        Raises:
            UnresolvedReference: If the variable is not declared
            NotAnArray: If an indexed variable is not an array
            IndexOutOfRange: If the index is past the end of the array
        """
        if reference.kind == ReferenceKind.LITERAL:
            return reference.value

        if reference.name not in self.variables:
            raise UnresolvedReference(f"Undefined variable: {reference.name}")
        value = self.variables[reference.name]
        if reference.kind == ReferenceKind.VARIABLE:
            return value

        if not value.is_array:
            raise NotAnArray(
                f"Variable '{reference.name}' is {value.kind.name}, not an array"
            )
        if reference.index >= len(value):
            raise IndexOutOfRange(
                f"Index {reference.index} out of range for '{reference.name}' "
                f"of length {len(value)}"
            )
        return value.element(reference.index)


@dataclass
class CollectedMaterial:
    """Material information collected while walking the parse tree.

    Attributes:
        shader: Shader name, empty until the shader block is seen
        variables: Variable name to value, later declarations overwrite
        setup_proxies: Setup-time proxies in source order
        render_proxies: Render-time proxies in source order
    """

    shader: str = ""
    variables: dict[str, MaterialValue] = field(default_factory=dict)
    setup_proxies: list[MaterialProxy] = field(default_factory=list)
    render_proxies: list[MaterialProxy] = field(default_factory=list)

    def freeze(self) -> MaterialFile:
        """Return the immutable material built from the collected information."""
        return MaterialFile(
            shader=self.shader,
            variables=MappingProxyType(dict(self.variables)),
            setup_proxies=tuple(self.setup_proxies),
            render_proxies=tuple(self.render_proxies),
        )
