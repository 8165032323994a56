from smfparser.parser import (
    MaterialError,
    MaterialFile,
    MaterialProxy,
    MaterialValue,
    ParameterReference,
    ReferenceKind,
    ValueKind,
    parse_material,
    parse_material_file,
)

__version__ = "0.1.0"


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
