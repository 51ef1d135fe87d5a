"""Parse Solidity struct/enum declarations and resolve them to ABI tuple types.

Only the subset needed to describe an ABI-encoded blob is understood:
``struct Name { type name; ... }`` and ``enum Name { A, B }`` blocks. Comments,
pragmas and anything else are ignored, so a whole contract file can be pasted in.
"""

import re
from dataclasses import dataclass, field

from calldata.abi_types import TypeDescriptor
from calldata.exceptions import CircularReferenceError, MappingTypeError, UnknownStructError, UnknownTypeError

SOLIDITY_PRIMITIVES: frozenset[str] = frozenset(
    ["address", "bool", "string", "bytes", "uint", "int"]
    + [f"bytes{i}" for i in range(1, 33)]
    + [f"uint{bits}" for bits in range(8, 257, 8)]
    + [f"int{bits}" for bits in range(8, 257, 8)]
)

_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_STRUCT_RE = re.compile(r"struct\s+(\w+)\s*\{([^}]*)\}")
_ENUM_RE = re.compile(r"enum\s+(\w+)\s*\{[^}]*\}")
_ARRAY_SUFFIX_RE = re.compile(r"\[.*\]$")


@dataclass(frozen=True)
class StructField:
    name: str
    type: str


@dataclass
class StructDefinitions:
    """Symbol table of one parsed source: struct name -> ordered fields, plus enum names."""

    structs: dict[str, list[StructField]] = field(default_factory=dict)
    enums: set[str] = field(default_factory=set)


def strip_comments(source: str) -> str:
    return _BLOCK_COMMENT_RE.sub("", _LINE_COMMENT_RE.sub("", source))


def extract_base_type(field_type: str) -> str:
    return _ARRAY_SUFFIX_RE.sub("", field_type)


def extract_array_suffix(field_type: str) -> str:
    match = _ARRAY_SUFFIX_RE.search(field_type)
    return match.group(0) if match else ""


def _parse_fields(body: str) -> list[StructField]:
    fields = []
    for declaration in body.split(";"):
        parts = declaration.split()
        # the last token is the name, everything before it is the type
        if len(parts) >= 2:
            fields.append(StructField(name=parts[-1], type="".join(parts[:-1])))
    return fields


def parse_definitions(source: str) -> StructDefinitions:
    """Build the struct/enum symbol table. Never raises; unmatched text is skipped.

    A struct declared twice keeps its last declaration.
    """
    cleaned = strip_comments(source or "")
    definitions = StructDefinitions()

    for match in _STRUCT_RE.finditer(cleaned):
        definitions.structs[match.group(1)] = _parse_fields(match.group(2))

    for match in _ENUM_RE.finditer(cleaned):
        definitions.enums.add(match.group(1))

    return definitions


def resolve_struct(
    struct_name: str,
    definitions: StructDefinitions,
    visiting: frozenset[str] = frozenset(),
) -> TypeDescriptor:
    """Resolve a struct into a ``tuple`` descriptor whose components follow declaration order.

    ``visiting`` holds the structs on the current resolution path only; each
    branch gets its own copy so siblings referencing the same struct do not collide.

    Raises:
        UnknownStructError, UnknownTypeError, MappingTypeError, CircularReferenceError
    """
    if struct_name in visiting:
        raise CircularReferenceError(f"Circular reference detected: {struct_name}")

    fields = definitions.structs.get(struct_name)
    if fields is None:
        available = ", ".join(definitions.structs) or "none"
        raise UnknownStructError(f'Unknown struct "{struct_name}". Available: {available}')

    path = visiting | {struct_name}
    components = tuple(resolve_field(f.name, f.type, definitions, path) for f in fields)
    return TypeDescriptor(name=struct_name, type="tuple", components=components)


def resolve_field(
    field_name: str,
    field_type: str,
    definitions: StructDefinitions,
    visiting: frozenset[str] = frozenset(),
) -> TypeDescriptor:
    if "mapping" in field_type:
        raise MappingTypeError(
            f'Unsupported type "mapping" for field "{field_name}". Mappings cannot be ABI-encoded.'
        )

    base_type = extract_base_type(field_type)
    suffix = extract_array_suffix(field_type)

    if base_type in SOLIDITY_PRIMITIVES:
        return TypeDescriptor(name=field_name, type=base_type + suffix)

    # enums have no ABI type of their own
    if base_type in definitions.enums:
        return TypeDescriptor(name=field_name, type="uint8" + suffix)

    if base_type in definitions.structs:
        resolved = resolve_struct(base_type, definitions, visiting)
        return TypeDescriptor(name=field_name, type="tuple" + suffix, components=resolved.components)

    raise UnknownTypeError(
        f'Unknown type "{base_type}" for field "{field_name}". '
        "Define it as a struct or enum, or check for typos."
    )


def detect_root_structs(definitions: StructDefinitions) -> list[str]:
    """Return the structs no other struct uses as a field type.

    When every struct is referenced (cycles, mutual nesting) all of them are
    returned, so there is always at least one candidate when any struct exists.
    """
    referenced = {
        extract_base_type(f.type)
        for fields in definitions.structs.values()
        for f in fields
        if extract_base_type(f.type) in definitions.structs
    }
    roots = [name for name in definitions.structs if name not in referenced]
    return roots or list(definitions.structs)
