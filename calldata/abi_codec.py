"""Generic ABI decode/encode built on eth_abi.

Decoded values are normalised right away so nothing downstream ever sees a
native integer or ``bytes``: integers become decimal strings, byte strings
become 0x-prefixed hex, tuples become dicts keyed by field name and arrays
become lists.
"""

from decimal import Decimal
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_utils import to_checksum_address

from calldata.abi_types import TypeDescriptor
from calldata.exceptions import AbiDecodeError, AbiEncodeError, InvalidHexError

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


def hex_to_bytes(data: str) -> bytes:
    """Convert a hex string (with or without 0x, whitespace tolerated) to bytes."""
    text = "".join(strip_hex_prefix(data.strip()).split())
    if len(text) % 2:
        raise InvalidHexError(f"Hex data has an odd number of digits ({len(text)})")
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise InvalidHexError(f"Invalid hex data: {e}") from e


def to_hex(data: bytes) -> str:
    return "0x" + data.hex()


def is_hex_string(value: Any) -> bool:
    """True for 0x-prefixed strings made of an even number of hex digits."""
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    digits = value[2:]
    return len(digits) % 2 == 0 and all(char in _HEX_DIGITS for char in digits)


def leading_selector(data: str) -> str | None:
    """The first four bytes of ``data`` as ``0x`` + 8 lowercase hex digits, or None if shorter."""
    digits = strip_hex_prefix(data.strip())[:8].lower()
    if len(digits) < 8 or any(char not in _HEX_DIGITS for char in digits):
        return None
    return "0x" + digits


def field_name(descriptor: TypeDescriptor, index: int) -> str:
    return descriptor.name or f"param{index}"


def field_names(descriptors: Sequence[TypeDescriptor]) -> list[str]:
    """Keys for a parameter list or tuple; a name already taken gets a numeric suffix."""
    names: list[str] = []
    taken: set[str] = set()
    for i, descriptor in enumerate(descriptors):
        base = field_name(descriptor, i)
        name = base
        suffix = 1
        while name in taken:
            name = f"{base}_{suffix}"
            suffix += 1
        taken.add(name)
        names.append(name)
    return names


def normalize_value(descriptor: TypeDescriptor, value: Any) -> Any:
    if descriptor.is_array:
        element = descriptor.element()
        return [normalize_value(element, item) for item in value]
    if descriptor.is_tuple:
        return {
            key: normalize_value(component, item)
            for key, component, item in zip(field_names(descriptor.components), descriptor.components, value)
        }
    # bool is an int subclass, so it has to be checked first
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return to_hex(bytes(value))
    return value


def decode_values(descriptors: Sequence[TypeDescriptor], data: bytes) -> list[Any]:
    """Decode ``data`` positionally against ``descriptors``.

    Raises:
        AbiDecodeError: when the data is inconsistent with the types.
    """
    types = [descriptor.canonical for descriptor in descriptors]
    try:
        raw_values = decode(types, data)
    except Exception as e:
        raise AbiDecodeError(f"Cannot decode {len(data)} bytes as ({','.join(types)}): {e}") from e
    return [normalize_value(descriptor, value) for descriptor, value in zip(descriptors, raw_values)]


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise AbiEncodeError(f"Expected an integer, got {value!r}")
    if isinstance(value, str):
        text = value.strip()
        return int(text, 16) if text.lower().startswith(("0x", "-0x")) else int(text)
    return int(value)


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise AbiEncodeError(f"Expected a boolean, got {value!r}")


def coerce_value(descriptor: TypeDescriptor, value: Any) -> Any:
    """Turn JSON-friendly input (strings for numbers and bytes) into eth_abi values."""
    if descriptor.is_array:
        if not isinstance(value, (list, tuple)):
            raise AbiEncodeError(f"Expected a list for {descriptor.name} ({descriptor.type}), got {value!r}")
        element = descriptor.element()
        return [coerce_value(element, item) for item in value]

    if descriptor.is_tuple:
        components = descriptor.components
        if isinstance(value, dict):
            try:
                items = [value[key] for key in field_names(components)]
            except KeyError as e:
                raise AbiEncodeError(f"Missing field {e} for {descriptor.name}") from e
        elif isinstance(value, (list, tuple)):
            items = list(value)
        else:
            raise AbiEncodeError(f"Expected a list or object for {descriptor.name}, got {value!r}")
        if len(items) != len(components):
            raise AbiEncodeError(f"{descriptor.name} expects {len(components)} fields, got {len(items)}")
        return tuple(coerce_value(component, item) for component, item in zip(components, items))

    base = descriptor.canonical
    try:
        if base.startswith(("uint", "int")):
            return _coerce_int(value)
        if base == "bool":
            return _coerce_bool(value)
        if base.startswith("bytes") and isinstance(value, str):
            return hex_to_bytes(value)
        if base == "address":
            return to_checksum_address(value)
    except (ValueError, TypeError) as e:
        raise AbiEncodeError(f"Invalid value {value!r} for {descriptor.name} ({base}): {e}") from e
    return value


def encode_values(descriptors: Sequence[TypeDescriptor], values: Sequence[Any]) -> bytes:
    """ABI-encode ``values`` against ``descriptors``.

    Raises:
        AbiEncodeError: when a value does not fit its type.
    """
    if len(values) != len(descriptors):
        raise AbiEncodeError(f"Expected {len(descriptors)} values, got {len(values)}")
    coerced = [coerce_value(descriptor, value) for descriptor, value in zip(descriptors, values)]
    types = [descriptor.canonical for descriptor in descriptors]
    try:
        return encode(types, coerced)
    except Exception as e:
        raise AbiEncodeError(f"Cannot encode values as ({','.join(types)}): {e}") from e
