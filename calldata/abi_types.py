"""ABI type descriptors and function signature parsing.

A ``TypeDescriptor`` is the tree handed to the generic ABI codec: primitive
types carry only a type string, tuples (and arrays of tuples) carry their
ordered components. Component order is the wire order.
"""

import re
from dataclasses import dataclass

from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.grammar import normalize, parse
from eth_utils import function_signature_to_4byte_selector

from calldata.exceptions import SignatureParseError

_ARRAY_SUFFIX_RE = re.compile(r"(?:\[\d*\])+$")
_ARRAY_DIM_RE = re.compile(r"\[\d*\]")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")

# Keywords that may appear between a parameter type and its name
_PARAM_MODIFIERS = frozenset({"memory", "calldata", "storage", "indexed", "payable"})


@dataclass(frozen=True)
class TypeDescriptor:
    name: str
    type: str
    components: tuple["TypeDescriptor", ...] = ()

    @property
    def array_suffix(self) -> str:
        match = _ARRAY_SUFFIX_RE.search(self.type)
        return match.group(0) if match else ""

    @property
    def base_type(self) -> str:
        return self.type[: len(self.type) - len(self.array_suffix)]

    @property
    def is_array(self) -> bool:
        return bool(self.array_suffix)

    @property
    def is_tuple(self) -> bool:
        return self.base_type == "tuple"

    def element(self) -> "TypeDescriptor":
        """Descriptor of one array element (the outermost dimension is the last one)."""
        dims = _ARRAY_DIM_RE.findall(self.array_suffix)
        if not dims:
            raise ValueError(f"{self.type} is not an array type")
        return TypeDescriptor(self.name, self.base_type + "".join(dims[:-1]), self.components)

    @property
    def canonical(self) -> str:
        """Type string understood by eth_abi, e.g. ``(address,uint256,bytes)[]``."""
        if self.is_tuple:
            inner = ",".join(component.canonical for component in self.components)
            return f"({inner}){self.array_suffix}"
        return normalize(self.type)


def _matching_paren(text: str, open_index: int) -> int:
    depth = 0
    for i in range(open_index, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return i
    raise SignatureParseError(f"Unbalanced parentheses in {text!r}")


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested inside parentheses."""
    if not text.strip():
        return []
    parts: list[str] = []
    depth = 0
    start = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            parts.append(text[start:i])
            start = i + 1
    parts.append(text[start:])
    if any(not part.strip() for part in parts):
        raise SignatureParseError(f"Empty parameter in {text!r}")
    return parts


def _param_name(tokens: list[str], index: int) -> str:
    names = [token for token in tokens if token not in _PARAM_MODIFIERS]
    if not names:
        return f"param{index}"
    if len(names) > 1 or not _IDENTIFIER_RE.fullmatch(names[0]):
        raise SignatureParseError(f"Unexpected tokens after type: {' '.join(names)!r}")
    return names[0]


def _validate_basic_type(type_str: str) -> str:
    try:
        normalized = normalize(type_str)
        parse(normalized).validate()
    except (ParseError, ABITypeError) as e:
        raise SignatureParseError(f"Invalid ABI type {type_str!r}: {e}") from e
    return normalized


def _parse_param(text: str, index: int) -> TypeDescriptor:
    text = text.strip()
    if text.startswith("tuple("):
        text = text[len("tuple") :]

    if text.startswith("("):
        close = _matching_paren(text, 0)
        rest = text[close + 1 :].strip()
        suffix_match = re.match(r"((?:\[\d*\])*)(.*)$", rest, re.DOTALL)
        suffix, tail = suffix_match.group(1), suffix_match.group(2)
        components = tuple(_parse_param(part, i) for i, part in enumerate(_split_top_level(text[1:close])))
        return TypeDescriptor(_param_name(tail.split(), index), "tuple" + suffix, components)

    tokens = text.split()
    type_str = _validate_basic_type(tokens[0])
    return TypeDescriptor(_param_name(tokens[1:], index), type_str)


def parse_signature(signature: str) -> tuple[str, list[TypeDescriptor]]:
    """Parse a function signature into its name and parameter descriptors.

    Accepts canonical signatures (``transfer(address,uint256)``) as well as
    human-readable ones (``function transfer(address to, uint256 amount)``).
    Anything after the closing parenthesis (visibility, ``returns (...)``) is ignored.

    Raises:
        SignatureParseError: when the text is not a function signature or a
            parameter type is not a valid ABI type.
    """
    text = (signature or "").strip()
    if text.startswith("function "):
        text = text[len("function ") :].strip()

    open_index = text.find("(")
    if open_index < 0:
        raise SignatureParseError(f"Not a function signature: {signature!r}")
    name = text[:open_index].strip()
    if not _IDENTIFIER_RE.fullmatch(name):
        raise SignatureParseError(f"Invalid function name in signature: {signature!r}")

    close_index = _matching_paren(text, open_index)
    params = _split_top_level(text[open_index + 1 : close_index])
    return name, [_parse_param(param, i) for i, param in enumerate(params)]


def canonical_signature(signature: str) -> str:
    """Canonical form used for selector hashing, e.g. ``f(address,(uint256,bytes)[])``."""
    name, params = parse_signature(signature)
    return f"{name}({','.join(param.canonical for param in params)})"


def function_selector(signature: str) -> str:
    """Return the 0x-prefixed 4-byte selector of a signature."""
    return "0x" + function_signature_to_4byte_selector(canonical_signature(signature)).hex()
