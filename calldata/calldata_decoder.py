"""Decode raw calldata into human-readable function calls.

Signatures come from the caller or from a ``SignatureResolver`` (local
lookup table, TTL cache, then public 4byte directories). Every ``bytes``
parameter the decode policy allows is decoded further: first as a Safe
multi-send batch, then as a nested function call, down to ``max_depth``
levels. Universal Router and zkSync sendToL1 calldata are recognised by
selector at the top level only.
"""

from dataclasses import replace
from typing import Any, Sequence

from calldata.abi_codec import (
    decode_values,
    encode_values,
    field_names,
    hex_to_bytes,
    is_hex_string,
    leading_selector,
    to_hex,
)
from calldata.abi_types import TypeDescriptor, canonical_signature, function_selector, parse_signature
from calldata.exceptions import DecoderError
from calldata.multisend import try_decode_multisend
from calldata.policy import is_eligible
from calldata.results import DecodedCall, DecodeOutcome, L1RelayCall, MultiSendBatch
from calldata.sendtol1 import decode_send_to_l1_data
from calldata.signature_lookup import FourByteSignatureResolver, SignatureResolver
from calldata.struct_parser import detect_root_structs, parse_definitions, resolve_struct
from calldata.uniswap import decode_uniswap_router_data
from utils.config import Config
from utils.logging import get_logger

logger = get_logger("calldata.decoder")

# "0x" + 4-byte selector
_MIN_CALL_HEX_LENGTH = 10


class CalldataDecoder:
    def __init__(
        self,
        resolver: SignatureResolver | None = None,
        max_depth: int | None = None,
        policy: dict[str, frozenset[int]] | None = None,
    ):
        self.resolver = resolver if resolver is not None else FourByteSignatureResolver()
        self.max_depth = Config.get_max_nesting_depth() if max_depth is None else max_depth
        self.policy = policy

    def decode_calldata(self, data: str, signature: str | None = None, has_selector: bool = True) -> DecodeOutcome:
        """Decode top-level calldata.

        Args:
            data: Hex calldata, with or without 0x.
            signature: Function signature to decode against. Looked up by
                selector when omitted.
            has_selector: False when ``data`` is bare ABI-encoded arguments;
                a signature is then required.

        Returns:
            DECODED with a DecodedCall, UniswapRouterCall or L1RelayCall;
            NO_MATCH when no signature is known for the selector; ERROR for
            malformed input or data that does not fit the signature.
        """
        try:
            raw = hex_to_bytes(data)
        except DecoderError as e:
            return DecodeOutcome.error(str(e))

        if has_selector and len(raw) < 4:
            return DecodeOutcome.error(f"Calldata is {len(raw)} bytes, shorter than a 4-byte selector")

        hex_data = to_hex(raw)
        if has_selector and signature is None:
            router_call = decode_uniswap_router_data(hex_data)
            if router_call is not None:
                return DecodeOutcome.decoded(router_call)
            relay_call = decode_send_to_l1_data(hex_data)
            if relay_call is not None:
                return DecodeOutcome.decoded(self._process_relay_call(relay_call, depth=1))

        if signature is None:
            if not has_selector:
                return DecodeOutcome.error("A function signature is required to decode data without a selector")
            selector = to_hex(raw[:4])
            candidates = self.resolver.lookup(selector)
            if not candidates:
                return DecodeOutcome.no_match(f"No function signature found for selector {selector}")
            signature = candidates[0]

        try:
            _, params = parse_signature(signature)
            canonical = canonical_signature(signature)
            expected_selector = function_selector(signature)
        except DecoderError as e:
            return DecodeOutcome.error(str(e))

        if has_selector:
            selector, payload = to_hex(raw[:4]), raw[4:]
            if selector != expected_selector:
                logger.warning("Selector %s does not match %s (%s)", selector, canonical, expected_selector)
        else:
            selector, payload = expected_selector, raw

        try:
            values = decode_values(params, payload)
        except DecoderError as e:
            return DecodeOutcome.error(str(e))

        parameters = self._process_parameters(canonical, params, values, depth=1)
        return DecodeOutcome.decoded(DecodedCall(signature=canonical, selector=selector, parameters=parameters, raw=hex_data))

    def decode_struct(self, definitions: str, data: str, struct_name: str | None = None) -> DecodeOutcome:
        """Decode ``data`` as one ABI-encoded instance of a struct from ``definitions``.

        Without ``struct_name`` the struct must be the single root (a struct no
        other struct uses); several candidates are reported as an error.
        """
        table = parse_definitions(definitions)
        if not table.structs:
            return DecodeOutcome.error("No struct definitions found")

        if struct_name is None:
            roots = detect_root_structs(table)
            if len(roots) > 1:
                return DecodeOutcome.error(f"Multiple candidate root structs: {', '.join(roots)}. Choose one by name")
            struct_name = roots[0]

        try:
            descriptor = resolve_struct(struct_name, table)
            (value,) = decode_values([descriptor], hex_to_bytes(data))
        except DecoderError as e:
            return DecodeOutcome.error(str(e))

        return DecodeOutcome.decoded(self._process_struct_value(descriptor, value, depth=1))

    def decode_nested_bytes(self, value: Any, depth: int = 1) -> Any:
        """Reinterpret a bytes value as a multi-send batch or a function call.

        Returns the original value unchanged when neither applies, when the
        nesting limit is reached, or when decoding fails for any reason.
        """
        if not is_hex_string(value) or len(value) < _MIN_CALL_HEX_LENGTH:
            return value
        if depth > self.max_depth:
            logger.warning("Nesting depth limit %s reached; leaving %s... undecoded", self.max_depth, value[:10])
            return value

        batch = try_decode_multisend(value)
        if batch is not None:
            return self._process_multisend(batch, depth)
        return self._decode_as_call(value, depth)

    def encode_call(self, signature: str, values: Sequence[Any]) -> str:
        """ABI-encode ``values`` and prefix the selector of ``signature``.

        Raises:
            SignatureParseError, AbiEncodeError
        """
        _, params = parse_signature(signature)
        return function_selector(signature) + encode_values(params, values).hex()

    def _decode_as_call(self, value: str, depth: int) -> Any:
        selector = leading_selector(value)
        candidates = self.resolver.lookup(selector)
        if not candidates:
            return value

        # first candidate only; directory entries are ordered most canonical first
        signature = candidates[0]
        try:
            _, params = parse_signature(signature)
            canonical = canonical_signature(signature)
            values = decode_values(params, hex_to_bytes(value)[4:])
        except DecoderError as e:
            logger.debug("Could not decode %s as %s: %s", selector, signature, e)
            return value

        parameters = self._process_parameters(canonical, params, values, depth + 1)
        return DecodedCall(signature=canonical, selector=selector, parameters=parameters, raw=value)

    def _process_parameters(
        self,
        signature: str,
        descriptors: Sequence[TypeDescriptor],
        values: Sequence[Any],
        depth: int,
    ) -> dict[str, Any]:
        parameters: dict[str, Any] = {}
        for i, (key, descriptor, value) in enumerate(zip(field_names(descriptors), descriptors, values)):
            if descriptor.type == "bytes" and is_eligible(signature, i, self.policy):
                value = self.decode_nested_bytes(value, depth)
            parameters[key] = value
        return parameters

    def _process_struct_value(self, descriptor: TypeDescriptor, value: Any, depth: int) -> Any:
        # only bytes reached through tuple fields; array elements stay raw
        if descriptor.is_tuple and not descriptor.is_array:
            processed = {}
            for key, component in zip(field_names(descriptor.components), descriptor.components):
                processed[key] = self._process_struct_value(component, value[key], depth)
            return processed
        if descriptor.type == "bytes":
            return self.decode_nested_bytes(value, depth)
        return value

    def _process_multisend(self, batch: MultiSendBatch, depth: int) -> MultiSendBatch:
        transactions = [replace(tx, data=self.decode_nested_bytes(tx.data, depth + 1)) for tx in batch.transactions]
        return MultiSendBatch(transactions=transactions)

    def _process_relay_call(self, call: L1RelayCall, depth: int) -> L1RelayCall:
        operations = [replace(op, calldata=self.decode_nested_bytes(op.calldata, depth)) for op in call.operations]
        return replace(call, operations=operations)
