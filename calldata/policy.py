"""Which bytes parameters of well-known container functions may be decoded further.

Functions listed here only have the given parameter indices passed to the
multi-send and nested-call decoders; every other function has all of its
``bytes`` parameters eligible. Signature blobs and other opaque bytes would
otherwise be run through the directory lookup and occasionally mis-decoded.
Keys are canonical signatures.
"""

FUNCTION_DECODE_POLICY: dict[str, frozenset[int]] = {
    # data only; the packed owner signatures at index 9 are never calldata
    "execTransaction(address,uint256,bytes,uint8,uint256,uint256,uint256,address,address,bytes)": frozenset({2}),
    # data only; signatures at index 2
    "checkSignatures(bytes32,bytes,bytes)": frozenset({1}),
    # EIP-1271 message and signature are both opaque
    "isValidSignature(bytes,bytes)": frozenset(),
    "isValidSignature(bytes32,bytes)": frozenset(),
}


def is_eligible(signature: str, parameter_index: int, policy: dict[str, frozenset[int]] | None = None) -> bool:
    """Whether parameter ``parameter_index`` of ``signature`` may be decoded further."""
    table = FUNCTION_DECODE_POLICY if policy is None else policy
    allowed = table.get(signature)
    if allowed is None:
        return True
    return parameter_index in allowed
