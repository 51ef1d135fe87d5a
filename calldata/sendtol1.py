"""Decode zkSync ``sendToL1(bytes)`` governance messages.

The message handed to the L1Messenger precompile is the argument encoding
(without selector) of an ``execute`` call on the L1 governance contract:
a list of ``(target, value, calldata)`` operations, an executor and a salt.
Governance encodes the three fields as one struct argument; the flat
three-argument layout is accepted as well.
"""

from calldata.abi_codec import decode_values, hex_to_bytes, leading_selector
from calldata.abi_types import parse_signature
from calldata.exceptions import DecoderError
from calldata.results import L1Operation, L1RelayCall
from utils.logging import get_logger

logger = get_logger("calldata.sendtol1")

SEND_TO_L1_SELECTOR = "0x62f84b24"  # sendToL1(bytes)

_, _SEND_TO_L1_PARAMS = parse_signature("sendToL1(bytes message)")

# 0xa1dcb9b8, the operation struct wrapped in a single tuple argument
_EXECUTE_STRUCT_SIGNATURE = "execute(((address target,uint256 value,bytes data)[] operations,address executor,bytes32 salt) proposal)"
# 0x0d22cf5d
_EXECUTE_FLAT_SIGNATURE = "execute((address target,uint256 value,bytes data)[] operations,address executor,bytes32 salt)"


def is_send_to_l1_data(data: str) -> bool:
    return leading_selector(data) == SEND_TO_L1_SELECTOR


def _decode_execute(message: bytes) -> dict | None:
    _, struct_params = parse_signature(_EXECUTE_STRUCT_SIGNATURE)
    try:
        return decode_values(struct_params, message)[0]
    except DecoderError as e:
        logger.debug("L1 message is not a wrapped execute proposal: %s", e)

    _, flat_params = parse_signature(_EXECUTE_FLAT_SIGNATURE)
    try:
        operations, executor, salt = decode_values(flat_params, message)
    except DecoderError as e:
        logger.debug("L1 message is not a flat execute call: %s", e)
        return None
    return {"operations": operations, "executor": executor, "salt": salt}


def decode_send_to_l1_data(calldata: str) -> L1RelayCall | None:
    """Decode ``sendToL1(bytes)`` calldata, or return None if it is not one.

    Operation values are decimal strings and their calldata stays raw hex;
    nested decoding of each operation is left to the caller.
    """
    if not is_send_to_l1_data(calldata):
        return None

    try:
        (message,) = decode_values(_SEND_TO_L1_PARAMS, hex_to_bytes(calldata)[4:])
        proposal = _decode_execute(hex_to_bytes(message))
    except DecoderError as e:
        logger.debug("Failed to decode sendToL1 calldata: %s", e)
        return None
    if proposal is None:
        return None

    operations = [
        L1Operation(target=operation["target"], value=operation["value"], calldata=operation["data"])
        for operation in proposal["operations"]
    ]
    return L1RelayCall(operations=operations, executor=proposal["executor"], salt=proposal["salt"])
