"""Decode Safe MultiSend ``transactions`` blobs.

The blob is a packed sequence of records, each:

    operation  uint8    0 = Call, 1 = DelegateCall
    to         address  20 bytes
    value      uint256  32 bytes, big-endian
    dataLength uint256  32 bytes, big-endian
    data       bytes    dataLength bytes
"""

from calldata.abi_codec import hex_to_bytes, to_hex
from calldata.exceptions import InvalidHexError
from calldata.results import MultiSendBatch, MultiSendTransaction
from utils.logging import get_logger

logger = get_logger("calldata.multisend")

_HEADER_LENGTH = 1 + 20 + 32 + 32
_VALID_OPERATIONS = (0, 1)


def try_decode_multisend(blob: str) -> MultiSendBatch | None:
    """Decode ``blob`` as a multi-send batch, or return None if it is not one.

    An unknown operation byte at a record boundary means the blob is not a
    batch at all. A record whose length runs past the end of the blob stops
    parsing but keeps the records already read. A batch without a single
    complete record is reported as no match.
    """
    try:
        data = hex_to_bytes(blob)
    except InvalidHexError:
        return None

    transactions: list[MultiSendTransaction] = []
    offset = 0
    while len(data) - offset >= _HEADER_LENGTH:
        operation = data[offset]
        if operation not in _VALID_OPERATIONS:
            logger.debug("Not a multi-send batch: operation %s at offset %s", operation, offset)
            return None

        to = to_hex(data[offset + 1 : offset + 21])
        value = int.from_bytes(data[offset + 21 : offset + 53], "big")
        data_length = int.from_bytes(data[offset + 53 : offset + 85], "big")
        payload_start = offset + _HEADER_LENGTH
        if payload_start + data_length > len(data):
            logger.debug("Multi-send record at offset %s overruns the blob", offset)
            break

        transactions.append(
            MultiSendTransaction(
                operation=operation,
                to=to,
                value=str(value),
                data_length=data_length,
                data=to_hex(data[payload_start : payload_start + data_length]),
            )
        )
        offset = payload_start + data_length

    if not transactions:
        return None
    return MultiSendBatch(transactions=transactions)
