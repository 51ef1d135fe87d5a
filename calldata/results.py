"""Decoded value types.

A decoded value is either a plain value or one of the tagged results below:

* plain: ``str`` (addresses, hex bytes, strings, integers as decimal text),
  ``bool``, ``list`` (arrays) or ``dict`` (tuples/structs keyed by field name)
* ``DecodedCall``: a bytes value reinterpreted as a function call
* ``MultiSendBatch``: a Safe multiSend transactions blob
* ``UniswapRouterCall``: a Universal Router execute() command stream
* ``L1RelayCall``: a zkSync sendToL1(bytes) governance message

Consumers must handle every tagged kind explicitly; see ``TAGGED_RESULT_TYPES``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class DecodedCall:
    """A function call recovered from calldata or from a nested bytes value."""

    signature: str
    selector: str
    parameters: dict[str, Any] = field(default_factory=dict)
    raw: str = ""

    @property
    def function_name(self) -> str:
        return self.signature.split("(")[0]


@dataclass(frozen=True)
class MultiSendTransaction:
    operation: int  # 0 = Call, 1 = DelegateCall
    to: str
    value: str
    data_length: int
    data: Any  # raw hex, or a DecodedCall/MultiSendBatch after nested decoding

    @property
    def operation_name(self) -> str:
        return "DelegateCall" if self.operation == 1 else "Call"


@dataclass(frozen=True)
class MultiSendBatch:
    transactions: list[MultiSendTransaction]


@dataclass(frozen=True)
class UniswapPathPool:
    first_address: str
    tick_spacing: int
    second_address: str


@dataclass(frozen=True)
class UniswapCommandParam:
    name: str
    type: str
    description: str
    value: Any


@dataclass(frozen=True)
class UniswapCommand:
    index: int
    name: str
    params: list[UniswapCommandParam]


@dataclass(frozen=True)
class UniswapRouterCall:
    commands: list[UniswapCommand]
    deadline: str | None = None


@dataclass(frozen=True)
class L1Operation:
    target: str
    value: str
    calldata: Any  # raw hex, or a DecodedCall/MultiSendBatch after nested decoding


@dataclass(frozen=True)
class L1RelayCall:
    operations: list[L1Operation]
    executor: str
    salt: str


TAGGED_RESULT_TYPES = (DecodedCall, MultiSendBatch, UniswapRouterCall, L1RelayCall)

DecodedValue = Union[str, bool, list, dict, DecodedCall, MultiSendBatch, UniswapRouterCall, L1RelayCall]


class OutcomeStatus(Enum):
    DECODED = "decoded"
    NO_MATCH = "no_match"
    ERROR = "error"


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of a top-level decode: a value, an expected miss, or an error message."""

    status: OutcomeStatus
    value: Any = None
    message: str | None = None

    @classmethod
    def decoded(cls, value: Any) -> "DecodeOutcome":
        return cls(OutcomeStatus.DECODED, value=value)

    @classmethod
    def no_match(cls, message: str) -> "DecodeOutcome":
        return cls(OutcomeStatus.NO_MATCH, message=message)

    @classmethod
    def error(cls, message: str) -> "DecodeOutcome":
        return cls(OutcomeStatus.ERROR, message=message)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.DECODED
