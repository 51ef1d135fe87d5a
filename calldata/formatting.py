"""Render decoded values as a JSON tree or as indented text lines."""

from typing import Any

from eth_utils import is_hex_address, to_checksum_address

from calldata.results import (
    DecodedCall,
    DecodeOutcome,
    L1RelayCall,
    MultiSendBatch,
    OutcomeStatus,
    UniswapPathPool,
    UniswapRouterCall,
)

# Longer hex values are cut in text output; the JSON tree keeps them whole
_MAX_HEX_DISPLAY = 66
_INDENT = "  "


def to_json_tree(value: Any) -> Any:
    """Convert a decoded value into JSON-serialisable data.

    Tagged results become objects with a ``kind`` key: ``call``, ``multisend``,
    ``uniswap_router`` or ``send_to_l1``.
    """
    if isinstance(value, DecodedCall):
        return {
            "kind": "call",
            "function": value.function_name,
            "signature": value.signature,
            "selector": value.selector,
            "parameters": {name: to_json_tree(param) for name, param in value.parameters.items()},
            "raw": value.raw,
        }
    if isinstance(value, MultiSendBatch):
        return {
            "kind": "multisend",
            "transactions": [
                {
                    "operation": tx.operation,
                    "operation_name": tx.operation_name,
                    "to": tx.to,
                    "value": tx.value,
                    "data_length": tx.data_length,
                    "data": to_json_tree(tx.data),
                }
                for tx in value.transactions
            ],
        }
    if isinstance(value, UniswapRouterCall):
        return {
            "kind": "uniswap_router",
            "deadline": value.deadline,
            "commands": [
                {
                    "index": command.index,
                    "name": command.name,
                    "params": [
                        {
                            "name": param.name,
                            "type": param.type,
                            "description": param.description,
                            "value": to_json_tree(param.value),
                        }
                        for param in command.params
                    ],
                }
                for command in value.commands
            ],
        }
    if isinstance(value, L1RelayCall):
        return {
            "kind": "send_to_l1",
            "executor": value.executor,
            "salt": value.salt,
            "operations": [
                {"target": op.target, "value": op.value, "calldata": to_json_tree(op.calldata)}
                for op in value.operations
            ],
        }
    if isinstance(value, UniswapPathPool):
        return {
            "first_address": value.first_address,
            "tick_spacing": value.tick_spacing,
            "second_address": value.second_address,
        }
    if isinstance(value, dict):
        return {key: to_json_tree(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_tree(item) for item in value]
    if value is None or isinstance(value, (str, bool, int)):
        return value
    raise TypeError(f"Cannot convert {type(value).__name__} to a JSON tree")


def format_scalar(value: Any) -> str:
    """Format a plain decoded value for display.

    Addresses are checksummed and long hex strings are truncated.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        if value.startswith("0x") and is_hex_address(value):
            return to_checksum_address(value)
        if value.startswith("0x") and len(value) > _MAX_HEX_DISPLAY:
            return value[:_MAX_HEX_DISPLAY] + "..."
        return value
    return str(value)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool, int))


def _labelled(label: str, value: Any, indent: int) -> list[str]:
    pad = _INDENT * indent
    if _is_scalar(value):
        return [f"{pad}├ {label}: `{format_scalar(value)}`"]
    if isinstance(value, (list, tuple)) and not value:
        return [f"{pad}├ {label}: []"]
    return [f"{pad}├ {label}:"] + format_value_lines(value, indent + 1)


def format_value_lines(value: Any, indent: int = 0) -> list[str]:
    """Render ``value`` as text lines, one indentation level deeper per nesting level."""
    pad = _INDENT * indent

    if isinstance(value, DecodedCall):
        lines = [
            f"{pad}📞 Function: `{value.signature}`",
            f"{pad}🔍 Selector: `{value.selector}`",
        ]
        if value.parameters:
            lines.append(f"{pad}📋 Parameters:")
            for name, param in value.parameters.items():
                lines.extend(_labelled(name, param, indent + 1))
        return lines

    if isinstance(value, MultiSendBatch):
        lines = [f"{pad}📦 MultiSend batch: {len(value.transactions)} transaction(s)"]
        for i, tx in enumerate(value.transactions):
            lines.append(f"{pad}{_INDENT}#{i + 1} {tx.operation_name}")
            lines.extend(_labelled("to", tx.to, indent + 2))
            lines.extend(_labelled("value", tx.value, indent + 2))
            lines.extend(_labelled("dataLength", str(tx.data_length), indent + 2))
            lines.extend(_labelled("data", tx.data, indent + 2))
        return lines

    if isinstance(value, UniswapRouterCall):
        lines = [f"{pad}🦄 Uniswap Universal Router: {len(value.commands)} command(s)"]
        if value.deadline is not None:
            lines.append(f"{pad}{_INDENT}⏰ Deadline: `{value.deadline}`")
        for i, command in enumerate(value.commands):
            lines.append(f"{pad}{_INDENT}#{i + 1} {command.name} ({command.index:#04x})")
            for param in command.params:
                lines.extend(_labelled(f"{param.name} ({param.type})", param.value, indent + 2))
        return lines

    if isinstance(value, L1RelayCall):
        lines = [
            f"{pad}🌉 zkSync sendToL1: {len(value.operations)} L1 operation(s)",
            f"{pad}{_INDENT}├ executor: `{format_scalar(value.executor)}`",
            f"{pad}{_INDENT}├ salt: `{value.salt}`",
        ]
        for i, op in enumerate(value.operations):
            lines.append(f"{pad}{_INDENT}#{i + 1} Operation")
            lines.extend(_labelled("target", op.target, indent + 2))
            lines.extend(_labelled("value", op.value, indent + 2))
            lines.extend(_labelled("calldata", op.calldata, indent + 2))
        return lines

    if isinstance(value, UniswapPathPool):
        return [
            f"{pad}`{format_scalar(value.first_address)}` "
            f"-[{value.tick_spacing}]-> `{format_scalar(value.second_address)}`"
        ]

    if isinstance(value, dict):
        lines = []
        for key, item in value.items():
            lines.extend(_labelled(key, item, indent))
        return lines

    if isinstance(value, (list, tuple)):
        lines = []
        for i, item in enumerate(value):
            lines.extend(_labelled(f"[{i}]", item, indent))
        return lines

    if _is_scalar(value):
        return [f"{pad}{format_scalar(value)}"]

    raise TypeError(f"Cannot format {type(value).__name__}")


def format_outcome(outcome: DecodeOutcome) -> str:
    if outcome.status is OutcomeStatus.DECODED:
        return "\n".join(format_value_lines(outcome.value))
    if outcome.status is OutcomeStatus.NO_MATCH:
        return f"❔ No match: {outcome.message}"
    return f"❌ Error: {outcome.message}"
