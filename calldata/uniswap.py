"""Decode Uniswap Universal Router ``execute`` calldata into its command list.

``execute(bytes commands, bytes[] inputs[, uint256 deadline])`` carries one
opcode byte per command and a parallel array of ABI-encoded inputs. The low
five bits of each opcode select the command; the top bits are flags and are
ignored here.
"""

from dataclasses import dataclass

from calldata.abi_codec import decode_values, hex_to_bytes, leading_selector, to_hex
from calldata.abi_types import TypeDescriptor
from calldata.exceptions import DecoderError
from calldata.results import UniswapCommand, UniswapCommandParam, UniswapPathPool, UniswapRouterCall
from utils.logging import get_logger

logger = get_logger("calldata.uniswap")

EXECUTE_WITH_DEADLINE_SELECTOR = "0x3593564c"  # execute(bytes,bytes[],uint256)
EXECUTE_SELECTOR = "0x24856bc3"  # execute(bytes,bytes[])

_OUTER_PARAMS = {
    EXECUTE_WITH_DEADLINE_SELECTOR: (
        TypeDescriptor("commands", "bytes"),
        TypeDescriptor("inputs", "bytes[]"),
        TypeDescriptor("deadline", "uint256"),
    ),
    EXECUTE_SELECTOR: (
        TypeDescriptor("commands", "bytes"),
        TypeDescriptor("inputs", "bytes[]"),
    ),
}

COMMAND_TYPE_MASK = 0x1F

_ADDRESS_LENGTH = 20
_TICK_SPACING_LENGTH = 3

# Known Universal Router deployments (mainnet, Arbitrum, Base, Optimism, Polygon, BSC, Avalanche)
UNISWAP_UNIVERSAL_ROUTER_ADDRESSES: frozenset[str] = frozenset(
    address.lower()
    for address in (
        "0xEf1c6E67703c7BD7107eed8303Fbe6EC2554BF6B",
        "0x3fC91A3afd70395Cd496C647d5a6CC9D4B2b7FAD",
        "0x4C60051384bd2d3C01bfc845Cf5F4b44bcbE9de5",
        "0xeC8B0F7Ffe3ae75d7FfAb09429e3675bb63503e4",
        "0x5E325eDA8064b456f4781070C0738d849c824258",
        "0xb555edF5dcF85f42cEeF1f3630a52A108E55A654",
        "0xCb1355ff08Ab38bBCE60111F1bb2B784bE25D7e8",
        "0x643770E279d5D0733F21d6DC03A8efbABf3255B4",
        "0xec7BE89e9d109e7e3Fec59c222CF297125FEFda2",
        "0x5Dc88340E1c5c6366864Ee415d6034cadd1A9897",
        "0x4Dae2f939ACf50408e13d58534Ff8c2776d45265",
        "0x82635AF6146972cD6601161c4472ffe97237D292",
    )
)


@dataclass(frozen=True)
class CommandParamSpec:
    name: str
    type: str
    description: str


@dataclass(frozen=True)
class CommandSpec:
    name: str
    params: tuple[CommandParamSpec, ...]

    def descriptors(self) -> list[TypeDescriptor]:
        return [TypeDescriptor(param.name, param.type) for param in self.params]


def _p(type_: str, name: str, description: str) -> CommandParamSpec:
    return CommandParamSpec(name=name, type=type_, description=description)


_RECIPIENT = _p("address", "recipient", "The recipient of the output of the trade")
_PAYER_IS_USER = _p(
    "bool",
    "payerIsUser",
    "Whether the input tokens come from msg.sender (through Permit2) or are already in the router",
)


def _forward(marketplace: str) -> CommandParamSpec:
    return _p("uint256", "value", f"The ETH value to forward to the {marketplace} contract")


def _calldata(marketplace: str) -> CommandParamSpec:
    return _p("bytes", "data", f"The calldata to use to call the {marketplace} contract")


# Indices 7, 14 and 15 are unassigned
UNISWAP_ROUTER_COMMANDS: dict[int, CommandSpec] = {
    0x00: CommandSpec(
        "V3_SWAP_EXACT_IN",
        (
            _RECIPIENT,
            _p("uint256", "amountIn", "The amount of input tokens for the trade"),
            _p("uint256", "amountOutMin", "The minimum amount of output tokens the user wants"),
            _p("bytes", "path", "The UniswapV3 encoded path to trade along"),
            _PAYER_IS_USER,
        ),
    ),
    0x01: CommandSpec(
        "V3_SWAP_EXACT_OUT",
        (
            _RECIPIENT,
            _p("uint256", "amountOut", "The amount of output tokens to receive"),
            _p("uint256", "amountInMax", "The maximum number of input tokens that should be spent"),
            _p("bytes", "path", "The UniswapV3 encoded path to trade along"),
            _PAYER_IS_USER,
        ),
    ),
    0x02: CommandSpec(
        "PERMIT2_TRANSFER_FROM",
        (
            _p("address", "token", "The token to fetch from Permit2"),
            _p("address", "recipient", "The recipient of the tokens fetched"),
            _p("uint256", "amount", "The amount of token to fetch"),
        ),
    ),
    0x03: CommandSpec(
        "PERMIT2_PERMIT_BATCH",
        (
            _p("bytes", "batch", "A PermitBatch struct outlining all of the Permit2 permits to execute"),
            _p("bytes", "data", "The signature to provide to Permit2"),
        ),
    ),
    0x04: CommandSpec(
        "SWEEP",
        (
            _p("address", "token", "The ERC20 token to sweep (or Constants.ETH for ETH)"),
            _p("address", "recipient", "The recipient of the sweep"),
            _p("uint256", "amountMin", "The minimum required tokens to receive from the sweep"),
        ),
    ),
    0x05: CommandSpec(
        "TRANSFER",
        (
            _p("address", "token", "The ERC20 token to transfer (or Constants.ETH for ETH)"),
            _p("address", "recipient", "The recipient of the transfer"),
            _p("uint256", "value", "The amount to transfer"),
        ),
    ),
    0x06: CommandSpec(
        "PAY_PORTION",
        (
            _p("address", "token", "The ERC20 token to transfer (or Constants.ETH for ETH)"),
            _p("address", "recipient", "The recipient of the transfer"),
            _p("uint256", "bips", "In basis points, the percentage of the contract's balance to transfer"),
        ),
    ),
    0x08: CommandSpec(
        "V2_SWAP_EXACT_IN",
        (
            _RECIPIENT,
            _p("uint256", "amountIn", "The amount of input tokens for the trade"),
            _p("uint256", "amountOutMin", "The minimum amount of output tokens the user wants"),
            _p("address[]", "path", "The UniswapV2 token path to trade along"),
            _PAYER_IS_USER,
        ),
    ),
    0x09: CommandSpec(
        "V2_SWAP_EXACT_OUT",
        (
            _RECIPIENT,
            _p("uint256", "amountOut", "The amount of output tokens to receive"),
            _p("uint256", "amountInMax", "The maximum number of input tokens that should be spent"),
            _p("address[]", "path", "The UniswapV2 token path to trade along"),
            _PAYER_IS_USER,
        ),
    ),
    0x0A: CommandSpec(
        "PERMIT2_PERMIT",
        (
            _p("bytes", "permitSingle", "A PermitSingle struct outlining the Permit2 permit to execute"),
            _p("bytes", "signature", "The signature to provide to Permit2"),
        ),
    ),
    0x0B: CommandSpec(
        "WRAP_ETH",
        (
            _p("address", "recipient", "The recipient of the WETH"),
            _p("uint256", "amountMin", "The amount of ETH to wrap"),
        ),
    ),
    0x0C: CommandSpec(
        "UNWRAP_WETH",
        (
            _p("address", "recipient", "The recipient of the ETH"),
            _p("uint256", "amountMin", "The minimum required ETH to receive from the unwrapping"),
        ),
    ),
    0x0D: CommandSpec(
        "PERMIT2_TRANSFER_FROM_BATCH",
        (
            _p(
                "bytes",
                "batchDetails",
                "An array of AllowanceTransferDetails structs describing Permit2 transfers to perform",
            ),
        ),
    ),
    0x10: CommandSpec("SEAPORT", (_forward("Seaport"), _calldata("Seaport"))),
    0x11: CommandSpec(
        "LOOKS_RARE_721",
        (
            _forward("LooksRare"),
            _calldata("LooksRare"),
            _p("address", "recipient", "The recipient of the ERC721"),
            _p("address", "token", "The ERC721 token address"),
            _p("uint256", "id", "The ID of the ERC721"),
        ),
    ),
    0x12: CommandSpec("NFTX", (_forward("NFTX"), _calldata("NFTX"))),
    0x13: CommandSpec(
        "CRYPTOPUNKS",
        (
            _p("uint256", "punkId", "The PunkID to purchase"),
            _p("address", "recipient", "The recipient for the cryptopunk"),
            _forward("Cryptopunks"),
        ),
    ),
    0x14: CommandSpec(
        "LOOKS_RARE_1155",
        (
            _forward("LooksRare"),
            _calldata("LooksRare"),
            _p("address", "recipient", "The recipient of the ERC1155"),
            _p("address", "token", "The ERC1155 token address"),
            _p("uint256", "id", "The ID of the ERC1155"),
            _p("uint256", "amount", "The amount of the ERC1155 to transfer"),
        ),
    ),
    0x15: CommandSpec(
        "OWNER_CHECK_721",
        (
            _p("address", "owner", "The required owner of the ERC721"),
            _p("address", "token", "The ERC721 token address"),
            _p("uint256", "id", "The ID of the ERC721"),
        ),
    ),
    0x16: CommandSpec(
        "OWNER_CHECK_1155",
        (
            _p("address", "owner", "The required owner of the ERC1155"),
            _p("address", "token", "The ERC1155 token address"),
            _p("uint256", "id", "The ID of the ERC1155"),
            _p("uint256", "minBalance", "The minimum required amount of the ERC1155"),
        ),
    ),
    0x17: CommandSpec(
        "SWEEP_ERC721",
        (
            _p("address", "token", "The ERC721 token address to transfer"),
            _p("address", "recipient", "The recipient of the transfer"),
            _p("uint256", "id", "The token ID to transfer"),
        ),
    ),
    0x18: CommandSpec(
        "X2Y2_721",
        (
            _forward("X2Y2"),
            _calldata("X2Y2"),
            _p("address", "recipient", "The recipient of the ERC721"),
            _p("address", "token", "The ERC721 token address"),
            _p("uint256", "id", "The ID of the ERC721"),
        ),
    ),
    0x19: CommandSpec("SUDOSWAP", (_forward("Sudoswap"), _calldata("Sudoswap"))),
    0x1A: CommandSpec("NFT20", (_forward("NFT20"), _calldata("NFT20"))),
    0x1B: CommandSpec(
        "X2Y2_1155",
        (
            _forward("X2Y2"),
            _calldata("X2Y2"),
            _p("address", "recipient", "The recipient of the ERC1155"),
            _p("address", "token", "The ERC1155 token address"),
            _p("uint256", "id", "The ID of the ERC1155"),
            _p("uint256", "amount", "The amount of the ERC1155 to transfer"),
        ),
    ),
    0x1C: CommandSpec(
        "FOUNDATION",
        (
            _forward("Foundation"),
            _calldata("Foundation"),
            _p("address", "recipient", "The recipient of the ERC721"),
            _p("address", "token", "The ERC721 token address"),
            _p("uint256", "id", "The ID of the ERC721"),
        ),
    ),
    0x1D: CommandSpec(
        "SWEEP_ERC1155",
        (
            _p("address", "token", "The ERC1155 token address to sweep"),
            _p("address", "recipient", "The recipient of the sweep"),
            _p("uint256", "id", "The token ID to sweep"),
            _p("uint256", "amount", "The minimum required tokens to receive from the sweep"),
        ),
    ),
}


def decode_uniswap_path(raw_path: str) -> list[UniswapPathPool]:
    """Split a packed V3 path (address, 3-byte tick spacing, address, ...) into hops.

    Consecutive hops share an address: ``pools[i].second_address == pools[i + 1].first_address``.
    """
    data = hex_to_bytes(raw_path)
    pools: list[UniswapPathPool] = []
    first_address: str | None = None
    tick_spacing = 0
    offset = 0
    parsing_address = True

    while len(data) - offset >= (_ADDRESS_LENGTH if parsing_address else _TICK_SPACING_LENGTH):
        if parsing_address:
            address = to_hex(data[offset : offset + _ADDRESS_LENGTH])
            if first_address is not None:
                pools.append(UniswapPathPool(first_address, tick_spacing, address))
            first_address = address
            offset += _ADDRESS_LENGTH
        else:
            tick_spacing = int.from_bytes(data[offset : offset + _TICK_SPACING_LENGTH], "big")
            offset += _TICK_SPACING_LENGTH
        parsing_address = not parsing_address

    return pools


def decode_command(command: int, input_hex: str | None) -> UniswapCommand | None:
    """Decode one command's input. Unknown commands and undecodable inputs yield None."""
    index = command & COMMAND_TYPE_MASK
    spec = UNISWAP_ROUTER_COMMANDS.get(index)
    if spec is None:
        logger.debug("Skipping unknown Universal Router command %#04x", command)
        return None
    if input_hex is None:
        logger.debug("No input for Universal Router command %s", spec.name)
        return None

    try:
        values = decode_values(spec.descriptors(), hex_to_bytes(input_hex))
        params = []
        for param, value in zip(spec.params, values):
            if param.name == "path" and param.type == "bytes":
                value = decode_uniswap_path(value)
            params.append(UniswapCommandParam(param.name, param.type, param.description, value))
    except DecoderError as e:
        logger.debug("Failed to decode Universal Router command %s: %s", spec.name, e)
        return None

    return UniswapCommand(index=index, name=spec.name, params=params)


def is_uniswap_router_data(data: str) -> bool:
    return leading_selector(data) in _OUTER_PARAMS


def decode_uniswap_router_data(calldata: str) -> UniswapRouterCall | None:
    """Decode Universal Router ``execute`` calldata, or return None if it is not one.

    Commands that are unknown or whose input does not decode are left out; the
    rest of the batch is still returned.
    """
    selector = leading_selector(calldata)
    outer = _OUTER_PARAMS.get(selector)
    if outer is None:
        return None

    try:
        values = decode_values(outer, hex_to_bytes(calldata)[4:])
    except DecoderError as e:
        logger.debug("Failed to decode Universal Router calldata: %s", e)
        return None

    commands, inputs = hex_to_bytes(values[0]), values[1]
    deadline = values[2] if len(values) > 2 else None

    decoded: list[UniswapCommand] = []
    for i, command in enumerate(commands):
        # commands and inputs are parallel arrays; a missing input drops the command
        command_input = inputs[i] if i < len(inputs) else None
        result = decode_command(command, command_input)
        if result is not None:
            decoded.append(result)

    return UniswapRouterCall(commands=decoded, deadline=deadline)
