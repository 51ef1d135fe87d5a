"""Command line entry point: decode calldata, decode structs, encode calls, look up selectors."""

import argparse
import json
import sys

from web3.exceptions import ProviderConnectionError

from calldata.calldata_decoder import CalldataDecoder
from calldata.exceptions import DecoderError
from calldata.formatting import format_outcome, to_json_tree
from calldata.results import DecodeOutcome
from calldata.signature_lookup import FourByteSignatureResolver
from utils.cache import TTLCache
from utils.chains import Chain
from utils.config import Config
from utils.logging import get_logger, set_level
from utils.web3_wrapper import ChainManager

logger = get_logger("calldata.main")


def _print_outcome(outcome: DecodeOutcome, as_json: bool) -> None:
    if as_json:
        payload = {"status": outcome.status.value}
        if outcome.ok:
            payload["result"] = to_json_tree(outcome.value)
        else:
            payload["message"] = outcome.message
        print(json.dumps(payload, indent=2))
    else:
        print(format_outcome(outcome))


def _fetch_transaction_input(tx_hash: str, chain_name: str) -> str | None:
    try:
        client = ChainManager.get_client(Chain.from_name(chain_name))
        return client.get_transaction_input(tx_hash)
    except (ValueError, ProviderConnectionError) as e:
        logger.error("Could not fetch transaction %s on %s: %s", tx_hash, chain_name, e)
        return None


def _cmd_decode(args: argparse.Namespace, decoder: CalldataDecoder) -> bool:
    if args.tx_hash:
        data = _fetch_transaction_input(args.tx_hash, args.chain)
        if data is None:
            return False
    elif args.data:
        data = args.data
    else:
        logger.error("Provide calldata or --tx-hash")
        return False

    outcome = decoder.decode_calldata(data, signature=args.signature, has_selector=not args.no_selector)
    _print_outcome(outcome, args.json)
    return outcome.ok


def _cmd_struct(args: argparse.Namespace, decoder: CalldataDecoder) -> bool:
    try:
        with open(args.definitions) as f:
            definitions = f.read()
    except OSError as e:
        logger.error("Cannot read struct definitions: %s", e)
        return False

    outcome = decoder.decode_struct(definitions, args.data, struct_name=args.name)
    _print_outcome(outcome, args.json)
    return outcome.ok


def _cmd_encode(args: argparse.Namespace, decoder: CalldataDecoder) -> bool:
    try:
        values = json.loads(args.values)
    except json.JSONDecodeError as e:
        logger.error("Values must be a JSON array: %s", e)
        return False
    if not isinstance(values, list):
        logger.error("Values must be a JSON array, got %s", type(values).__name__)
        return False

    try:
        print(decoder.encode_call(args.signature, values))
    except DecoderError as e:
        logger.error("Encoding failed: %s", e)
        return False
    return True


def _cmd_lookup(args: argparse.Namespace, decoder: CalldataDecoder) -> bool:
    try:
        signatures = decoder.resolver.lookup(args.selector)
    except ValueError as e:
        logger.error("%s", e)
        return False
    if not signatures:
        print(f"No signature found for {args.selector}")
        return False
    for signature in signatures:
        print(signature)
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decode and encode Ethereum calldata.")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL or INFO.",
    )
    parser.add_argument("--no-lookup", action="store_true", help="Do not query remote signature directories")
    subparsers = parser.add_subparsers(dest="command", required=True)

    decode_parser = subparsers.add_parser("decode", help="Decode function calldata")
    decode_parser.add_argument("data", nargs="?", help="Hex calldata")
    decode_parser.add_argument("--signature", help="Function signature, e.g. 'transfer(address to, uint256 amount)'")
    decode_parser.add_argument(
        "--no-selector", action="store_true", help="Data is ABI-encoded arguments without a selector"
    )
    decode_parser.add_argument("--tx-hash", help="Decode the input of this transaction instead")
    decode_parser.add_argument("--chain", default=Chain.MAINNET.network_name, help="Chain of --tx-hash (default: mainnet)")
    decode_parser.add_argument("--json", action="store_true", help="Print a JSON tree")
    decode_parser.set_defaults(handler=_cmd_decode)

    struct_parser = subparsers.add_parser("struct", help="Decode ABI-encoded data as a Solidity struct")
    struct_parser.add_argument("data", help="Hex encoded struct")
    struct_parser.add_argument("--definitions", required=True, help="File with struct and enum definitions")
    struct_parser.add_argument("--name", help="Struct to decode (default: the single root struct)")
    struct_parser.add_argument("--json", action="store_true", help="Print a JSON tree")
    struct_parser.set_defaults(handler=_cmd_struct)

    encode_parser = subparsers.add_parser("encode", help="Encode a function call")
    encode_parser.add_argument("signature", help="Function signature")
    encode_parser.add_argument("values", help='Arguments as a JSON array, e.g. \'["0xabc...", "1000"]\'')
    encode_parser.set_defaults(handler=_cmd_encode)

    lookup_parser = subparsers.add_parser("lookup", help="Look up signatures for a 4-byte selector")
    lookup_parser.add_argument("selector", help="4-byte selector, e.g. 0xa9059cbb")
    lookup_parser.set_defaults(handler=_cmd_lookup)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    if args.log_level:
        try:
            set_level(args.log_level)
        except ValueError as e:
            logger.error("%s", e)
            sys.exit(1)

    config = Config.get_decoder_config()
    resolver = FourByteSignatureResolver(
        cache=TTLCache(ttl=config.cache_ttl, max_size=config.cache_max_size),
        lookup_enabled=config.lookup_enabled and not args.no_lookup,
    )
    decoder = CalldataDecoder(resolver=resolver, max_depth=config.max_depth)
    if not args.handler(args, decoder):
        sys.exit(1)


if __name__ == "__main__":
    main()
