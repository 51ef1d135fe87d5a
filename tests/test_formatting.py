"""Tests for calldata/formatting.py."""

import json
import unittest

from calldata.formatting import format_outcome, format_scalar, format_value_lines, to_json_tree
from calldata.results import (
    DecodedCall,
    DecodeOutcome,
    L1Operation,
    L1RelayCall,
    MultiSendBatch,
    MultiSendTransaction,
    UniswapCommand,
    UniswapCommandParam,
    UniswapPathPool,
    UniswapRouterCall,
)

ADDRESS = "0x5d8a7dc9405f08f14541ba918c1bf7eb2dace556"
CHECKSUMMED = "0x5d8A7DC9405F08F14541BA918c1Bf7eb2dACE556"
TRANSFER = DecodedCall(
    signature="transfer(address,uint256)",
    selector="0xa9059cbb",
    parameters={"to": ADDRESS, "amount": "1000"},
    raw="0xa9059cbb",
)


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


class TestFormatScalar(unittest.TestCase):
    def test_address_checksummed(self):
        self.assertEqual(format_scalar(ADDRESS), CHECKSUMMED)

    def test_long_hex_truncated(self):
        result = format_scalar("0x" + "ff" * 64)
        self.assertTrue(result.endswith("..."))
        self.assertEqual(len(result), 66 + 3)

    def test_other_values(self):
        self.assertEqual(format_scalar(True), "true")
        self.assertEqual(format_scalar("1000"), "1000")
        self.assertEqual(format_scalar("0xdead"), "0xdead")


class TestToJsonTree(unittest.TestCase):
    def test_call(self):
        tree = to_json_tree(TRANSFER)
        self.assertEqual(tree["kind"], "call")
        self.assertEqual(tree["function"], "transfer")
        self.assertEqual(tree["parameters"], {"to": ADDRESS, "amount": "1000"})

    def test_every_kind_tagged_and_serialisable(self):
        batch = MultiSendBatch([MultiSendTransaction(0, ADDRESS, "0", 4, TRANSFER)])
        router = UniswapRouterCall(
            commands=[
                UniswapCommand(
                    0,
                    "V3_SWAP_EXACT_IN",
                    [UniswapCommandParam("path", "bytes", "route", [UniswapPathPool(ADDRESS, 500, ADDRESS)])],
                )
            ],
            deadline="1",
        )
        relay = L1RelayCall([L1Operation(ADDRESS, "0", batch)], ADDRESS, "0x" + "00" * 32)

        tree = to_json_tree({"items": [router, relay]})
        self.assertEqual(tree["items"][0]["kind"], "uniswap_router")
        self.assertEqual(tree["items"][0]["commands"][0]["params"][0]["value"][0]["tick_spacing"], 500)
        self.assertEqual(tree["items"][1]["kind"], "send_to_l1")
        nested = tree["items"][1]["operations"][0]["calldata"]
        self.assertEqual(nested["kind"], "multisend")
        self.assertEqual(nested["transactions"][0]["data"]["kind"], "call")
        json.dumps(tree)

    def test_unknown_type(self):
        with self.assertRaises(TypeError):
            to_json_tree(object())


class TestFormatValueLines(unittest.TestCase):
    def test_call(self):
        lines = format_value_lines(TRANSFER)
        self.assertEqual(lines[0], "📞 Function: `transfer(address,uint256)`")
        self.assertEqual(lines[1], "🔍 Selector: `0xa9059cbb`")
        self.assertEqual(lines[2], "📋 Parameters:")
        self.assertIn(CHECKSUMMED, lines[3])
        self.assertIn("amount: `1000`", lines[4])

    def test_nesting_increases_indentation(self):
        outer = DecodedCall("execute(bytes)", "0x09c5eabe", {"data": TRANSFER}, "0x")
        lines = format_value_lines(outer)
        inner_header = next(line for line in lines if "transfer(address,uint256)" in line)
        self.assertGreater(_indent(inner_header), _indent(lines[0]))

    def test_each_kind_has_a_header(self):
        batch = MultiSendBatch([MultiSendTransaction(1, ADDRESS, "5", 0, "0x")])
        router = UniswapRouterCall([UniswapCommand(11, "WRAP_ETH", [])], deadline="99")
        relay = L1RelayCall([L1Operation(ADDRESS, "0", "0x")], ADDRESS, "0x01")

        self.assertIn("MultiSend", format_value_lines(batch)[0])
        self.assertIn("DelegateCall", "\n".join(format_value_lines(batch)))
        router_text = "\n".join(format_value_lines(router))
        self.assertIn("Uniswap Universal Router", router_text)
        self.assertIn("WRAP_ETH", router_text)
        self.assertIn("99", router_text)
        self.assertIn("sendToL1", format_value_lines(relay)[0])

    def test_plain_values(self):
        lines = format_value_lines({"values": ["1", "2"], "empty": []})
        self.assertEqual(lines[0], "├ values:")
        self.assertEqual(lines[1], "  ├ [0]: `1`")
        self.assertEqual(lines[3], "├ empty: []")

    def test_unknown_type(self):
        with self.assertRaises(TypeError):
            format_value_lines(object())


class TestFormatOutcome(unittest.TestCase):
    def test_decoded(self):
        self.assertTrue(format_outcome(DecodeOutcome.decoded(TRANSFER)).startswith("📞 Function:"))

    def test_no_match_and_error(self):
        self.assertIn("No function signature", format_outcome(DecodeOutcome.no_match("No function signature found")))
        self.assertTrue(format_outcome(DecodeOutcome.error("bad data")).startswith("❌ Error"))


if __name__ == "__main__":
    unittest.main()
