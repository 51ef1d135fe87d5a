"""Tests for the calldata command line."""

import io
import json
import os
import tempfile
import unittest
from unittest.mock import patch

from eth_abi import encode

from calldata.main import main

RECIPIENT = "0x5d8a7dc9405f08f14541ba918c1bf7eb2dace556"
TRANSFER_DATA = "0xa9059cbb" + encode(["address", "uint256"], [RECIPIENT, 1000]).hex()


def _run(*argv):
    """Run the CLI offline and return (stdout, exit code)."""
    with patch("sys.stdout", new_callable=io.StringIO) as stdout:
        try:
            main(["--no-lookup", *argv])
        except SystemExit as e:
            return stdout.getvalue(), e.code
    return stdout.getvalue(), 0


class TestDecodeCommand(unittest.TestCase):
    def test_decode_known_selector_json(self):
        output, code = _run("decode", TRANSFER_DATA, "--json")

        self.assertEqual(code, 0)
        payload = json.loads(output)
        self.assertEqual(payload["status"], "decoded")
        self.assertEqual(payload["result"]["kind"], "call")
        self.assertEqual(payload["result"]["signature"], "transfer(address,uint256)")
        self.assertEqual(payload["result"]["parameters"]["amount"], "1000")

    def test_decode_text(self):
        output, code = _run("decode", TRANSFER_DATA)
        self.assertEqual(code, 0)
        self.assertIn("📞 Function: `transfer(address,uint256)`", output)

    def test_decode_with_signature_and_no_selector(self):
        args_only = "0x" + encode(["uint256"], [7]).hex()
        output, code = _run("decode", args_only, "--signature", "set(uint256 amount)", "--no-selector", "--json")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["result"]["parameters"], {"amount": "7"})

    def test_unknown_selector_exits_nonzero(self):
        output, code = _run("decode", "0xdeadbeef", "--json")
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(output)["status"], "no_match")

    def test_missing_input(self):
        _, code = _run("decode")
        self.assertEqual(code, 1)

    @patch("calldata.main.ChainManager")
    def test_decode_transaction(self, mock_manager):
        mock_manager.get_client.return_value.get_transaction_input.return_value = TRANSFER_DATA

        output, code = _run("decode", "--tx-hash", "0x" + "ab" * 32, "--chain", "base", "--json")

        self.assertEqual(code, 0)
        self.assertEqual(json.loads(output)["result"]["function"], "transfer")
        mock_manager.get_client.return_value.get_transaction_input.assert_called_once_with("0x" + "ab" * 32)

    @patch("calldata.main.ChainManager")
    def test_decode_transaction_without_provider(self, mock_manager):
        mock_manager.get_client.side_effect = ValueError("No providers found for chain MAINNET")
        _, code = _run("decode", "--tx-hash", "0x" + "ab" * 32)
        self.assertEqual(code, 1)

    def test_unknown_chain(self):
        _, code = _run("decode", "--tx-hash", "0x" + "ab" * 32, "--chain", "nowhere")
        self.assertEqual(code, 1)


class TestStructCommand(unittest.TestCase):
    def setUp(self):
        handle, self.path = tempfile.mkstemp(suffix=".sol")
        with os.fdopen(handle, "w") as f:
            f.write("struct Inner { uint256 amount; }\nstruct Outer { address owner; Inner inner; }\n")

    def tearDown(self):
        os.remove(self.path)

    def test_root_struct(self):
        data = "0x" + encode(["(address,(uint256))"], [(RECIPIENT, (5,))]).hex()
        output, code = _run("struct", data, "--definitions", self.path, "--json")

        self.assertEqual(code, 0)
        self.assertEqual(
            json.loads(output)["result"],
            {"owner": RECIPIENT, "inner": {"amount": "5"}},
        )

    def test_missing_definitions_file(self):
        _, code = _run("struct", "0x00", "--definitions", self.path + ".missing")
        self.assertEqual(code, 1)


class TestEncodeCommand(unittest.TestCase):
    def test_encode(self):
        output, code = _run("encode", "transfer(address,uint256)", json.dumps([RECIPIENT, "1000"]))
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), TRANSFER_DATA)

    def test_values_must_be_array(self):
        for values in ("not json", '{"a": 1}'):
            with self.subTest(values=values):
                _, code = _run("encode", "transfer(address,uint256)", values)
                self.assertEqual(code, 1)

    def test_bad_signature(self):
        _, code = _run("encode", "transfer(address", "[]")
        self.assertEqual(code, 1)


class TestLookupCommand(unittest.TestCase):
    def test_known_selector(self):
        output, code = _run("lookup", "0xa9059cbb")
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), "transfer(address,uint256)")

    def test_unknown_selector_offline(self):
        output, code = _run("lookup", "0xdeadbeef")
        self.assertEqual(code, 1)
        self.assertIn("No signature found", output)

    def test_invalid_selector(self):
        _, code = _run("lookup", "0x12")
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
