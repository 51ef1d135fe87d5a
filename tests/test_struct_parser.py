"""Tests for calldata/struct_parser.py."""

import unittest

from calldata.abi_types import TypeDescriptor
from calldata.exceptions import (
    CircularReferenceError,
    MappingTypeError,
    StructResolutionError,
    UnknownStructError,
    UnknownTypeError,
)
from calldata.struct_parser import (
    StructField,
    detect_root_structs,
    extract_array_suffix,
    extract_base_type,
    parse_definitions,
    resolve_struct,
)

AGREEMENT_DETAILS = """
    struct AgreementDetailsV1 {
        string protocolName;
        Contact[] contactDetails;
        Chain[] chains;
        BountyTerms bountyTerms;
        string agreementURI;
    }
    struct Contact { string name; string contact; }
    struct Chain {
        address assetRecoveryAddress;
        Account[] accounts;
        uint256 id;
    }
    struct Account {
        address accountAddress;
        ChildContractScope childContractScope;
        bytes signature;
    }
    enum ChildContractScope { None, ExistingOnly, All }
    struct BountyTerms {
        uint256 bountyPercentage;
        uint256 bountyCapUSD;
        bool retainable;
        IdentityRequirements identity;
        string diligenceRequirements;
    }
    enum IdentityRequirements { Anonymous, Pseudonymous, Named }
"""


class TestParseDefinitions(unittest.TestCase):
    def test_simple_struct(self):
        definitions = parse_definitions(
            """
            struct Foo {
                address owner;
                uint256 amount;
            }
            """
        )
        self.assertEqual(len(definitions.structs), 1)
        self.assertEqual(
            definitions.structs["Foo"],
            [StructField("owner", "address"), StructField("amount", "uint256")],
        )

    def test_enums(self):
        definitions = parse_definitions("enum Status { Active, Paused, Stopped }")
        self.assertEqual(definitions.enums, {"Status"})

    def test_single_line_comments(self):
        definitions = parse_definitions(
            """
            struct Foo {
                // The owner address
                address owner;
                uint256 amount; // in wei
            }
            """
        )
        self.assertEqual(
            definitions.structs["Foo"],
            [StructField("owner", "address"), StructField("amount", "uint256")],
        )

    def test_block_comments(self):
        definitions = parse_definitions(
            """
            /* This is a comment */
            struct Foo {
                /** @notice The owner */
                address owner;
            }
            """
        )
        self.assertEqual(definitions.structs["Foo"], [StructField("owner", "address")])

    def test_array_types(self):
        definitions = parse_definitions(
            """
            struct Foo {
                address[] owners;
                uint256[3] fixed;
                uint256 [ ] spaced;
            }
            """
        )
        self.assertEqual(
            definitions.structs["Foo"],
            [
                StructField("owners", "address[]"),
                StructField("fixed", "uint256[3]"),
                StructField("spaced", "uint256[]"),
            ],
        )

    def test_multiple_structs_and_enums(self):
        definitions = parse_definitions(
            """
            struct A { uint256 x; }
            struct B { address y; }
            enum E { One, Two }
            """
        )
        self.assertEqual(list(definitions.structs), ["A", "B"])
        self.assertEqual(definitions.enums, {"E"})

    def test_pragma_and_license_ignored(self):
        definitions = parse_definitions(
            """
            // SPDX-License-Identifier: MIT
            pragma solidity ^0.8.20;
            struct Foo { uint256 x; }
            """
        )
        self.assertEqual(list(definitions.structs), ["Foo"])

    def test_empty_body(self):
        self.assertEqual(parse_definitions("struct Empty {}").structs["Empty"], [])

    def test_duplicate_struct_last_wins(self):
        definitions = parse_definitions("struct A { uint256 x; } struct A { address y; }")
        self.assertEqual(definitions.structs["A"], [StructField("y", "address")])

    def test_garbage_never_raises(self):
        self.assertEqual(parse_definitions("struct { oops").structs, {})
        self.assertEqual(parse_definitions("").structs, {})


class TestTypeHelpers(unittest.TestCase):
    def test_extract_base_type(self):
        self.assertEqual(extract_base_type("Item[]"), "Item")
        self.assertEqual(extract_base_type("uint256[3][]"), "uint256")
        self.assertEqual(extract_base_type("address"), "address")

    def test_extract_array_suffix(self):
        self.assertEqual(extract_array_suffix("Item[]"), "[]")
        self.assertEqual(extract_array_suffix("uint256[3][]"), "[3][]")
        self.assertEqual(extract_array_suffix("address"), "")


class TestResolveStruct(unittest.TestCase):
    def test_primitive_fields(self):
        definitions = parse_definitions(
            """
            struct Foo {
                address owner;
                uint256 amount;
                bool active;
                string name;
                bytes data;
            }
            """
        )
        self.assertEqual(
            resolve_struct("Foo", definitions),
            TypeDescriptor(
                "Foo",
                "tuple",
                (
                    TypeDescriptor("owner", "address"),
                    TypeDescriptor("amount", "uint256"),
                    TypeDescriptor("active", "bool"),
                    TypeDescriptor("name", "string"),
                    TypeDescriptor("data", "bytes"),
                ),
            ),
        )

    def test_enum_as_uint8(self):
        definitions = parse_definitions("enum Status { Active, Paused } struct Foo { Status s; }")
        self.assertEqual(resolve_struct("Foo", definitions).components[0], TypeDescriptor("s", "uint8"))

    def test_nested_struct(self):
        definitions = parse_definitions("struct Inner { uint256 x; } struct Outer { Inner inner; address owner; }")
        self.assertEqual(
            resolve_struct("Outer", definitions),
            TypeDescriptor(
                "Outer",
                "tuple",
                (
                    TypeDescriptor("inner", "tuple", (TypeDescriptor("x", "uint256"),)),
                    TypeDescriptor("owner", "address"),
                ),
            ),
        )

    def test_struct_array(self):
        definitions = parse_definitions("struct Item { uint256 id; } struct List { Item[] items; Item[2] pair; }")
        items, pair = resolve_struct("List", definitions).components
        self.assertEqual(items, TypeDescriptor("items", "tuple[]", (TypeDescriptor("id", "uint256"),)))
        self.assertEqual(pair.type, "tuple[2]")
        self.assertEqual(pair.canonical, "(uint256)[2]")

    def test_enum_array(self):
        definitions = parse_definitions("enum Color { Red, Green, Blue } struct Palette { Color[] colors; }")
        self.assertEqual(resolve_struct("Palette", definitions).components[0], TypeDescriptor("colors", "uint8[]"))

    def test_unknown_struct(self):
        definitions = parse_definitions("struct Foo { uint256 x; }")
        with self.assertRaisesRegex(UnknownStructError, 'Unknown struct "Bar"'):
            resolve_struct("Bar", definitions)

    def test_unknown_field_type(self):
        definitions = parse_definitions("struct Foo { Missing x; }")
        with self.assertRaisesRegex(UnknownTypeError, 'Unknown type "Missing" for field "x"'):
            resolve_struct("Foo", definitions)

    def test_circular_reference(self):
        definitions = parse_definitions("struct A { B b; } struct B { A a; }")
        with self.assertRaisesRegex(CircularReferenceError, "Circular reference"):
            resolve_struct("A", definitions)
        with self.assertRaises(CircularReferenceError):
            resolve_struct("B", definitions)

    def test_self_reference(self):
        definitions = parse_definitions("struct Node { uint256 value; Node[] children; }")
        with self.assertRaises(CircularReferenceError):
            resolve_struct("Node", definitions)

    def test_sibling_references_are_not_cycles(self):
        definitions = parse_definitions(
            """
            struct Leaf { uint256 x; }
            struct Left { Leaf leaf; }
            struct Right { Leaf leaf; }
            struct Root { Left left; Right right; Leaf leaf; }
            """
        )
        root = resolve_struct("Root", definitions)
        self.assertEqual(root.canonical, "(((uint256)),((uint256)),(uint256))")

    def test_mapping_rejected(self):
        definitions = parse_definitions("struct Foo { mapping(address=>uint256) balances; }")
        with self.assertRaisesRegex(MappingTypeError, "mapping"):
            resolve_struct("Foo", definitions)

    def test_errors_share_a_base_class(self):
        definitions = parse_definitions("struct Foo { Missing x; }")
        with self.assertRaises(StructResolutionError):
            resolve_struct("Foo", definitions)

    def test_agreement_details(self):
        definitions = parse_definitions(AGREEMENT_DETAILS)
        result = resolve_struct("AgreementDetailsV1", definitions)

        self.assertEqual(result.type, "tuple")
        self.assertEqual(len(result.components), 5)
        self.assertEqual(result.components[0], TypeDescriptor("protocolName", "string"))
        self.assertEqual(result.components[1].type, "tuple[]")
        self.assertEqual(len(result.components[1].components), 2)
        self.assertEqual(result.components[3].type, "tuple")
        self.assertEqual(len(result.components[3].components), 5)
        self.assertEqual(result.components[3].components[3], TypeDescriptor("identity", "uint8"))
        account = result.components[2].components[1]
        self.assertEqual(account.canonical, "(address,uint8,bytes)[]")

    def test_resolution_is_deterministic(self):
        self.assertEqual(
            resolve_struct("AgreementDetailsV1", parse_definitions(AGREEMENT_DETAILS)),
            resolve_struct("AgreementDetailsV1", parse_definitions(AGREEMENT_DETAILS)),
        )


class TestDetectRootStructs(unittest.TestCase):
    def test_unreferenced_struct_is_root(self):
        definitions = parse_definitions("struct Inner { uint256 x; } struct Outer { Inner inner; }")
        self.assertEqual(detect_root_structs(definitions), ["Outer"])

    def test_multiple_roots(self):
        definitions = parse_definitions("struct A { uint256 x; } struct B { uint256 y; }")
        self.assertEqual(sorted(detect_root_structs(definitions)), ["A", "B"])

    def test_all_referenced_falls_back_to_all(self):
        definitions = parse_definitions("struct A { B b; } struct B { A a; }")
        self.assertEqual(sorted(detect_root_structs(definitions)), ["A", "B"])

    def test_agreement_details_root(self):
        self.assertEqual(detect_root_structs(parse_definitions(AGREEMENT_DETAILS)), ["AgreementDetailsV1"])

    def test_no_structs(self):
        self.assertEqual(detect_root_structs(parse_definitions("enum E { A }")), [])


if __name__ == "__main__":
    unittest.main()
