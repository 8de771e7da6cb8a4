#!/usr/bin/env python3
"""
Tests for pointer and role resolution over flattened payloads
"""

import unittest
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from models import MessageRole
from parsers.pointer_resolver import (
    RoleIndexMap,
    FlatGraphDecoder,
    pointer_target,
    resolve_role,
)

class TestRoleIndexMap(unittest.TestCase):
    """Test cases for RoleIndexMap"""

    def test_collects_exact_role_literals(self):
        payload = ["user", "User", "assistant", "system", {"role": "user"}, "assistant"]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(dict(role_map.indices), {
            0: MessageRole.USER,
            2: MessageRole.ASSISTANT,
            5: MessageRole.ASSISTANT,
        })
        self.assertIn(2, role_map)
        self.assertNotIn(1, role_map)

    def test_is_read_only(self):
        role_map = RoleIndexMap.from_payload(["user"])

        with self.assertRaises(TypeError):
            role_map.indices[3] = MessageRole.USER

class TestPointerTarget(unittest.TestCase):
    """Test cases for pointer_target"""

    def test_reads_integer_pointer(self):
        self.assertEqual(pointer_target({"_49": 5}), 5)
        self.assertEqual(pointer_target({"_12": 3}, key="_12"), 3)

    def test_ignores_non_pointers(self):
        for value in [{"_49": "5"}, {"_49": True}, {"_50": 5}, [5], "_49", None]:
            with self.subTest(value=value):
                self.assertIsNone(pointer_target(value))

class TestResolveRole(unittest.TestCase):
    """Test cases for resolve_role"""

    def test_pointer_into_role_literal(self):
        payload = ["title", "Chat", "x", "y", "z", "user", "w", {"_49": 5}, ["x"], "Hello, how are you?"]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(resolve_role(payload, 8, role_map), MessageRole.USER)

    def test_direct_literal(self):
        payload = ["assistant", {"other": 1}, ["x"], "Sure, here you go."]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(resolve_role(payload, 2, role_map), MessageRole.ASSISTANT)

    def test_nearest_marker_wins(self):
        payload = ["user", "assistant", {"_49": 0}, ["x"], "Hello there friend"]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(resolve_role(payload, 3, role_map), MessageRole.USER)

    def test_pointer_to_non_role_is_skipped(self):
        payload = ["assistant", "filler", {"_49": 1}, ["x"], "Hello there friend"]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(resolve_role(payload, 3, role_map), MessageRole.ASSISTANT)

    def test_marker_outside_window_is_ignored(self):
        payload = ["user"] + ["filler"] * 60 + [["x"], "Hello there friend"]
        role_map = RoleIndexMap.from_payload(payload)
        marker_index = len(payload) - 2

        self.assertIsNone(resolve_role(payload, marker_index, role_map))
        self.assertEqual(resolve_role(payload, marker_index, role_map, window=70), MessageRole.USER)

    def test_configurable_pointer_key(self):
        payload = ["user", {"_7": 0}, ["x"], "Hello there friend"]
        role_map = RoleIndexMap.from_payload(payload)

        self.assertEqual(resolve_role(payload, 2, role_map, pointer_key="_7"), MessageRole.USER)

class TestFlatGraphDecoder(unittest.TestCase):
    """Test cases for FlatGraphDecoder"""

    def test_decodes_nested_objects(self):
        heap = [
            {"_1": 2, "_3": 4},   # 0: {"title": ..., "tags": ...}
            "title",
            "Bread baking tips",
            "tags",
            [5, 6],
            "bread",
            "oven",
        ]

        self.assertEqual(FlatGraphDecoder(heap).decode_index(0),
                         {"title": "Bread baking tips", "tags": ["bread", "oven"]})

    def test_plain_objects_pass_through(self):
        decoder = FlatGraphDecoder([{"plain": 1}])

        self.assertEqual(decoder.decode_index(0), {"plain": 1})

    def test_cycles_and_bad_indices_decode_to_none(self):
        heap = [
            {"_1": 0, "_2": 99},  # self-reference and out-of-range child
            "self",
            "missing",
        ]

        self.assertEqual(FlatGraphDecoder(heap).decode_index(0), {"self": None, "missing": None})

    def test_unknown_property_names_are_dropped(self):
        heap = [{"_1": 2, "_9": 2, "_x": 2}, "name", "value"]

        self.assertEqual(FlatGraphDecoder(heap).decode_index(0), {"name": "value"})

if __name__ == '__main__':
    unittest.main()
