"""
Merkle Path Tests

Tests for leaf index arithmetic, sister-path resolution, root checking and
the in-memory commitment tree.
"""

import hashlib
import json
import os
import tempfile
import threading
import time
import unittest
from unittest.mock import patch

from shield_proofs.config import TreeConfig
from shield_proofs.exceptions import (
    ConsistencyError,
    LengthMismatchError,
    TreeAccessError,
    ValidationError,
)
from shield_proofs.main import generate_path_witness
from shield_proofs.merkle import (
    MemoryTree,
    MerklePathResult,
    Side,
    SisterPathEntry,
    check_root,
    compute_path,
    compute_root,
    encode_positions,
    get_leaf_index_from_z_count,
    get_sister_indices,
    order_before_concatenation,
    path_from_hashes,
    reconcile_root,
)


def commitment(i: int) -> str:
    return "0x" + hashlib.sha256(bytes([i])).hexdigest()


class FailingTree:
    """Tree accessor that raises for one node index."""

    def __init__(self, tree: MemoryTree, bad_index: int, error: Exception):
        self.tree = tree
        self.bad_index = bad_index
        self.error = error

    def get_node(self, index):
        if index == self.bad_index:
            raise self.error
        return self.tree.get_node(index)

    def get_root(self):
        return self.tree.get_root()


class SlowTree:
    """Tree accessor whose low indices answer last."""

    def __init__(self, tree: MemoryTree):
        self.tree = tree
        self.threads = set()
        self.lock = threading.Lock()

    def get_node(self, index):
        with self.lock:
            self.threads.add(threading.get_ident())
        time.sleep(max(0, 15 - index) * 0.005)
        return self.tree.get_node(index)

    def get_root(self):
        return self.tree.get_root()


class TestLeafIndex(unittest.TestCase):
    """Test leaf index arithmetic."""

    def test_leaf_index_from_z_count(self):
        self.assertEqual(get_leaf_index_from_z_count(0, 33), 2 ** 32 - 1)
        self.assertEqual(get_leaf_index_from_z_count(5, 4), 12)
        for z_count in range(8):
            self.assertEqual(get_leaf_index_from_z_count(z_count, 4), 7 + z_count)

    def test_invalid_z_count(self):
        with self.assertRaises(ValidationError):
            get_leaf_index_from_z_count(8, 4)
        with self.assertRaises(ValidationError):
            get_leaf_index_from_z_count(-1, 4)
        with self.assertRaises(ValidationError):
            get_leaf_index_from_z_count("1", 4)

    def test_sister_indices(self):
        self.assertEqual(
            get_sister_indices(7, 4),
            [(8, Side.RIGHT), (4, Side.RIGHT), (2, Side.RIGHT)],
        )
        self.assertEqual(
            get_sister_indices(12, 4),
            [(11, Side.LEFT), (6, Side.RIGHT), (1, Side.LEFT)],
        )

    def test_sister_indices_reject_non_leaf(self):
        with self.assertRaises(ValidationError):
            get_sister_indices(3, 4)

    def test_encode_positions(self):
        self.assertEqual(encode_positions([Side.RIGHT, Side.LEFT], 128), "0x8" + "0" * 31)
        self.assertEqual(encode_positions([Side.LEFT, Side.LEFT], 128), "0x" + "0" * 32)
        with self.assertRaises(ValidationError):
            encode_positions([Side.LEFT] * 5, 4)

    def test_sister_path_entry_sides(self):
        with self.assertRaises(ValidationError):
            SisterPathEntry(tree_index=0, side=Side.LEFT, node_hash="0x00")
        with self.assertRaises(ValidationError):
            SisterPathEntry(tree_index=3, side=None, node_hash="0x00")


class TestMemoryTree(unittest.TestCase):
    """Test the in-memory tree update rule."""

    def test_two_level_tree(self):
        config = TreeConfig(merkle_depth=2)
        tree = MemoryTree(config)
        self.assertEqual(tree.insert_leaf(commitment(0)), 0)

        leaf = commitment(0)[-54:]
        expected_root = hashlib.sha256(bytes.fromhex(leaf + "00" * 27)).hexdigest()
        self.assertEqual(tree.get_node(1), "0x" + leaf)
        self.assertEqual(tree.get_node(2), "0x" + "00" * 27)
        self.assertEqual(tree.get_root(), "0x" + expected_root)
        self.assertEqual(tree.get_node(0), "0x" + expected_root[-54:])

    def test_full_tree(self):
        tree = MemoryTree.from_leaves([commitment(0), commitment(1)], TreeConfig(merkle_depth=2))
        self.assertEqual(tree.leaf_count, 2)
        with self.assertRaises(ValidationError):
            tree.insert_leaf(commitment(2))

    def test_node_out_of_range(self):
        tree = MemoryTree(TreeConfig(merkle_depth=3))
        with self.assertRaises(ValidationError):
            tree.get_node(7)
        with self.assertRaises(ValidationError):
            tree.get_node(-1)

    def test_wrong_commitment_length(self):
        tree = MemoryTree(TreeConfig(merkle_depth=3))
        with self.assertRaises(LengthMismatchError):
            tree.insert_leaf("0x1234")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            path = os.path.join(temp_dir, "tree.json")
            with open(path, "w") as f:
                json.dump({"leaves": [commitment(0), commitment(1)], "depth": 3}, f)
            tree = MemoryTree.from_file(path)
        self.assertEqual(tree.config.merkle_depth, 3)
        self.assertEqual(tree.leaf_count, 2)
        self.assertEqual(tree.get_node(3), "0x" + commitment(0)[-54:])


class TestPathAndRoot(unittest.TestCase):
    """Test path resolution against a tree and root reconciliation."""

    def setUp(self):
        self.config = TreeConfig(merkle_depth=4)
        self.commitments = [commitment(i) for i in range(5)]
        self.tree = MemoryTree.from_leaves(self.commitments, self.config)

    def test_round_trip_for_every_leaf(self):
        for z_count, value in enumerate(self.commitments):
            with self.subTest(z_count=z_count):
                result = compute_path(value, z_count, self.tree, self.config)
                self.assertEqual(len(result.siblings), self.config.merkle_depth)
                self.assertEqual(result.root, self.tree.get_root())
                self.assertTrue(check_root(value, result, self.tree.get_root(), self.config))

    def test_path_contents(self):
        result = compute_path(self.commitments[0], 0, self.tree, self.config)
        self.assertEqual([entry.tree_index for entry in result.siblings], [8, 4, 2, 0])
        self.assertEqual(result.path[:-1], [self.tree.get_node(i) for i in (8, 4, 2)])
        self.assertTrue(all(len(node) == 2 + 54 for node in result.path[:-1]))
        self.assertEqual(len(result.root), 2 + 64)
        self.assertEqual(result.position_bits(self.config.packing_size), "111")
        self.assertIsNone(result.siblings[-1].side)

    def test_compute_root_matches_tree(self):
        result = compute_path(self.commitments[3], 3, self.tree, self.config)
        self.assertEqual(compute_root(self.commitments[3], result, self.config), self.tree.get_root())

    def test_wrong_leaf(self):
        with self.assertRaises(LengthMismatchError) as cm:
            compute_path(self.commitments[1], 0, self.tree, self.config)
        self.assertIn("index 7", str(cm.exception))

    def test_wrong_commitment_length(self):
        with self.assertRaises(LengthMismatchError):
            compute_path("0x1234", 0, self.tree, self.config)

    def test_z_count_out_of_range(self):
        with self.assertRaises(ValidationError):
            compute_path(self.commitments[0], 8, self.tree, self.config)

    def test_wrong_root(self):
        result = compute_path(self.commitments[2], 2, self.tree, self.config)
        with self.assertRaises(ConsistencyError):
            check_root(self.commitments[2], result, "0x" + "00" * 32, self.config)

    def test_reconcile_root_returns_recomputed_root(self):
        result = compute_path(self.commitments[2], 2, self.tree, self.config)
        root = self.tree.get_root()
        self.assertEqual(reconcile_root(self.commitments[2], result, root.upper().replace("0X", "0x"), self.config), root)
        with patch("shield_proofs.merkle.verify.compute_root", wraps=compute_root) as spy:
            check_root(self.commitments[2], result, root, self.config)
        self.assertEqual(spy.call_count, 1)

    def test_stale_root(self):
        stale_root = self.tree.get_root()
        self.tree.insert_leaf(commitment(99))
        result = compute_path(self.commitments[4], 4, self.tree, self.config)
        with self.assertRaises(ConsistencyError):
            check_root(self.commitments[4], result, stale_root, self.config)

    def test_tampered_sibling(self):
        result = compute_path(self.commitments[1], 1, self.tree, self.config)
        tampered = list(result.siblings)
        tampered[1] = SisterPathEntry(tampered[1].tree_index, tampered[1].side, "0x" + "11" * 27)
        bad = MerklePathResult(siblings=tuple(tampered), positions=result.positions)
        with self.assertRaises(ConsistencyError):
            check_root(self.commitments[1], bad, self.tree.get_root(), self.config)

    def test_path_length_must_match_depth(self):
        result = compute_path(self.commitments[1], 1, self.tree, self.config)
        short = MerklePathResult(siblings=result.siblings[1:], positions=result.positions)
        with self.assertRaises(ValidationError):
            compute_root(self.commitments[1], short, self.config)

    def test_order_before_concatenation(self):
        self.assertEqual(order_before_concatenation("1", ["a", "b"]), ["a", "b"])
        self.assertEqual(order_before_concatenation("0", ["a", "b"]), ["b", "a"])

    def test_path_from_hashes_recovers_indices(self):
        for z_count in range(5):
            with self.subTest(z_count=z_count):
                result = compute_path(self.commitments[z_count], z_count, self.tree, self.config)
                self.assertEqual(path_from_hashes(result.path, result.positions, self.config), result)

    def test_accessor_errors_propagate(self):
        failing = FailingTree(self.tree, 4, TreeAccessError("node 4 unavailable"))
        with self.assertRaises(TreeAccessError):
            compute_path(self.commitments[0], 0, failing, self.config)

        failing = FailingTree(self.tree, 8, RuntimeError("connection reset"))
        with self.assertRaisesRegex(RuntimeError, "connection reset"):
            compute_path(self.commitments[0], 0, failing, self.config)

    def test_wrong_node_length_from_accessor(self):
        class LongNodes(FailingTree):
            def get_node(self, index):
                if index == self.bad_index:
                    return "0x" + "22" * 32
                return self.tree.get_node(index)

        with self.assertRaises(LengthMismatchError):
            compute_path(self.commitments[0], 0, LongNodes(self.tree, 4, None), self.config)

    def test_concurrent_fetches_keep_tree_order(self):
        slow = SlowTree(self.tree)
        result = compute_path(self.commitments[4], 4, slow, self.config)
        expected = compute_path(self.commitments[4], 4, self.tree, self.config)
        self.assertEqual(result, expected)
        self.assertGreater(len(slow.threads), 1)

    def test_generate_path_witness(self):
        witness = generate_path_witness(self.commitments[2], 2, self.tree, self.config)
        self.assertEqual(witness.leaf_index, 9)
        self.assertEqual(witness.root, self.tree.get_root())
        # commitment (2 limbs) + 3 siblings (2 limbs each) + positions (1) + root (2)
        self.assertEqual(len(witness.vector), 11)
        self.assertEqual(witness.metadata["path_length"], 4)


if __name__ == "__main__":
    unittest.main()
