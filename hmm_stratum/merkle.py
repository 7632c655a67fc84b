"""Bitcoin merkle tree helpers (double-SHA256, last node duplicated on odd levels)."""

from __future__ import annotations

from typing import Sequence

from .encoding import sha256d


def merkle_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """All tree levels, leaves first and the single-root level last."""
    if not leaves:
        raise ValueError("merkle tree needs at least one leaf")

    level = list(leaves)
    levels = [level]
    while len(level) > 1:
        if len(level) % 2 == 1:
            level = level + [level[-1]]
        level = [sha256d(level[i] + level[i + 1]) for i in range(0, len(level), 2)]
        levels.append(level)
    return levels


def merkle_root(leaves: Sequence[bytes]) -> bytes:
    return merkle_levels(leaves)[-1][0]


def merkle_branch(leaves: Sequence[bytes], index: int = 0) -> list[bytes]:
    """Sibling hashes for the leaf at `index`, ordered leaf to root."""
    if not 0 <= index < len(leaves):
        raise IndexError(f"leaf index {index} out of range for {len(leaves)} leaves")

    branch: list[bytes] = []
    for level in merkle_levels(leaves)[:-1]:
        sibling = index ^ 1
        # odd level: the last node is its own sibling
        branch.append(level[sibling] if sibling < len(level) else level[index])
        index //= 2
    return branch


def fold_branch(leaf: bytes, branch: Sequence[bytes]) -> bytes:
    """Recombine a coinbase (index 0) leaf with its branch into the root."""
    root = leaf
    for sibling in branch:
        root = sha256d(root + sibling)
    return root
