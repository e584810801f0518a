"""
Sokal-Michener similarity over packed binary vectors.

Two bit positions match when both are 1 or both are 0, so the number of
matches in a block is popcount(~(a ^ b)). The score is the total number of
matches divided by the bit width, a value in [0, 1].
"""

from typing import TYPE_CHECKING

import numpy as np

from ..errors import ShapeMismatchError

if TYPE_CHECKING:
    from .vectors import BinaryVector


def popcount(blocks: np.ndarray) -> np.ndarray:
    """Per-block population count for an unsigned integer array."""
    return np.bitwise_count(blocks)


def sokal_michener(v1: "BinaryVector", v2: "BinaryVector") -> float:
    """
    Compute the Sokal-Michener similarity between two vectors.

    Args:
        v1: First vector
        v2: Second vector, same bit width and block count as ``v1``

    Returns:
        Fraction of agreeing bit positions in [0, 1]

    Raises:
        ShapeMismatchError: if the vectors differ in bit width or block layout
    """
    if v1.bit_width != v2.bit_width or v1.blocks.shape != v2.blocks.shape \
            or v1.blocks.dtype != v2.blocks.dtype:
        raise ShapeMismatchError(
            f"Cannot compare {v1.bit_width}-bit vector ({v1.blocks.size} blocks) "
            f"with {v2.bit_width}-bit vector ({v2.blocks.size} blocks)",
            details={'left': v1.bit_width, 'right': v2.bit_width}
        )
    matches = int(popcount(~(v1.blocks ^ v2.blocks)).sum())
    return matches / v1.bit_width


def sokal_michener_many(query: "BinaryVector", matrix: np.ndarray) -> np.ndarray:
    """
    Compute the similarity of ``query`` against every row of a block matrix.

    Args:
        query: Query vector
        matrix: 2-D array of shape (rows, n_blocks) with the query's block dtype

    Returns:
        1-D float array with one score per row
    """
    if matrix.ndim != 2 or matrix.shape[1] != query.blocks.size or matrix.dtype != query.blocks.dtype:
        raise ShapeMismatchError(
            f"Block matrix of shape {matrix.shape} ({matrix.dtype}) does not match "
            f"query with {query.blocks.size} {query.blocks.dtype} blocks"
        )
    agree = popcount(~(matrix ^ query.blocks))
    return agree.sum(axis=1, dtype=np.int64) / query.bit_width
