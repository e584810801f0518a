"""
Packed binary vectors and the identifier-addressed store holding them.

A vector of ``bit_width`` bits is kept as ``bit_width // block_size``
unsigned integers so similarity can count agreeing bits a block at a time.
The store keeps every vector as one row of a 2-D block matrix indexed by the
word's vocabulary identifier, with a parallel presence mask: a word may be
known to the vocabulary without having a vector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence

import numpy as np

SUPPORTED_BLOCK_SIZES = (8, 16, 32, 64)

_BLOCK_DTYPES: Dict[int, type] = {
    8: np.uint8,
    16: np.uint16,
    32: np.uint32,
    64: np.uint64,
}


def block_dtype(block_size: int) -> np.dtype:
    """Return the unsigned numpy dtype holding one ``block_size``-bit block."""
    try:
        return np.dtype(_BLOCK_DTYPES[block_size])
    except KeyError:
        raise ValueError(
            f"block_size must be one of {SUPPORTED_BLOCK_SIZES}, got {block_size}"
        ) from None


@dataclass(frozen=True, eq=False)
class BinaryVector:
    """Fixed-width bitstring stored as unsigned blocks (most significant bit first)."""

    blocks: np.ndarray
    bit_width: int

    def __post_init__(self):
        if self.blocks.ndim != 1:
            raise ValueError("BinaryVector blocks must be one-dimensional")
        block_size = self.blocks.dtype.itemsize * 8
        if self.blocks.size * block_size != self.bit_width:
            raise ValueError(
                f"{self.blocks.size} blocks of {block_size} bits do not make {self.bit_width} bits"
            )

    @property
    def block_size(self) -> int:
        return self.blocks.dtype.itemsize * 8

    @property
    def n_blocks(self) -> int:
        return int(self.blocks.size)

    @classmethod
    def from_blocks(cls, values: Sequence[int], block_size: int = 64) -> "BinaryVector":
        """Build a vector from block integers."""
        dtype = block_dtype(block_size)
        limit = 1 << block_size
        for value in values:
            if not 0 <= value < limit:
                raise ValueError(f"block value {value} does not fit in {block_size} bits")
        blocks = np.array(list(values), dtype=dtype)
        return cls(blocks=blocks, bit_width=block_size * len(blocks))

    @classmethod
    def from_bits(cls, bits: str, block_size: int = 64) -> "BinaryVector":
        """Build a vector from a string of '0'/'1' characters."""
        bits = bits.replace(" ", "").replace("_", "")
        if not bits or set(bits) - {"0", "1"}:
            raise ValueError(f"not a bitstring: {bits!r}")
        if len(bits) % block_size:
            raise ValueError(f"{len(bits)} bits is not a multiple of block size {block_size}")
        values = [int(bits[i:i + block_size], 2) for i in range(0, len(bits), block_size)]
        return cls.from_blocks(values, block_size)

    def to_bits(self) -> str:
        return "".join(format(int(b), f"0{self.block_size}b") for b in self.blocks)

    def complement(self) -> "BinaryVector":
        return BinaryVector(blocks=~self.blocks, bit_width=self.bit_width)

    def popcount(self) -> int:
        return int(np.bitwise_count(self.blocks).sum())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BinaryVector):
            return NotImplemented
        return (self.bit_width == other.bit_width
                and self.blocks.dtype == other.blocks.dtype
                and np.array_equal(self.blocks, other.blocks))

    def __hash__(self) -> int:
        return hash((self.bit_width, self.blocks.tobytes()))

    def __str__(self) -> str:
        return f"BinaryVector<{self.bit_width}> pc={self.popcount()}"


@dataclass
class LoadStats:
    """Record tallies collected while a store is populated."""

    records: int = 0
    stored: int = 0
    out_of_vocabulary: int = 0
    malformed: int = 0
    duplicates: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "records": self.records,
            "stored": self.stored,
            "out_of_vocabulary": self.out_of_vocabulary,
            "malformed": self.malformed,
            "duplicates": self.duplicates,
        }


class VectorStore:
    """Identifier -> optional :class:`BinaryVector` mapping.

    Populated once during loading with :meth:`put`, then frozen. After
    :meth:`freeze` the block matrix is read-only and may be shared between
    readers without locking.
    """

    def __init__(self, bit_width: int, block_size: int = 64, size: int = 0) -> None:
        dtype = block_dtype(block_size)
        if bit_width <= 0 or bit_width % block_size:
            raise ValueError(
                f"bit width {bit_width} is not a positive multiple of block size {block_size}"
            )
        self.bit_width = bit_width
        self.block_size = block_size
        self.n_blocks = bit_width // block_size
        self.stats = LoadStats()
        self._size = size
        self._matrix = np.zeros((max(size, 1), self.n_blocks), dtype=dtype)
        self._present = np.zeros(max(size, 1), dtype=bool)
        self._frozen = False

    # ----------------------------
    # Construction
    # ----------------------------
    def _ensure_capacity(self, size: int) -> None:
        capacity = self._matrix.shape[0]
        if size <= capacity:
            return
        new_capacity = max(size, capacity * 2)
        matrix = np.zeros((new_capacity, self.n_blocks), dtype=self._matrix.dtype)
        matrix[:capacity] = self._matrix
        present = np.zeros(new_capacity, dtype=bool)
        present[:capacity] = self._present
        self._matrix, self._present = matrix, present

    def reserve(self, capacity: int) -> None:
        """Preallocate rows without changing the identifier range."""
        if self._frozen:
            raise RuntimeError("VectorStore is frozen")
        self._ensure_capacity(capacity)

    def resize(self, size: int) -> None:
        """Extend the identifier range to ``size`` (never shrinks)."""
        if self._frozen:
            raise RuntimeError("VectorStore is frozen")
        if size > self._size:
            self._ensure_capacity(size)
            self._size = size

    def put(self, identifier: int, blocks: Iterable[int]) -> None:
        """Store the vector for ``identifier``, growing the range if needed."""
        if self._frozen:
            raise RuntimeError("VectorStore is frozen")
        if identifier < 0:
            raise IndexError(f"negative identifier {identifier}")
        row = np.array(list(blocks), dtype=self._matrix.dtype)
        if row.size != self.n_blocks:
            raise ValueError(f"expected {self.n_blocks} blocks, got {row.size}")
        self.resize(identifier + 1)
        self._matrix[identifier] = row
        self._present[identifier] = True

    def freeze(self) -> "VectorStore":
        """Trim spare capacity and make the store read-only."""
        self._matrix = self._matrix[:self._size].copy()
        self._present = self._present[:self._size].copy()
        self._matrix.setflags(write=False)
        self._present.setflags(write=False)
        self._frozen = True
        return self

    # ----------------------------
    # Queries
    # ----------------------------
    def get(self, identifier: int) -> Optional[BinaryVector]:
        """Return the vector for ``identifier`` or ``None`` if it has none."""
        if not 0 <= identifier < self._size:
            raise IndexError(f"identifier {identifier} out of range [0, {self._size})")
        if not self._present[identifier]:
            return None
        row = self._matrix[identifier].copy()
        return BinaryVector(blocks=row, bit_width=self.bit_width)

    def has_vector(self, identifier: Optional[int]) -> bool:
        return identifier is not None and 0 <= identifier < self._size \
            and bool(self._present[identifier])

    def present_ids(self) -> np.ndarray:
        """Identifiers holding a vector, in ascending order."""
        return np.flatnonzero(self._present[:self._size])

    @property
    def matrix(self) -> np.ndarray:
        """Block matrix of shape (size, n_blocks); absent rows are zero."""
        view = self._matrix[:self._size]
        if not self._frozen:
            view = view.view()
            view.setflags(write=False)
        return view

    @property
    def population(self) -> int:
        return int(self._present[:self._size].sum())

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return (f"VectorStore(bit_width={self.bit_width}, block_size={self.block_size}, "
                f"size={self._size}, population={self.population})")
