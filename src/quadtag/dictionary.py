"""
Pattern dictionary used to validate sampled marker bits.

A dictionary is an immutable set of equal-length binary codewords. A sampled
bit matrix matches the dictionary row by row: each row is compared against
its own closest codeword, and the matrix distance is the sum of those per-row
Hamming distances.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np

LOGGER = logging.getLogger(__name__)

Codeword = Union[str, Sequence[int]]

# Row codewords of the original ArUco 5x5 scheme. Columns 1 and 3 carry the
# two data bits of each row.
ARUCO_ORIGINAL: Tuple[str, ...] = ("10000", "10111", "01001", "01110")

# Columns 1 and N-2 must be distinct data columns.
MIN_INNER_SIZE = 3


class InvalidDictionary(ValueError):
    """Raised when a dictionary cannot be built from the given codewords."""


def _parse_codeword(codeword: Codeword, index: int) -> List[int]:
    if codeword is None:
        raise InvalidDictionary(f"Codeword {index} is empty.")

    if isinstance(codeword, str):
        bits = [ch for ch in codeword.strip()]
    else:
        try:
            bits = list(codeword)
        except TypeError:
            raise InvalidDictionary(f"Codeword {index} is not a bit sequence: {codeword!r}") from None

    if not bits:
        raise InvalidDictionary(f"Codeword {index} is empty.")

    parsed = []
    for bit in bits:
        if bit in (0, 1, "0", "1") and not isinstance(bit, bool):
            parsed.append(int(bit))
        else:
            raise InvalidDictionary(f"Codeword {index} contains a non-binary value: {bit!r}")
    return parsed


class PatternDictionary:
    """Immutable set of row codewords with Hamming-distance matching."""

    def __init__(self, codewords: Sequence[Codeword]):
        """Build a dictionary.

        Args:
            codewords: Non-empty sequence of equal-length codewords, each given
                either as a sequence of 0/1 integers or as a string like "10110"

        Raises:
            InvalidDictionary: If the sequence is empty, any codeword is empty
                or non-binary, lengths differ, or the length is below 3
        """
        if codewords is None or len(codewords) < 1:
            raise InvalidDictionary("Dictionary needs at least one codeword.")

        rows = [_parse_codeword(word, i) for i, word in enumerate(codewords)]

        inner_size = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != inner_size:
                raise InvalidDictionary(
                    f"Codeword {i} has length {len(row)}, expected {inner_size}."
                )

        if inner_size < MIN_INNER_SIZE:
            raise InvalidDictionary(
                f"Codeword length must be at least {MIN_INNER_SIZE}, got {inner_size}."
            )

        self._codewords = np.array(rows, dtype=np.uint8)
        self._codewords.setflags(write=False)
        self._inner_size = inner_size
        LOGGER.debug("Pattern dictionary: %d codewords of %d bits", len(rows), inner_size)

    @classmethod
    def aruco_original(cls) -> PatternDictionary:
        """Dictionary of the original ArUco row codewords (5x5 markers)."""
        return cls(ARUCO_ORIGINAL)

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def inner_size(self) -> int:
        """Codeword length N; markers carry an N x N data grid."""
        return self._inner_size

    @property
    def grid_size(self) -> int:
        """Cells per side of the rectified marker, border included."""
        return self._inner_size + 2

    @property
    def codewords(self) -> Tuple[Tuple[int, ...], ...]:
        return tuple(tuple(int(bit) for bit in row) for row in self._codewords)

    def __len__(self) -> int:
        return len(self._codewords)

    def __iter__(self) -> Iterator[Tuple[int, ...]]:
        return iter(self.codewords)

    def __repr__(self) -> str:
        words = ", ".join("".join(str(bit) for bit in row) for row in self.codewords)
        return f"PatternDictionary([{words}])"

    # ------------------------------------------------------------------ #
    # Matching
    # ------------------------------------------------------------------ #
    def row_distance(self, row: Sequence[int]) -> int:
        """Minimal Hamming distance between ``row`` and any codeword."""
        bits = np.asarray(row, dtype=np.uint8).reshape(-1)
        if bits.size != self._inner_size:
            raise ValueError(f"Row must have {self._inner_size} bits, got {bits.size}.")
        return int(np.count_nonzero(self._codewords != bits, axis=1).min())

    def matrix_distance(self, bits: np.ndarray) -> int:
        """Sum of per-row distances of an N x N bit matrix.

        Rows are matched independently, each against its closest codeword.
        """
        matrix = np.asarray(bits, dtype=np.uint8)
        if matrix.shape != (self._inner_size, self._inner_size):
            raise ValueError(
                f"Bit matrix must be {self._inner_size}x{self._inner_size}, got {matrix.shape}."
            )
        # (rows, codewords) table of Hamming distances
        distances = np.count_nonzero(matrix[:, None, :] != self._codewords[None, :, :], axis=2)
        return int(distances.min(axis=1).sum())
