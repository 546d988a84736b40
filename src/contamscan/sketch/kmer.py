from __future__ import annotations

import hashlib
import heapq
from typing import Iterator

_COMPLEMENT = str.maketrans("ACGT", "TGCA")
_NUCLEOTIDES = frozenset("ACGT")


def stable_hash64(kmer: str, seed: int = 0) -> int:
    digest = hashlib.blake2b(
        kmer.encode("ascii"),
        digest_size=8,
        salt=seed.to_bytes(16, byteorder="little", signed=False),
    ).digest()
    return int.from_bytes(digest, byteorder="big", signed=False)


def reverse_complement(sequence: str) -> str:
    return sequence.translate(_COMPLEMENT)[::-1]


def iter_canonical_kmers(sequence: str, k: int) -> Iterator[str]:
    """Yield the canonical form of each ACGT-only k-mer in ``sequence``."""

    normalized = sequence.upper()
    if k <= 0 or len(normalized) < k:
        return
    for start in range(0, len(normalized) - k + 1):
        kmer = normalized[start : start + k]
        if not _NUCLEOTIDES.issuperset(kmer):
            continue
        reverse = reverse_complement(kmer)
        yield kmer if kmer <= reverse else reverse


class BottomSketcher:
    """Keep the ``capacity`` smallest distinct hashes seen, with occurrence counts."""

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._heap: list[int] = []  # negated hashes, so the root is the largest kept
        self._counts: dict[int, int] = {}

    def add(self, value: int) -> None:
        if value in self._counts:
            self._counts[value] += 1
            return
        if len(self._heap) < self.capacity:
            heapq.heappush(self._heap, -value)
            self._counts[value] = 1
            return
        largest = -self._heap[0]
        if value < largest:
            heapq.heapreplace(self._heap, -value)
            del self._counts[largest]
            self._counts[value] = 1

    def counts(self) -> dict[int, int]:
        return dict(self._counts)
