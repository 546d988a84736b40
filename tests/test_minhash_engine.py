from __future__ import annotations

import gzip
import random
from pathlib import Path

import pytest

from conftest import random_dna
from contamscan.config import FilterConfig, SketchConfig
from contamscan.exceptions import SketchEngineError
from contamscan.sketch.kmer import BottomSketcher, iter_canonical_kmers, reverse_complement
from contamscan.sketch.minhash import MinHashEngine, compare_sketches, sketch_file


def _fasta(path: Path, *sequences: str) -> Path:
    body = "".join(f">contig_{idx}\n{sequence}\n" for idx, sequence in enumerate(sequences, start=1))
    path.write_text(body, encoding="utf-8")
    return path


def _mutate(sequence: str, count: int, seed: int) -> str:
    rng = random.Random(seed)
    bases = list(sequence)
    for position in rng.sample(range(len(bases)), count):
        bases[position] = {"A": "C", "C": "G", "G": "T", "T": "A"}[bases[position]]
    return "".join(bases)


def test_canonical_kmers_skip_ambiguous_bases() -> None:
    kmers = list(iter_canonical_kmers("ACGTNACGT", 3))

    assert kmers == ["ACG", "ACG", "ACG", "ACG"]


def test_bottom_sketcher_keeps_smallest_distinct_values() -> None:
    sketcher = BottomSketcher(3)
    for value in [9, 4, 7, 4, 1, 8, 2]:
        sketcher.add(value)

    assert sketcher.counts() == {1: 1, 2: 1, 4: 2}


def test_identical_and_reverse_complement_genomes_have_zero_distance(tmp_path: Path) -> None:
    sequence = random_dna(3000, seed=1)
    left = _fasta(tmp_path / "left.fna", sequence)
    same = _fasta(tmp_path / "same.fna", sequence[:1500], sequence[1500:])
    flipped = _fasta(tmp_path / "flipped.fna", reverse_complement(sequence))
    engine = MinHashEngine()

    sketches = engine.sketch([left, same, flipped], SketchConfig(), FilterConfig())

    assert engine.distance(sketches[0], sketches[2]).estimated_distance == 0.0
    # Splitting into contigs only drops the k-mers spanning the split.
    assert engine.distance(sketches[0], sketches[1]).estimated_distance < 0.01


def test_distance_orders_related_and_unrelated_genomes(tmp_path: Path) -> None:
    base = random_dna(4000, seed=2)
    related = _mutate(base, 40, seed=3)
    unrelated = random_dna(4000, seed=4)
    engine = MinHashEngine()
    sketches = engine.sketch(
        [
            _fasta(tmp_path / "base.fna", base),
            _fasta(tmp_path / "related.fna", related),
            _fasta(tmp_path / "unrelated.fna", unrelated),
        ],
        SketchConfig(),
        FilterConfig(),
    )

    close = engine.distance(sketches[0], sketches[1])
    far = engine.distance(sketches[0], sketches[2])

    assert 0.0 < close.estimated_distance < 0.1
    assert close.shared_hashes > 0
    assert far.estimated_distance == 1.0
    assert far.shared_hashes == 0
    assert engine.distance(sketches[1], sketches[0]) == close


def test_gzip_input_matches_plain_input(tmp_path: Path) -> None:
    sequence = random_dna(2000, seed=5)
    plain = _fasta(tmp_path / "g.fna", sequence)
    zipped = tmp_path / "g.fna.gz"
    with gzip.open(zipped, "wt", encoding="utf-8") as handle:
        handle.write(f">g\n{sequence}\n")

    assert sketch_file(plain, SketchConfig(), FilterConfig()).hashes == sketch_file(
        zipped, SketchConfig(), FilterConfig()
    ).hashes


def test_sketch_size_bounds_hash_count(tmp_path: Path) -> None:
    path = _fasta(tmp_path / "g.fna", random_dna(5000, seed=6))

    sketch = sketch_file(path, SketchConfig(sketch_size=100), FilterConfig())

    assert len(sketch.hashes) == 100
    assert list(sketch.hashes) == sorted(sketch.hashes)


def test_abundance_filter_keeps_repeated_kmers(tmp_path: Path) -> None:
    repeat = random_dna(300, seed=7)
    unique = random_dna(300, seed=8)
    config = SketchConfig(kmer_size=15, sketch_size=5000)
    mixed = _fasta(tmp_path / "mixed.fna", repeat, repeat, unique)
    repeat_only = _fasta(tmp_path / "repeat.fna", repeat)

    filtered = sketch_file(mixed, config, FilterConfig(min_abundance=2))
    reference = sketch_file(repeat_only, config, FilterConfig())

    assert set(filtered.hashes) == set(reference.hashes)


def test_incompatible_sketches_raise(tmp_path: Path) -> None:
    path = _fasta(tmp_path / "g.fna", random_dna(500, seed=9))
    k21 = sketch_file(path, SketchConfig(), FilterConfig())
    k15 = sketch_file(path, SketchConfig(kmer_size=15), FilterConfig())
    seeded = sketch_file(path, SketchConfig(seed=7), FilterConfig())

    with pytest.raises(SketchEngineError, match="k-mer sizes"):
        compare_sketches(k21, k15)
    with pytest.raises(SketchEngineError, match="hash seeds"):
        compare_sketches(k21, seeded)


def test_genome_without_kmers_raises(tmp_path: Path) -> None:
    path = _fasta(tmp_path / "short.fna", "ACGTNNNN")

    with pytest.raises(SketchEngineError, match="No valid 21-mers"):
        sketch_file(path, SketchConfig(), FilterConfig())


def test_unreadable_genome_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.fna.gz"
    path.write_bytes(b"not gzip at all")

    with pytest.raises(SketchEngineError, match="Could not read genome"):
        sketch_file(path, SketchConfig(), FilterConfig())
