#!/usr/bin/env python3

"""
Core data structures for the region annotation pipeline.

Defines the stranded genomic interval, its structured label, and the
canonically ordered interval set every algebra operation returns.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Iterator, List, Tuple


VALID_STRANDS = ('+', '-')
MITOCHONDRIAL_NAMES = frozenset({'chrM', 'chrMT', 'M', 'MT'})

_NATURAL_TOKEN = re.compile(r'(\D*)(\d*)')


def chromosome_sort_key(chromosome: str) -> Tuple:
    """
    Sort key placing chromosomes in natural order with the mitochondrion last.

    Digit runs compare numerically, so chr2 < chr10 < chrX < chrY < chrM.
    """
    tokens = tuple(
        (text, int(digits) if digits else -1)
        for text, digits in _NATURAL_TOKEN.findall(chromosome)
        if text or digits
    )
    return (chromosome in MITOCHONDRIAL_NAMES, tokens)


@dataclass(frozen=True)
class RegionLabel:
    """Structured label of an interval, serialized only when written out."""
    chromosome: str
    region: str
    gene_names: Tuple[str, ...]
    start: int
    end: int
    strand: str

    def __post_init__(self):
        # Callers may pass any iterable of names; store them sorted and unique.
        object.__setattr__(self, 'gene_names', tuple(sorted(set(self.gene_names))))

    def to_string(self) -> str:
        """Render as chromosome:region:genes:start-end:strand."""
        genes = ','.join(self.gene_names) if self.gene_names else '.'
        return f"{self.chromosome}:{self.region}:{genes}:{self.start}-{self.end}:{self.strand}"

    def __str__(self):
        return self.to_string()


@dataclass(frozen=True)
class Interval:
    """A stranded, 0-based half-open genomic interval."""
    chromosome: str
    start: int
    end: int
    strand: str
    label: RegionLabel
    score: int = 0

    def __post_init__(self):
        """Validate interval data after initialization."""
        if self.start < 0 or self.start >= self.end:
            raise ValueError(f"Invalid interval coordinates: {self.chromosome}:{self.start}-{self.end}")
        if self.strand not in VALID_STRANDS:
            raise ValueError(f"Invalid strand: {self.strand}")

    @classmethod
    def create(cls, chromosome: str, start: int, end: int, strand: str,
               region: str, gene_names: Iterable[str] = ()) -> 'Interval':
        """Build an interval whose label describes exactly its own range."""
        label = RegionLabel(chromosome, region, tuple(gene_names), start, end, strand)
        return cls(chromosome, start, end, strand, label)

    @property
    def length(self) -> int:
        """Get interval length."""
        return self.end - self.start

    @property
    def region(self) -> str:
        return self.label.region

    @property
    def gene_names(self) -> Tuple[str, ...]:
        return self.label.gene_names

    def with_range(self, start: int, end: int) -> 'Interval':
        """Copy with a new range, keeping the original label."""
        return replace(self, start=start, end=end)

    def overlaps_with(self, other: 'Interval') -> bool:
        """Check if this interval overlaps another on the same chromosome and strand."""
        return (self.chromosome == other.chromosome and self.strand == other.strand
                and self.start < other.end and other.start < self.end)

    def sort_key(self) -> Tuple:
        return (chromosome_sort_key(self.chromosome), self.start, self.end,
                self.strand, self.label.to_string())

    def to_bed_fields(self) -> List[str]:
        """Get the six BED columns of this interval."""
        return [self.chromosome, str(self.start), str(self.end),
                self.label.to_string(), str(self.score), self.strand]


@dataclass(frozen=True)
class IntervalSet:
    """
    Immutable sequence of intervals kept in canonical order.

    Construction sorts its input by chromosome (natural order, mitochondrion
    last), start, end, then strand and label so the order is total.
    """
    intervals: Tuple[Interval, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'intervals', tuple(sorted(self.intervals, key=Interval.sort_key)))

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.intervals)

    def __len__(self) -> int:
        return len(self.intervals)

    def __getitem__(self, index: int) -> Interval:
        return self.intervals[index]

    def __bool__(self) -> bool:
        return bool(self.intervals)

    def __add__(self, other: 'IntervalSet') -> 'IntervalSet':
        """Union of two sets, canonicalized."""
        return IntervalSet(self.intervals + tuple(other))

    def filter(self, predicate: Callable[[Interval], bool]) -> 'IntervalSet':
        """Get the intervals matching a predicate."""
        return IntervalSet(tuple(iv for iv in self.intervals if predicate(iv)))

    def with_region(self, region: str) -> 'IntervalSet':
        """Get the intervals whose label region (feature kind) matches."""
        return self.filter(lambda iv: iv.region == region)

    def with_strand(self, strand: str) -> 'IntervalSet':
        """Get the intervals on one strand."""
        return self.filter(lambda iv: iv.strand == strand)

    def on_chromosome(self, chromosome: str) -> 'IntervalSet':
        """Get the intervals on one chromosome."""
        return self.filter(lambda iv: iv.chromosome == chromosome)

    @property
    def chromosomes(self) -> List[str]:
        """Get distinct chromosome names in canonical order."""
        seen: List[str] = []
        for interval in self.intervals:
            if not seen or seen[-1] != interval.chromosome:
                seen.append(interval.chromosome)
        return seen

    @property
    def total_length(self) -> int:
        """Get the summed length of all intervals (overlaps counted twice)."""
        return sum(interval.length for interval in self.intervals)
