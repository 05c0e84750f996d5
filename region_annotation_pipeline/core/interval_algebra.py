#!/usr/bin/env python3

"""
Interval algebra over canonically ordered interval sets.

Pure functions for stranded merge, stranded subtraction and per-chromosome
complement. Every function returns a new IntervalSet in canonical order and
leaves its inputs untouched.
"""

from collections import defaultdict
from typing import Dict, List, Mapping, Tuple

from intervaltree import IntervalTree

from .data_structures import Interval, IntervalSet, chromosome_sort_key


def sort_canonical(intervals) -> IntervalSet:
    """Return the intervals in canonical order (idempotent)."""
    return IntervalSet(tuple(intervals))


def _group_by_chromosome_and_strand(intervals) -> Dict[Tuple[str, str], List[Interval]]:
    groups: Dict[Tuple[str, str], List[Interval]] = defaultdict(list)
    for interval in intervals:
        groups[(interval.chromosome, interval.strand)].append(interval)
    return groups


def _merge_ranges(ranges: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Union of (start, end) ranges; touching ranges are joined."""
    merged: List[Tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def merge_stranded(intervals, region: str) -> IntervalSet:
    """
    Merge overlapping or book-ended intervals sharing chromosome and strand.

    Args:
        intervals: IntervalSet (or any iterable of Interval)
        region: Region kind written into the rebuilt labels

    Returns:
        IntervalSet of merged intervals; each label carries the union of the
        gene names of the intervals it absorbed.
    """
    merged: List[Interval] = []
    for (chromosome, strand), group in _group_by_chromosome_and_strand(intervals).items():
        group.sort(key=lambda iv: (iv.start, iv.end))
        span_start, span_end = group[0].start, group[0].end
        names = set(group[0].gene_names)
        for interval in group[1:]:
            if interval.start <= span_end:
                span_end = max(span_end, interval.end)
                names.update(interval.gene_names)
                continue
            merged.append(Interval.create(chromosome, span_start, span_end, strand, region, names))
            span_start, span_end = interval.start, interval.end
            names = set(interval.gene_names)
        merged.append(Interval.create(chromosome, span_start, span_end, strand, region, names))
    return IntervalSet(tuple(merged))


def subtract(a, b) -> IntervalSet:
    """
    Remove from each interval of `a` the parts covered by `b` on the same strand.

    Remainders keep the strand and the original label of their `a` interval.
    An interval of `a` covered entirely by `b` contributes nothing.
    """
    trees: Dict[Tuple[str, str], IntervalTree] = defaultdict(IntervalTree)
    for interval in b:
        trees[(interval.chromosome, interval.strand)].addi(interval.start, interval.end)

    remainders: List[Interval] = []
    for interval in a:
        tree = trees.get((interval.chromosome, interval.strand))
        hits = tree.overlap(interval.start, interval.end) if tree is not None else ()
        if not hits:
            remainders.append(interval)
            continue
        cursor = interval.start
        for cut_start, cut_end in _merge_ranges([(hit.begin, hit.end) for hit in hits]):
            if cut_start > cursor:
                remainders.append(interval.with_range(cursor, cut_start))
            cursor = max(cursor, cut_end)
            if cursor >= interval.end:
                break
        if cursor < interval.end:
            remainders.append(interval.with_range(cursor, interval.end))
    return IntervalSet(tuple(remainders))


def complement(intervals, chromosome_sizes: Mapping[str, int], strand: str = '+') -> IntervalSet:
    """
    Gaps between intervals on each chromosome of `chromosome_sizes`.

    Intervals are merged per chromosome regardless of strand, then the gaps
    before, between and after them are clipped to [0, length) and tagged with
    `strand`. Chromosomes missing from `chromosome_sizes` produce no gaps.
    """
    ranges: Dict[str, List[Tuple[int, int]]] = defaultdict(list)
    for interval in intervals:
        ranges[interval.chromosome].append((interval.start, interval.end))

    gaps: List[Interval] = []
    for chromosome in sorted(chromosome_sizes, key=chromosome_sort_key):
        length = chromosome_sizes[chromosome]
        cursor = 0
        for start, end in _merge_ranges(ranges.get(chromosome, [])):
            if cursor >= length:
                break
            gap_end = min(start, length)
            if gap_end > cursor:
                gaps.append(Interval.create(chromosome, cursor, gap_end, strand, 'gap'))
            cursor = max(cursor, end)
        if cursor < length:
            gaps.append(Interval.create(chromosome, cursor, length, strand, 'gap'))
    return IntervalSet(tuple(gaps))


def missing_chromosomes(intervals, chromosome_sizes: Mapping[str, int]) -> List[str]:
    """Chromosomes carrying intervals but absent from `chromosome_sizes`."""
    present = {interval.chromosome for interval in intervals}
    return sorted(present.difference(chromosome_sizes), key=chromosome_sort_key)
