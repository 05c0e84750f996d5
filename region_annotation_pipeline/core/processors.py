#!/usr/bin/env python3

"""
Annotation stages: TSS windows, exons, introns and intergenic regions.

Each stage consumes existing interval sets and returns a new one; nothing is
modified in place.
"""

import logging
import warnings
from typing import List, Mapping

from .data_structures import Interval, IntervalSet, VALID_STRANDS
from .exceptions import UnresolvedChromosomeSizeWarning
from .interval_algebra import complement, merge_stranded, missing_chromosomes, subtract


class RegionAnnotator:
    """Builds the four mutually exclusive annotation sets from a gene universe."""

    def __init__(self, tss_radius: int = 300):
        if tss_radius < 0:
            raise ValueError(f"TSS radius must be non-negative: {tss_radius}")
        self.tss_radius = tss_radius

    def tss_window(self, gene: Interval):
        """
        Promoter window centred on the transcription start site.

        The TSS is the start of a + strand gene and the end of a - strand
        gene. Windows are clipped at position 0; an empty window yields None.
        """
        tss = gene.start if gene.strand == '+' else gene.end
        start = max(0, tss - self.tss_radius)
        end = tss + self.tss_radius
        if start >= end:
            return None
        return Interval.create(gene.chromosome, start, end, gene.strand, 'tss', gene.gene_names)

    def annotate_tss(self, genes: IntervalSet) -> IntervalSet:
        """Merged promoter windows of all genes."""
        windows: List[Interval] = []
        for gene in genes:
            window = self.tss_window(gene)
            if window is not None:
                windows.append(window)
        tss = merge_stranded(windows, 'tss')
        logging.info(f"Built {len(tss)} TSS regions (radius {self.tss_radius}) from {len(genes)} genes")
        return tss

    def annotate_exons(self, exons: IntervalSet, tss: IntervalSet) -> IntervalSet:
        """Exonic sequence outside promoter windows."""
        result = merge_stranded(subtract(exons, tss), 'exon')
        logging.info(f"Built {len(result)} exon regions outside TSS")
        return result

    def annotate_introns(self, genes: IntervalSet, exons: IntervalSet, tss: IntervalSet) -> IntervalSet:
        """Genic sequence outside exons and promoter windows."""
        occupied = merge_stranded(exons + tss, '_tmp')
        result = merge_stranded(subtract(genes, occupied), 'intron')
        logging.info(f"Built {len(result)} intron regions")
        return result

    def annotate_intergenic(self, genes: IntervalSet, tss: IntervalSet,
                            chromosome_sizes: Mapping[str, int]) -> IntervalSet:
        """
        Sequence outside genes and promoter windows, computed per strand.

        Chromosomes without a known size contribute nothing; they are reported
        through a warning rather than failing the stage.
        """
        occupied_all = genes + tss
        unresolved = missing_chromosomes(occupied_all, chromosome_sizes)
        if unresolved:
            warning = UnresolvedChromosomeSizeWarning(unresolved)
            logging.warning(f"{warning}; no intergenic regions emitted for them")
            warnings.warn(warning, stacklevel=2)

        gaps = IntervalSet()
        for strand in VALID_STRANDS:
            occupied = merge_stranded(occupied_all.with_strand(strand), '_tmp')
            gaps = gaps + complement(occupied, chromosome_sizes, strand=strand)

        result = merge_stranded(gaps, 'intergenic')
        logging.info(f"Built {len(result)} intergenic regions")
        return result
