#!/usr/bin/env python3

"""
Output generation for annotation interval sets.

Writes BED6 files. Each file is staged in the working directory and renamed
into place, so a failed write never leaves a partial output behind.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

from .data_structures import IntervalSet
from .exceptions import OutputError


def default_prefix(gene_model_file: str) -> str:
    """Output prefix derived from the gene model name (text before '.gtf')."""
    return Path(gene_model_file).name.split('.gtf')[0]


class OutputGenerator:
    """Name and write the five annotation outputs."""

    def __init__(self, output_dir: str, prefix: str, tss_radius: int,
                 working_dir: Optional[str] = None):
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.tss_radius = tss_radius
        self.working_dir = Path(working_dir) if working_dir else self.output_dir

    def output_paths(self) -> Dict[str, Path]:
        """Get the output file of every annotation set, keyed by set name."""
        names = {
            'universe': f"{self.prefix}.chr.bed",
            'tss': f"{self.prefix}.tss{self.tss_radius}.bed",
            'exon': f"{self.prefix}.exon_no_tss.bed",
            'intron': f"{self.prefix}.intron.bed",
            'intergenic': f"{self.prefix}.intergenic.bed",
        }
        return {key: self.output_dir / name for key, name in names.items()}

    def write(self, set_name: str, intervals: IntervalSet) -> Path:
        """Write one annotation set and return its final path."""
        path = self.output_paths()[set_name]
        staged = self.working_dir / f"{path.name}.part"

        try:
            with open(staged, 'w') as f:
                for interval in intervals:
                    f.write('\t'.join(interval.to_bed_fields()) + '\n')
            os.replace(staged, path)
        except OSError as e:
            if staged.exists():
                staged.unlink()
            raise OutputError(str(e), str(path))

        logging.info(f"Wrote {len(intervals)} intervals to {path}")
        return path
