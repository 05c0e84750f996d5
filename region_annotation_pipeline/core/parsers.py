#!/usr/bin/env python3

"""
File parsers for gene models and chromosome sizes.

Handles GTF parsing (plain or gzip-compressed), genome build inference and
chromosome size tables read from disk or downloaded by build.
"""

import gzip
import logging
import os
import re
from pathlib import Path
from typing import Callable, Dict, IO, List, Optional, Tuple

import requests

from .config import DEFAULT_SIZE_URL_TEMPLATE
from .data_structures import Interval, IntervalSet, VALID_STRANDS
from .exceptions import ParseError, SizeSourceUnavailableError, UnsupportedRecordError


GZIP_MAGIC = b'\x1f\x8b'
PRIMARY_CHROMOSOME = re.compile(r'^(chr[0-9]+|[0-9]+|chr[XYM])$')

# First match wins.
BUILD_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ('hg38', re.compile(r'GRCh38|hg38')),
    ('hg19', re.compile(r'GRCh37|hg19')),
    ('mm39', re.compile(r'GRCm39|mm39')),
    ('mm10', re.compile(r'GRCm38|mm10')),
]


def is_primary_chromosome(chromosome: str) -> bool:
    """Check if a chromosome belongs to the primary assembly (not a scaffold)."""
    return PRIMARY_CHROMOSOME.match(chromosome) is not None


def infer_build(sample_text: str) -> Optional[str]:
    """Infer the genome build from a sample of the gene model, or None."""
    for build, pattern in BUILD_PATTERNS:
        if pattern.search(sample_text):
            return build
    return None


def open_text(file_path: str) -> IO[str]:
    """Open a text file, transparently decompressing gzip content."""
    with open(file_path, 'rb') as f:
        compressed = f.read(2) == GZIP_MAGIC
    if compressed:
        return gzip.open(file_path, 'rt')
    return open(file_path, 'r')


class GeneModelLoader:
    """Convert GTF records into the canonical interval universe."""

    def __init__(self, file_path: str, include_scaffolds: bool = False):
        self.file_path = file_path
        self.include_scaffolds = include_scaffolds
        self.dropped_records = 0
        self.filtered_scaffold_records = 0

    def read_header(self, line_count: int = 10) -> str:
        """Get the first lines of the gene model, used for build inference."""
        lines = []
        try:
            with open_text(self.file_path) as f:
                for line in f:
                    lines.append(line)
                    if len(lines) >= line_count:
                        break
        except (OSError, EOFError) as e:
            raise ParseError(f"Cannot read gene model header: {e}", self.file_path)
        return ''.join(lines)

    def load(self) -> IntervalSet:
        """Parse the gene model into a deduplicated, canonically ordered set."""
        logging.info(f"Parsing gene model: {self.file_path}")

        intervals = set()
        self.dropped_records = 0
        self.filtered_scaffold_records = 0

        try:
            with open_text(self.file_path) as f:
                for line_num, line in enumerate(f, 1):
                    line = line.rstrip('\n')
                    if not line.strip() or line.startswith('#'):
                        continue

                    try:
                        interval = self.parse_record(line, line_num)
                    except UnsupportedRecordError as e:
                        logging.debug(str(e))
                        self.dropped_records += 1
                        continue

                    if not self.include_scaffolds and not is_primary_chromosome(interval.chromosome):
                        self.filtered_scaffold_records += 1
                        continue

                    intervals.add(interval)

        except FileNotFoundError:
            raise ParseError(f"Gene model file not found: {self.file_path}")
        except (OSError, EOFError, UnicodeDecodeError) as e:
            raise ParseError(f"Failed to read gene model: {e}", self.file_path)

        if self.dropped_records:
            logging.warning(f"Dropped {self.dropped_records} unsupported records from {self.file_path}")
        if self.filtered_scaffold_records:
            logging.info(f"Skipped {self.filtered_scaffold_records} records on scaffolds")

        universe = IntervalSet(tuple(intervals))
        logging.info(f"Loaded {len(universe)} intervals on {len(universe.chromosomes)} chromosomes")
        return universe

    def parse_record(self, line: str, line_num: int = 0) -> Interval:
        """
        Convert one GTF line into an interval.

        GTF coordinates are 1-based and inclusive; the interval is 0-based and
        half-open, so only the start moves.
        """
        parts = line.split('\t')
        if len(parts) != 9:
            raise UnsupportedRecordError(f"Expected 9 fields, found {len(parts)}", self.file_path, line_num)

        chrom, source, feature, start, end, score, strand, frame, attributes = parts

        try:
            start, end = int(start) - 1, int(end)
        except ValueError:
            raise UnsupportedRecordError(f"Non-integer coordinates: {parts[3]}-{parts[4]}",
                                         self.file_path, line_num)

        if strand not in VALID_STRANDS:
            raise UnsupportedRecordError(f"Unstranded record: {strand!r}", self.file_path, line_num)

        if start < 0 or start >= end:
            raise UnsupportedRecordError(f"Empty or negative range: {parts[3]}-{parts[4]}",
                                         self.file_path, line_num)

        gene_name = self._parse_gtf_attributes(attributes).get('gene_name')
        if not gene_name:
            raise UnsupportedRecordError("Missing gene_name attribute", self.file_path, line_num)

        return Interval.create(chrom, start, end, strand, feature, (gene_name,))

    def _parse_gtf_attributes(self, attr_string: str) -> Dict[str, str]:
        """Parse GTF attributes string."""
        attributes = {}
        for attr in attr_string.split(';'):
            attr = attr.strip()
            if not attr:
                continue
            key, _, value = attr.partition(' ')
            value = value.strip().strip('"')
            if key and value:
                attributes.setdefault(key, value)
        return attributes


class ChromosomeSizeProvider:
    """Supply chromosome lengths from a local table or a download by genome build."""

    def __init__(self, size_file: Optional[str] = None,
                 genome_build: Optional[str] = None,
                 url_template: str = DEFAULT_SIZE_URL_TEMPLATE,
                 timeout: float = 30.0,
                 include_scaffolds: bool = True,
                 build_resolver: Callable[[str], Optional[str]] = infer_build):
        self.size_file = size_file
        self.genome_build = genome_build
        self.url_template = url_template
        self.timeout = timeout
        self.include_scaffolds = include_scaffolds
        self.build_resolver = build_resolver

    def load(self, sample_text: str = "", working_dir: Optional[str] = None) -> Dict[str, int]:
        """
        Get the chromosome size map.

        Args:
            sample_text: Head of the gene model, used when no build is configured
            working_dir: Directory where a downloaded table is cached (optional)

        Returns:
            Mapping of chromosome name to length
        """
        if self.size_file and os.path.isfile(self.size_file):
            logging.info(f"Reading chromosome sizes from {self.size_file}")
            try:
                with open_text(self.size_file) as f:
                    sizes = self.parse_sizes(f, self.size_file)
            except (OSError, EOFError, UnicodeDecodeError) as e:
                raise SizeSourceUnavailableError(str(e), source=self.size_file)
        else:
            if self.size_file:
                logging.warning(f"Local chromosome size file not found: {self.size_file}")
            sizes = self._download(sample_text, working_dir)

        if not self.include_scaffolds:
            sizes = {chrom: length for chrom, length in sizes.items() if is_primary_chromosome(chrom)}

        logging.info(f"Loaded sizes for {len(sizes)} chromosomes")
        return sizes

    def resolve_build(self, sample_text: str) -> str:
        """Get the configured build, or infer it from the sample text."""
        build = self.genome_build or self.build_resolver(sample_text)
        if not build:
            raise SizeSourceUnavailableError(
                "Genome build could not be inferred from the gene model; "
                "provide a chromosome size file or set the genome build"
            )
        return build

    def _download(self, sample_text: str, working_dir: Optional[str]) -> Dict[str, int]:
        build = self.resolve_build(sample_text)
        url = self.url_template.format(build=build)
        logging.warning(f"Downloading {build} chromosome sizes from {url}")

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SizeSourceUnavailableError(str(e), source=url, genome_build=build)

        text = response.text
        if working_dir:
            cached = Path(working_dir) / f"{build}.chrom.sizes"
            cached.write_text(text)
            logging.info(f"{build} size file is downloaded to {cached}")

        return self.parse_sizes(text.splitlines(), url)

    @staticmethod
    def parse_sizes(lines, source: str = "") -> Dict[str, int]:
        """Parse two-column chromosome size records."""
        sizes: Dict[str, int] = {}
        for line_num, line in enumerate(lines, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            fields = line.split()
            if len(fields) < 2:
                raise ParseError("Expected chromosome and length columns", source, line_num)
            try:
                length = int(fields[1])
            except ValueError:
                raise ParseError(f"Invalid chromosome length: {fields[1]}", source, line_num)
            if length < 0:
                raise ParseError(f"Negative chromosome length: {length}", source, line_num)

            sizes[fields[0]] = length
        return sizes
