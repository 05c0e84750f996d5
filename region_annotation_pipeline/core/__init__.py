#!/usr/bin/env python3

"""
Core module for the region annotation pipeline.

Contains the interval data structures, the interval algebra, the annotation
stages, and configuration and exception types.
"""

from .data_structures import Interval, IntervalSet, RegionLabel, chromosome_sort_key
from .interval_algebra import sort_canonical, merge_stranded, subtract, complement, missing_chromosomes
from .exceptions import (
    PipelineError, MissingRequiredInputError, ParseError, UnsupportedRecordError,
    SizeSourceUnavailableError, UnresolvedChromosomeSizeWarning, OutputError,
    StageError, ConfigurationError, MemoryLimitError
)
from .config import PipelineConfig, load_config

__all__ = [
    'Interval', 'IntervalSet', 'RegionLabel', 'chromosome_sort_key',
    'sort_canonical', 'merge_stranded', 'subtract', 'complement', 'missing_chromosomes',
    'PipelineError', 'MissingRequiredInputError', 'ParseError', 'UnsupportedRecordError',
    'SizeSourceUnavailableError', 'UnresolvedChromosomeSizeWarning', 'OutputError',
    'StageError', 'ConfigurationError', 'MemoryLimitError',
    'PipelineConfig', 'load_config'
]
