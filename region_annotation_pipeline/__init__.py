#!/usr/bin/env python3

"""
Genomic Region Annotation Pipeline

Classifies every base of a genome as promoter window (TSS), exon, intron or
intergenic, starting from a GTF gene model.

This modular implementation provides:
- An in-process interval algebra (stranded merge, subtraction, complement)
- Canonically ordered, immutable interval sets
- Gene model and chromosome size loading
- Centralized configuration management
- Unit tests for every stage

Modules:
- core: Data structures, interval algebra, stages, parsers and configuration
- utils: Stage performance monitoring
- tests: Test suite
"""

__version__ = "1.0.0"
__author__ = "Region Annotation Pipeline Team"

# Import main components for easy access
from .core.data_structures import Interval, IntervalSet, RegionLabel
from .core.interval_algebra import sort_canonical, merge_stranded, subtract, complement
from .core.exceptions import (
    PipelineError, MissingRequiredInputError, ParseError, UnsupportedRecordError,
    SizeSourceUnavailableError, UnresolvedChromosomeSizeWarning, OutputError,
    StageError, ConfigurationError, MemoryLimitError
)
from .core.config import PipelineConfig, load_config
from .core.parsers import GeneModelLoader, ChromosomeSizeProvider, infer_build
from .core.processors import RegionAnnotator
from .core.pipeline import RegionAnnotationPipeline, AnnotationResult

__all__ = [
    # Main pipeline
    'RegionAnnotationPipeline', 'AnnotationResult', 'RegionAnnotator',
    # Data structures
    'Interval', 'IntervalSet', 'RegionLabel',
    # Interval algebra
    'sort_canonical', 'merge_stranded', 'subtract', 'complement',
    # Loading
    'GeneModelLoader', 'ChromosomeSizeProvider', 'infer_build',
    # Exceptions
    'PipelineError', 'MissingRequiredInputError', 'ParseError', 'UnsupportedRecordError',
    'SizeSourceUnavailableError', 'UnresolvedChromosomeSizeWarning', 'OutputError',
    'StageError', 'ConfigurationError', 'MemoryLimitError',
    # Configuration
    'PipelineConfig', 'load_config'
]
