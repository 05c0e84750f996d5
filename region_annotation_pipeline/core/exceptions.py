#!/usr/bin/env python3

"""
Custom exceptions for the region annotation pipeline.

Provides specific exception types for better error handling and debugging.
"""

class PipelineError(Exception):
    """Base exception for all pipeline-related errors."""
    pass


class MissingRequiredInputError(PipelineError):
    """No gene model source was provided."""
    pass


class ParseError(PipelineError):
    """Error occurred during file parsing."""

    def __init__(self, message: str, filename: str = "", line_number: int = 0):
        super().__init__(message)
        self.filename = filename
        self.line_number = line_number

    def __str__(self):
        if self.filename and self.line_number:
            return f"Parse error in {self.filename} at line {self.line_number}: {super().__str__()}"
        elif self.filename:
            return f"Parse error in {self.filename}: {super().__str__()}"
        return super().__str__()


class UnsupportedRecordError(ParseError):
    """A gene model record lacks required fields and cannot be converted."""
    pass


class SizeSourceUnavailableError(PipelineError):
    """Chromosome sizes could not be read locally or fetched remotely."""

    def __init__(self, message: str, source: str = "", genome_build: str = ""):
        super().__init__(message)
        self.source = source
        self.genome_build = genome_build

    def __str__(self):
        if self.source:
            return f"Chromosome sizes unavailable from {self.source}: {super().__str__()}"
        elif self.genome_build:
            return f"Chromosome sizes unavailable for build {self.genome_build}: {super().__str__()}"
        return super().__str__()


class UnresolvedChromosomeSizeWarning(UserWarning):
    """Chromosome present in the annotation but missing from the size table."""

    def __init__(self, chromosomes):
        self.chromosomes = tuple(chromosomes)
        super().__init__(
            f"No size known for {len(self.chromosomes)} chromosome(s): {', '.join(self.chromosomes)}"
        )


class OutputError(PipelineError):
    """An output file could not be written."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path

    def __str__(self):
        if self.path:
            return f"Output error for {self.path}: {super().__str__()}"
        return super().__str__()


class StageError(PipelineError):
    """An annotation stage aborted."""

    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.stage = stage

    def __str__(self):
        if self.stage:
            return f"Stage '{self.stage}' failed: {super().__str__()}"
        return super().__str__()


class ConfigurationError(PipelineError):
    """Error in pipeline configuration."""
    pass


class MemoryLimitError(PipelineError):
    """Memory usage exceeded limits."""

    def __init__(self, message: str, current_usage: float, limit: float):
        super().__init__(message)
        self.current_usage = current_usage
        self.limit = limit

    def __str__(self):
        return f"Memory error: {super().__str__()} (current: {self.current_usage:.1f}MB, limit: {self.limit:.1f}MB)"
