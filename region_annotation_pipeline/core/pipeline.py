#!/usr/bin/env python3

"""
Main pipeline class for genomic region annotation.

Loads the gene model, runs the TSS, exon, intron and intergenic stages in
their fixed order and persists one BED file per stage.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Mapping, Optional, Tuple

from .config import PipelineConfig
from .data_structures import IntervalSet
from .exceptions import MissingRequiredInputError, OutputError, PipelineError, StageError
from .generators import OutputGenerator, default_prefix
from .parsers import ChromosomeSizeProvider, GeneModelLoader, infer_build
from .processors import RegionAnnotator
from ..utils.performance_monitor import PerformanceMonitor


STAGE_ORDER = ('tss', 'exon', 'intron', 'intergenic')


@dataclass(frozen=True)
class AnnotationResult:
    """The five annotation sets of one genome."""
    universe: IntervalSet
    tss: IntervalSet
    exon: IntervalSet
    intron: IntervalSet
    intergenic: IntervalSet

    def as_dict(self) -> Dict[str, IntervalSet]:
        return {
            'universe': self.universe,
            'tss': self.tss,
            'exon': self.exon,
            'intron': self.intron,
            'intergenic': self.intergenic,
        }


class RegionAnnotationPipeline:
    """Main pipeline class that coordinates all annotation stages."""

    def __init__(self, config: PipelineConfig,
                 size_provider: Optional[ChromosomeSizeProvider] = None,
                 build_resolver: Callable[[str], Optional[str]] = infer_build):
        self.config = config
        self.monitor = PerformanceMonitor(memory_limit_mb=config.memory_limit_mb,
                                          enabled=config.enable_memory_monitoring)
        self.annotator = RegionAnnotator(config.tss_radius)
        self.size_provider = size_provider or ChromosomeSizeProvider(
            size_file=config.chrom_sizes_file,
            genome_build=config.genome_build,
            url_template=config.size_url_template,
            timeout=config.download_timeout,
            include_scaffolds=config.include_scaffolds,
            build_resolver=build_resolver,
        )
        self.output_files: Dict[str, Path] = {}

    def annotate(self, universe: IntervalSet, chromosome_sizes: Mapping[str, int]) -> AnnotationResult:
        """Run all four stages in memory, without touching the filesystem."""
        sets = {'universe': universe}
        for stage_name, _, intervals in self._stage_sequence(universe, lambda: chromosome_sizes):
            sets[stage_name] = intervals
        return AnnotationResult(**sets)

    def _stage_sequence(self, universe: IntervalSet,
                        load_sizes: Callable[[], Mapping[str, int]]
                        ) -> Iterator[Tuple[str, int, IntervalSet]]:
        """
        Yield (stage name, input interval count, result) in dependency order.

        Each stage is computed only when the next item is requested, so a
        caller can wrap every step in its own monitoring context.
        """
        genes = universe.with_region('gene')
        exons = universe.with_region('exon')

        tss = self.annotator.annotate_tss(genes)
        yield 'tss', len(genes), tss

        exon = self.annotator.annotate_exons(exons, tss)
        yield 'exon', len(exons), exon

        intron = self.annotator.annotate_introns(genes, exon, tss)
        yield 'intron', len(genes), intron

        intergenic = self.annotator.annotate_intergenic(genes, tss, load_sizes())
        yield 'intergenic', len(genes) + len(tss), intergenic

    def run(self) -> bool:
        """
        Run the complete annotation pipeline.

        Returns:
            True if every stage completed. On failure the outputs of stages
            that already finished are kept and the failed stage writes nothing.

        Raises:
            MissingRequiredInputError: no gene model file is configured
            OutputError: the output directory cannot be created or written
        """
        if not self.config.gene_model_file:
            raise MissingRequiredInputError("A gene model (GTF) file is required")

        output_dir = Path(self.config.output_dir)
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            file_handler = self._setup_pipeline_logging(output_dir)
        except OSError as e:
            raise OutputError(str(e), str(output_dir)) from e
        self.output_files = {}

        try:
            logging.info("Starting region annotation pipeline")
            logging.info(f"Configuration: {self.config}")

            # Removed on every exit path.
            with tempfile.TemporaryDirectory(prefix='.tmp', dir=output_dir) as working_dir:
                self._run_stages(working_dir)

            logging.info("Pipeline completed successfully")
            return True

        except PipelineError as e:
            logging.error(f"Pipeline failed: {e}")
            logging.debug("Full traceback:", exc_info=True)
            return False

        finally:
            self.monitor.log_performance_report()
            logging.getLogger().removeHandler(file_handler)
            file_handler.close()

    def _setup_pipeline_logging(self, output_dir: Path) -> logging.Handler:
        """Set up pipeline-specific logging."""
        log_file = output_dir / 'region_annotation.log'

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(levelname)s - %(message)s'
        ))

        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        if self.config.debug_mode:
            root_logger.setLevel(logging.DEBUG)

        return file_handler

    def _run_stages(self, working_dir: str) -> None:
        """Load the gene model and run each stage in dependency order."""
        loader = GeneModelLoader(self.config.gene_model_file, self.config.include_scaffolds)
        generator = OutputGenerator(
            self.config.output_dir,
            self.config.prefix or default_prefix(self.config.gene_model_file),
            self.config.tss_radius,
            working_dir,
        )

        with self.monitor.stage_context("gene_model") as metrics:
            universe = loader.load()
            metrics.intervals_out = len(universe)
            self.output_files['universe'] = generator.write('universe', universe)

        if not universe.with_region('gene'):
            logging.warning("No gene records found; annotation sets will be empty")

        def load_sizes() -> Mapping[str, int]:
            try:
                return self.size_provider.load(loader.read_header(), working_dir)
            except PipelineError as e:
                raise StageError(str(e), stage="intergenic") from e

        stages = self._stage_sequence(universe, load_sizes)
        for stage_name in STAGE_ORDER:
            with self.monitor.stage_context(stage_name) as metrics:
                name, metrics.intervals_in, intervals = next(stages)
                metrics.intervals_out = len(intervals)
                self.output_files[name] = generator.write(name, intervals)
