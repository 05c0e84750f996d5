#!/usr/bin/env python3

"""
Command-line interface for the region annotation pipeline.

Generates TSS, exon, intron and intergenic BED annotations from a GTF file.
Chromosome names are expected to carry the "chr" prefix.
"""

import argparse
import sys
import logging

from region_annotation_pipeline.core.config import SUPPORTED_BUILDS, load_config
from region_annotation_pipeline.core.exceptions import ConfigurationError, PipelineError

def setup_logging(log_level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

def create_argument_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        description="Generate TSS, exon, intron and intergenic region annotations from a GTF file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Output files to the current working directory
  python pipeline_cli.py -f gencode.v44.annotation.gtf.gz

  # Include scaffolds, custom TSS radius and a local chromosome size file
  python pipeline_cli.py -f genes.gtf -o results -k -r 500 -s hg38.chrom.sizes
        """
    )

    parser.add_argument(
        '-f', '--gene-model',
        help='GTF file, plain or gzipped (required unless set in the configuration)'
    )
    parser.add_argument(
        '-p', '--prefix',
        help='Prefix of output files (default: GTF file name up to ".gtf")'
    )
    parser.add_argument(
        '-o', '--output-dir',
        help='Output directory (default: current working directory)'
    )
    parser.add_argument(
        '-k', '--include-scaffolds',
        action='store_true',
        default=None,
        help='Also annotate scaffolds and other non-primary contigs'
    )
    parser.add_argument(
        '-r', '--tss-radius',
        type=int,
        help='Radius upstream and downstream of the TSS (default: 300)'
    )
    parser.add_argument(
        '-s', '--chrom-sizes',
        help='Local chromosome size file; downloaded by genome build when omitted'
    )
    parser.add_argument(
        '-g', '--genome-build',
        choices=SUPPORTED_BUILDS,
        help='Genome build for downloading chromosome sizes (default: inferred from the GTF)'
    )
    parser.add_argument(
        '--config',
        help='Configuration file (JSON or YAML)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='INFO',
        help='Logging level (default: INFO)'
    )

    return parser

def main(argv=None):
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        # Load configuration
        config = load_config(config_path=args.config, use_env=True)

        # Override config with command line arguments
        overrides = {
            'gene_model_file': args.gene_model,
            'prefix': args.prefix,
            'output_dir': args.output_dir,
            'include_scaffolds': args.include_scaffolds,
            'tss_radius': args.tss_radius,
            'chrom_sizes_file': args.chrom_sizes,
            'genome_build': args.genome_build,
        }
        for field_name, value in overrides.items():
            if value is not None:
                setattr(config, field_name, value)

        # Re-validate after CLI overrides.
        config.validate()

        logger.info("Starting region annotation pipeline...")
        logger.info(f"Gene model: {config.gene_model_file}")
        logger.info(f"Output directory: {config.output_dir}")
        logger.info(f"TSS radius: {config.tss_radius}")

        # Initialize and run the pipeline
        from region_annotation_pipeline import RegionAnnotationPipeline

        pipeline = RegionAnnotationPipeline(config)
        success = pipeline.run()

        if success:
            logger.info("Pipeline completed successfully!")
            return 0
        else:
            logger.error("Pipeline failed!")
            return 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    except PipelineError as e:
        logger.error(f"Pipeline error: {e}")
        parser.print_usage(sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.debug("Full traceback:", exc_info=True)
        return 1

if __name__ == "__main__":
    sys.exit(main())
