#!/usr/bin/env python3

"""
Configuration management for the region annotation pipeline.

Centralized configuration with support for file-based configuration
and environment variable overrides.
"""

import os
import json
from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any

import yaml

from .exceptions import ConfigurationError


SUPPORTED_BUILDS = ('hg38', 'hg19', 'mm39', 'mm10')
DEFAULT_SIZE_URL_TEMPLATE = (
    "https://raw.githubusercontent.com/igvteam/igv/master/genomes/sizes/{build}.chrom.sizes"
)


def read_config_file(config_path: str) -> Dict[str, Any]:
    """Read the raw settings mapping of a JSON or YAML configuration file."""
    if not os.path.exists(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            if config_path.lower().endswith(('.yaml', '.yml')):
                config_data = yaml.safe_load(f)
            else:
                config_data = json.load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML configuration file format: {e}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid configuration file format: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")

    return config_data


@dataclass
class PipelineConfig:
    """Centralized configuration for the region annotation pipeline."""

    # Inputs and outputs
    gene_model_file: Optional[str] = None
    output_dir: str = "."
    prefix: Optional[str] = None

    # Biological parameters
    tss_radius: int = 300
    include_scaffolds: bool = False

    # Chromosome sizes
    chrom_sizes_file: Optional[str] = None
    genome_build: Optional[str] = None  # overrides inference from the GTF header
    size_url_template: str = DEFAULT_SIZE_URL_TEMPLATE
    download_timeout: float = 30.0

    # Performance settings
    memory_limit_mb: int = 4096
    enable_memory_monitoring: bool = True

    debug_mode: bool = False

    @classmethod
    def from_file(cls, config_path: str) -> 'PipelineConfig':
        """Load configuration from file (JSON or YAML)."""
        return cls.from_dict(read_config_file(config_path))

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'PipelineConfig':
        """Create configuration from dictionary."""
        # Filter out unknown keys
        known_keys = set(cls.__dataclass_fields__.keys())
        filtered_dict = {k: v for k, v in config_dict.items() if k in known_keys}

        try:
            return cls(**filtered_dict)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration parameters: {e}")

    @classmethod
    def from_env(cls) -> 'PipelineConfig':
        """Load configuration from environment variables."""
        config = cls()

        to_bool = lambda x: x.lower() in ('true', '1', 'yes')
        env_mappings = {
            'REGION_ANNO_GENE_MODEL': ('gene_model_file', str),
            'REGION_ANNO_OUTPUT_DIR': ('output_dir', str),
            'REGION_ANNO_TSS_RADIUS': ('tss_radius', int),
            'REGION_ANNO_INCLUDE_SCAFFOLDS': ('include_scaffolds', to_bool),
            'REGION_ANNO_CHROM_SIZES': ('chrom_sizes_file', str),
            'REGION_ANNO_GENOME_BUILD': ('genome_build', str),
            'REGION_ANNO_DOWNLOAD_TIMEOUT': ('download_timeout', float),
            'REGION_ANNO_MEMORY_LIMIT_MB': ('memory_limit_mb', int),
            'REGION_ANNO_DEBUG_MODE': ('debug_mode', to_bool),
        }

        for env_var, (field_name, converter) in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value:
                try:
                    setattr(config, field_name, converter(env_value))
                except (ValueError, TypeError) as e:
                    raise ConfigurationError(f"Invalid environment variable {env_var}: {e}")

        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to file."""
        config_dict = self.to_dict()

        try:
            with open(config_path, 'w') as f:
                if config_path.lower().endswith(('.yaml', '.yml')):
                    yaml.safe_dump(config_dict, f, default_flow_style=False)
                else:
                    json.dump(config_dict, f, indent=2)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error saving configuration: {e}")

    def validate(self) -> None:
        """Validate configuration parameters."""
        # bool is an int subclass; `tss_radius: true` must not become radius 1
        if (isinstance(self.tss_radius, bool) or not isinstance(self.tss_radius, int)
                or self.tss_radius < 0):
            raise ConfigurationError("tss_radius must be a non-negative integer")

        if self.genome_build is not None and self.genome_build not in SUPPORTED_BUILDS:
            raise ConfigurationError(
                f"genome_build must be one of {', '.join(SUPPORTED_BUILDS)}, got {self.genome_build}"
            )

        if '{build}' not in self.size_url_template:
            raise ConfigurationError("size_url_template must contain a {build} placeholder")

        if self.download_timeout <= 0:
            raise ConfigurationError("download_timeout must be > 0")

        if self.memory_limit_mb < 100:
            raise ConfigurationError("memory_limit_mb must be >= 100")

        if not self.output_dir:
            raise ConfigurationError("output_dir cannot be empty")

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()


def load_config(config_path: Optional[str] = None,
                use_env: bool = True) -> PipelineConfig:
    """
    Load configuration with priority: file > environment > defaults.

    Args:
        config_path: Path to configuration file (optional)
        use_env: Whether to load environment variables

    Returns:
        PipelineConfig: Loaded configuration
    """
    # Start with defaults
    config = PipelineConfig()

    # Override with environment variables if requested
    if use_env:
        env_config = PipelineConfig.from_env()
        for field_name in PipelineConfig.__dataclass_fields__.keys():
            env_value = getattr(env_config, field_name)
            if env_value != getattr(config, field_name):
                setattr(config, field_name, env_value)

    # Override with file configuration if provided
    if config_path:
        file_data = read_config_file(config_path)
        file_config = PipelineConfig.from_dict(file_data)
        # Only keys present in the file override; an explicit default still wins.
        for field_name in PipelineConfig.__dataclass_fields__.keys():
            if field_name in file_data:
                setattr(config, field_name, getattr(file_config, field_name))

    config.validate()
    return config
