#!/usr/bin/env python3

"""
Unit tests for configuration management.

Tests the configuration loading, validation, and environment
variable handling functionality.
"""

import unittest
import tempfile
import os
import json
import sys
from unittest.mock import patch

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from region_annotation_pipeline.core.config import PipelineConfig, load_config
from region_annotation_pipeline.core.exceptions import ConfigurationError


class TestPipelineConfig(unittest.TestCase):
    """Test PipelineConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = PipelineConfig()

        self.assertIsNone(config.gene_model_file)
        self.assertEqual(config.output_dir, ".")
        self.assertEqual(config.tss_radius, 300)
        self.assertFalse(config.include_scaffolds)
        self.assertIsNone(config.chrom_sizes_file)
        self.assertIsNone(config.genome_build)
        self.assertIn("{build}", config.size_url_template)
        self.assertEqual(config.memory_limit_mb, 4096)
        self.assertFalse(config.debug_mode)

    def test_config_validation(self):
        """Test configuration validation."""
        PipelineConfig().validate()  # Should not raise
        PipelineConfig(tss_radius=0).validate()

        with self.assertRaises(ConfigurationError):
            PipelineConfig(tss_radius=-1)

        with self.assertRaises(ConfigurationError):
            PipelineConfig(genome_build="hg17")

        with self.assertRaises(ConfigurationError):
            PipelineConfig(size_url_template="https://example.org/sizes.txt")

        with self.assertRaises(ConfigurationError):
            PipelineConfig(download_timeout=0)

        with self.assertRaises(ConfigurationError):
            PipelineConfig(memory_limit_mb=50)

        with self.assertRaises(ConfigurationError):
            PipelineConfig(output_dir="")

    def test_boolean_tss_radius_rejected(self):
        """A boolean from JSON or YAML is not a radius."""
        with self.assertRaises(ConfigurationError):
            PipelineConfig(tss_radius=True)

        with self.assertRaises(ConfigurationError):
            PipelineConfig.from_dict({"tss_radius": False})

    def test_config_from_dict(self):
        """Test creating config from dictionary."""
        config = PipelineConfig.from_dict({
            "gene_model_file": "genes.gtf",
            "tss_radius": 500,
            "include_scaffolds": True,
            "unknown_key": "ignored"  # Should be filtered out
        })

        self.assertEqual(config.gene_model_file, "genes.gtf")
        self.assertEqual(config.tss_radius, 500)
        self.assertTrue(config.include_scaffolds)
        self.assertEqual(config.memory_limit_mb, 4096)

    def test_config_to_dict(self):
        """Test converting config to dictionary."""
        config_dict = PipelineConfig(tss_radius=150, debug_mode=True).to_dict()

        self.assertEqual(config_dict["tss_radius"], 150)
        self.assertTrue(config_dict["debug_mode"])
        self.assertIn("chrom_sizes_file", config_dict)

    def test_config_from_json_file(self):
        """Test loading config from JSON file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"tss_radius": 1000, "genome_build": "mm10"}, f)
            config_path = f.name

        try:
            config = PipelineConfig.from_file(config_path)
            self.assertEqual(config.tss_radius, 1000)
            self.assertEqual(config.genome_build, "mm10")
        finally:
            os.unlink(config_path)

    def test_config_from_yaml_file(self):
        """Test loading config from YAML file."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            f.write("tss_radius: 250\ninclude_scaffolds: true\nchrom_sizes_file: hg38.chrom.sizes\n")
            config_path = f.name

        try:
            config = PipelineConfig.from_file(config_path)
            self.assertEqual(config.tss_radius, 250)
            self.assertTrue(config.include_scaffolds)
            self.assertEqual(config.chrom_sizes_file, "hg38.chrom.sizes")
        finally:
            os.unlink(config_path)

    def test_config_from_nonexistent_file(self):
        """Test error handling for nonexistent config file."""
        with self.assertRaises(ConfigurationError):
            PipelineConfig.from_file("/nonexistent/config.json")

    def test_config_from_invalid_json(self):
        """Test error handling for invalid JSON."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            f.write("{ invalid json }")
            config_path = f.name

        try:
            with self.assertRaises(ConfigurationError):
                PipelineConfig.from_file(config_path)
        finally:
            os.unlink(config_path)

    def test_config_save_to_file(self):
        """Test saving config to file."""
        config = PipelineConfig(tss_radius=123, debug_mode=True)

        with tempfile.NamedTemporaryFile(mode='w', suffix='.yml', delete=False) as f:
            config_path = f.name

        try:
            config.save_to_file(config_path)

            loaded_config = PipelineConfig.from_file(config_path)
            self.assertEqual(loaded_config.tss_radius, 123)
            self.assertTrue(loaded_config.debug_mode)
        finally:
            if os.path.exists(config_path):
                os.unlink(config_path)

    def test_config_from_env(self):
        """Test loading config from environment variables."""
        env_vars = {
            'REGION_ANNO_GENE_MODEL': '/data/genes.gtf.gz',
            'REGION_ANNO_TSS_RADIUS': '500',
            'REGION_ANNO_INCLUDE_SCAFFOLDS': 'yes',
            'REGION_ANNO_GENOME_BUILD': 'hg19',
            'REGION_ANNO_DEBUG_MODE': 'true',
        }

        with patch.dict(os.environ, env_vars):
            config = PipelineConfig.from_env()

        self.assertEqual(config.gene_model_file, '/data/genes.gtf.gz')
        self.assertEqual(config.tss_radius, 500)
        self.assertTrue(config.include_scaffolds)
        self.assertEqual(config.genome_build, 'hg19')
        self.assertTrue(config.debug_mode)
        self.assertEqual(config.memory_limit_mb, 4096)

    def test_config_from_env_invalid_values(self):
        """Test error handling for invalid environment values."""
        with patch.dict(os.environ, {'REGION_ANNO_TSS_RADIUS': 'wide'}):
            with self.assertRaises(ConfigurationError):
                PipelineConfig.from_env()

        with patch.dict(os.environ, {'REGION_ANNO_TSS_RADIUS': '-5'}):
            with self.assertRaises(ConfigurationError):
                PipelineConfig.from_env()


class TestLoadConfig(unittest.TestCase):
    """Test the load_config function."""

    def test_load_default_config(self):
        """Test loading default configuration."""
        config = load_config(use_env=False)
        self.assertEqual(config.tss_radius, 300)

    def test_load_config_priority(self):
        """Test configuration loading priority: file > env > defaults."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"tss_radius": 1000}, f)
            config_path = f.name

        env_vars = {'REGION_ANNO_TSS_RADIUS': '500', 'REGION_ANNO_GENOME_BUILD': 'mm39'}
        try:
            with patch.dict(os.environ, env_vars):
                config = load_config(config_path=config_path, use_env=True)

            # File overrides environment, environment overrides defaults
            self.assertEqual(config.tss_radius, 1000)
            self.assertEqual(config.genome_build, 'mm39')
        finally:
            os.unlink(config_path)

    def test_file_value_equal_to_default_overrides_env(self):
        """An explicit default in the file still wins over the environment."""
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump({"tss_radius": 300}, f)
            config_path = f.name

        try:
            with patch.dict(os.environ, {'REGION_ANNO_TSS_RADIUS': '500'}):
                config = load_config(config_path=config_path, use_env=True)

            self.assertEqual(config.tss_radius, 300)
        finally:
            os.unlink(config_path)

    def test_load_config_no_env(self):
        """Test loading config without environment variables."""
        with patch.dict(os.environ, {'REGION_ANNO_TSS_RADIUS': '500'}):
            config = load_config(use_env=False)

        self.assertEqual(config.tss_radius, 300)


if __name__ == '__main__':
    unittest.main()
