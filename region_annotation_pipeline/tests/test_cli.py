#!/usr/bin/env python3

"""
Unit tests for the command-line interface.
"""

import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

import pipeline_cli


class TestCommandLine(unittest.TestCase):
    """Test argument handling of the CLI."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_parser_options(self):
        args = pipeline_cli.create_argument_parser().parse_args(
            ["-f", "genes.gtf", "-o", "out", "-k", "-r", "500", "-s", "hg38.sizes", "-p", "pre"]
        )
        self.assertEqual(args.gene_model, "genes.gtf")
        self.assertEqual(args.output_dir, "out")
        self.assertTrue(args.include_scaffolds)
        self.assertEqual(args.tss_radius, 500)
        self.assertEqual(args.chrom_sizes, "hg38.sizes")
        self.assertEqual(args.prefix, "pre")

    def test_scaffold_flag_defaults_to_unset(self):
        args = pipeline_cli.create_argument_parser().parse_args(["-f", "genes.gtf"])
        self.assertIsNone(args.include_scaffolds)

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_gene_model_exits_with_error(self):
        self.assertEqual(pipeline_cli.main(["-o", self.test_dir]), 1)

    @patch.dict(os.environ, {}, clear=True)
    def test_invalid_radius_is_configuration_error(self):
        self.assertEqual(pipeline_cli.main(["-f", "genes.gtf", "-r", "-3", "-o", self.test_dir]), 2)

    @patch.dict(os.environ, {}, clear=True)
    def test_runs_pipeline(self):
        gtf_path = os.path.join(self.test_dir, "mini.gtf")
        size_path = os.path.join(self.test_dir, "mini.sizes")
        with open(gtf_path, 'w') as f:
            f.write('chr1\tTEST\tgene\t1001\t2000\t.\t+\t.\tgene_id "g1"; gene_name "A";\n')
        with open(size_path, 'w') as f:
            f.write("chr1\t5000\n")

        output_dir = os.path.join(self.test_dir, "out")
        status = pipeline_cli.main(["-f", gtf_path, "-s", size_path, "-o", output_dir, "--log-level", "WARNING"])

        self.assertEqual(status, 0)
        self.assertTrue(os.path.exists(os.path.join(output_dir, "mini.intergenic.bed")))


if __name__ == '__main__':
    unittest.main()
