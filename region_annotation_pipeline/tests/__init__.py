#!/usr/bin/env python3

"""
Test suite for the region annotation pipeline.

Unit tests covering all major components including:
- Interval data structures and canonical ordering
- Interval algebra (merge, subtract, complement) and its invariants
- Gene model and chromosome size loading
- The four annotation stages and the end-to-end pipeline
- Configuration management and validation
"""
