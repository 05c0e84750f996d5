"""Utility helpers for the region annotation pipeline."""
