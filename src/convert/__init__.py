"""Conversion layer.

This package parses schema descriptions, transcodes text rows to typed
records, and encodes or decodes Parquet artifacts through pyarrow.
"""
