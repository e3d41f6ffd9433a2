"""Artifact discovery layer.

This module lists release directories and resolves reference, stored,
and generated artifact locations by naming convention.
"""
