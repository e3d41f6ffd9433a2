"""Equivalence and compatibility verification.

This package compares row sequences in or out of order and runs the
dataset by version by variant compatibility matrix.
"""
