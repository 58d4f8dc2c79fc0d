"""Rubric-driven style and architecture scoring for Python codebases."""

__version__ = "0.1.0"
