"""Keeps Go resolver implementations in step with generated resolver interfaces."""

__version__ = "0.1.0"
