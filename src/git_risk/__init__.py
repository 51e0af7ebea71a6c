"""Commit-history risk analytics for git repositories."""

__version__ = "0.1.0"
