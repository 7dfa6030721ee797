"""
c0 SDK Command-Line Interface
=============================

This package provides command-line tools for the c0 SDK:

- **c0c**: c0 compiler front end

Each tool is implemented as a Click-based CLI application with
help text and consistent exit codes.
"""

__all__ = ["c0c"]
