"""
c0 SDK Error Hierarchy
======================

This module defines the root of the exception hierarchy for the c0 SDK
and the source position type shared by every component that reports
diagnostics. All exceptions inherit from C0Error, allowing callers to
catch all SDK-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
C0Error (base)
└── CompileError (front end, see c0_sdk.frontend.errors)
    ├── TokenizeError - malformed input found by the tokenizer
    └── AnalyzeError - grammar and declaration errors found by the analyzer

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class C0Error(Exception):
    """
    Base exception for all c0 SDK errors.

    All exceptions in the SDK inherit from this class, allowing callers
    to catch all SDK-related errors with a single except clause:

        try:
            compile_c0(source)
        except C0Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Position Tracking
# =============================================================================

@dataclass(frozen=True)
class Position:
    """
    A location in source text.

    Positions are immutable values used only for diagnostics; no part of
    the compiler branches on them.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'line:column' for error messages."""
        return f"{self.line}:{self.column}"
