"""
c0 SDK - Compiler Front End for the c0 Teaching Language
========================================================

This package provides the front end of a compiler for c0, a small
statically scoped teaching language with functions, integer and double
arithmetic, while loops and if/else chains. Programs are translated in a
single pass into instructions for a stack-based virtual machine.

Main Components
---------------
- **frontend**: tokenizer, symbol tables, analyzer and compiler driver
    Converts c0 source (.c0) into a stack machine instruction sequence

- **cli**: command-line tools
    The c0c compiler command

Quick Start
-----------
Compile a program:
    >>> from c0_sdk import C0Compiler
    >>> result = C0Compiler().compile_source('fn main() -> void { putint(42); }')
    >>> for instruction in result.instructions:
    ...     print(instruction)

Or use the command-line tool:
    $ c0c hello.c0 -o hello.lst
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from c0_sdk.errors import C0Error, Position
from c0_sdk.frontend import (
    AnalyzeError,
    C0Compiler,
    CompileError,
    CompilerOptions,
    CompilerResult,
    ErrorCode,
    Instruction,
    Operation,
    TokenizeError,
    compile_c0,
)

__all__ = [
    # Version info
    "__version__",
    # Compiler
    "C0Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_c0",
    # Output
    "Instruction",
    "Operation",
    # Exception hierarchy
    "C0Error",
    "CompileError",
    "TokenizeError",
    "AnalyzeError",
    "ErrorCode",
    "Position",
]
