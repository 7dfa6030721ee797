"""
c0 Compiler Driver
==================

This module provides the main compiler interface for c0. It runs the
front end over one compilation unit:

    Source → Tokenize → Analyze → Instructions

Usage
-----
Command line:
    $ c0c hello.c0 -o hello.lst

Programmatic:
    >>> from c0_sdk.frontend import compile_c0
    >>> instructions = compile_c0('let x: int = 42;')

Error Handling
--------------
Compilation is fail-fast. The first TokenizeError or AnalyzeError
propagates to the caller with its file name and source line attached.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from c0_sdk.frontend.instructions import Instruction
from c0_sdk.frontend.lexer import Tokenizer
from c0_sdk.frontend.parser import Analyzer
from c0_sdk.frontend.symbols import FunctionSignature

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")

# Accepted integer literal widths, shared with c0c --integer-bits
INTEGER_BITS_RANGE = (1, 128)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        strict_initialization: Reject reads of variables that have not
                               been assigned yet
        integer_bits: Width of unsigned integer literals; larger
                      literals are rejected by the tokenizer
        include_builtins: Pre-register the standard library functions
                          (getint, putint, putstr, ...)
        filename: Name used in diagnostics when none is given
    """
    strict_initialization: bool = True
    integer_bits: int = 64
    include_builtins: bool = True
    filename: str = "<input>"

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """
        Create CompilerOptions from environment variables.

        Environment variables (all optional):
            C0_STRICT_INIT: "0"/"false" disables initialization checks
            C0_INTEGER_BITS: Integer literal width (e.g. 32)
            C0_NO_BUILTINS: "1"/"true" leaves out the standard library

        Returns:
            CompilerOptions with values from environment variables
        """
        options = cls()

        if (strict := os.environ.get("C0_STRICT_INIT")) is not None:
            options.strict_initialization = _env_flag(strict)

        if bits := os.environ.get("C0_INTEGER_BITS"):
            low, high = INTEGER_BITS_RANGE
            try:
                width = int(bits)
            except ValueError:
                logger.warning(f"Ignoring invalid C0_INTEGER_BITS value {bits!r}")
            else:
                if low <= width <= high:
                    options.integer_bits = width
                else:
                    logger.warning(
                        f"Ignoring C0_INTEGER_BITS value {width}: "
                        f"must be between {low} and {high}"
                    )

        if no_builtins := os.environ.get("C0_NO_BUILTINS"):
            options.include_builtins = not _env_flag(no_builtins)

        return options


@dataclass
class CompilerResult:
    """
    Result of a compilation.

    Attributes:
        filename: Source filename
        success: True if compilation succeeded
        instructions: The emitted instruction sequence
        functions: Every callable function, builtins included
        slot_count: Number of variable slots allocated
        token_count: Number of tokens consumed
    """
    filename: str = ""
    success: bool = False
    instructions: list[Instruction] = field(default_factory=list)
    functions: list[FunctionSignature] = field(default_factory=list)
    slot_count: int = 0
    token_count: int = 0


class C0Compiler:
    """
    c0 compiler front end.

    Example:
        compiler = C0Compiler(CompilerOptions(strict_initialization=False))
        result = compiler.compile_file("main.c0")
        for instruction in result.instructions:
            print(instruction)
    """

    def __init__(self, options: Optional[CompilerOptions] = None):
        self.options = options or CompilerOptions()

    def compile_source(self, source: str, filename: Optional[str] = None) -> CompilerResult:
        """
        Compile c0 source code to stack machine instructions.

        Args:
            source: c0 source code string
            filename: Source filename for error messages

        Returns:
            CompilerResult with the instructions and symbol summary

        Raises:
            TokenizeError: If the source contains malformed tokens
            AnalyzeError: On the first grammar or semantic error
        """
        filename = filename or self.options.filename
        logger.debug(f"Compiling {filename} ({len(source)} characters)")

        tokenizer = Tokenizer(source, filename, self.options.integer_bits)
        analyzer = Analyzer(
            tokenizer,
            strict_initialization=self.options.strict_initialization,
            include_builtins=self.options.include_builtins,
        )
        instructions = analyzer.analyze()

        result = CompilerResult(
            filename=filename,
            success=True,
            instructions=instructions,
            functions=list(analyzer.functions),
            slot_count=analyzer.symbols.slot_count,
            token_count=analyzer.token_count,
        )
        logger.debug(f"Compiled {filename}: {len(instructions)} instructions")
        return result

    def compile_file(self, filepath: str) -> CompilerResult:
        """
        Compile a c0 source file.

        Raises:
            TokenizeError: If the source contains malformed tokens
            AnalyzeError: On the first grammar or semantic error
            FileNotFoundError: If source file not found
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Source file not found: {filepath}")

        source = path.read_text(encoding="utf-8")
        return self.compile_source(source, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def compile_c0(source: str, filename: str = "<input>", **kwargs) -> list[Instruction]:
    """
    Compile c0 source code to stack machine instructions.

    Keyword arguments are passed to CompilerOptions.

    Example:
        >>> compile_c0('let x: int;', strict_initialization=False)
        []
    """
    compiler = C0Compiler(CompilerOptions(**kwargs))
    return compiler.compile_source(source, filename).instructions
