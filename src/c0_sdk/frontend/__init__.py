"""
c0 Compiler Front End
=====================

This package implements the front end of the c0 compiler:

- A pull-based tokenizer with line/column tracking
- Scoped symbol tables with slot allocation
- A single-pass recursive descent analyzer emitting stack machine code

Pipeline
--------
    c0 Source → Tokenizer → Analyzer → Instructions

Instructions refer to symbolic labels; resolve_labels() turns them into
indices for a back end.

Usage
-----
>>> from c0_sdk.frontend import compile_c0
>>> for instruction in compile_c0('const answer: int = 42;'):
...     print(instruction)
    push      42
    store     0
"""

from c0_sdk.frontend.compiler import (
    C0Compiler,
    CompilerOptions,
    CompilerResult,
    compile_c0,
)
from c0_sdk.frontend.errors import (
    AnalyzeError,
    ArgumentCountError,
    AssignToConstantError,
    CompileError,
    DuplicateDeclarationError,
    ErrorCode,
    ExpectedTokenError,
    InvalidBreakContinueError,
    InvalidTypeError,
    NotDeclaredError,
    NotInitializedError,
    TokenizeError,
)
from c0_sdk.frontend.instructions import (
    Instruction,
    Operation,
    format_listing,
    resolve_labels,
)
from c0_sdk.frontend.lexer import Token, TokenKind, Tokenizer, tokenize
from c0_sdk.frontend.parser import Analyzer, analyze
from c0_sdk.frontend.source import SourceReader
from c0_sdk.frontend.symbols import (
    FunctionSignature,
    FunctionTable,
    SymbolInfo,
    SymbolTable,
)

__all__ = [
    # Main API
    "C0Compiler",
    "CompilerOptions",
    "CompilerResult",
    "compile_c0",
    # Errors
    "CompileError",
    "TokenizeError",
    "AnalyzeError",
    "ErrorCode",
    "ExpectedTokenError",
    "DuplicateDeclarationError",
    "NotDeclaredError",
    "NotInitializedError",
    "AssignToConstantError",
    "ArgumentCountError",
    "InvalidBreakContinueError",
    "InvalidTypeError",
    # Tokenizer
    "SourceReader",
    "Tokenizer",
    "Token",
    "TokenKind",
    "tokenize",
    # Symbols
    "SymbolTable",
    "SymbolInfo",
    "FunctionTable",
    "FunctionSignature",
    # Analyzer
    "Analyzer",
    "analyze",
    # Instructions
    "Instruction",
    "Operation",
    "resolve_labels",
    "format_listing",
]
