"""
c0 Front End Error Hierarchy
============================

This module defines the exceptions raised by the c0 tokenizer and
analyzer. All of them inherit from CompileError, which itself inherits
from the SDK-wide C0Error.

Every error carries a machine-checkable kind (an ErrorCode member) and
the source Position it was detected at. Analysis is fail-fast: the first
error aborts the compilation unit and reaches the caller unchanged.

Exception Hierarchy
-------------------
CompileError (base for all front end errors)
├── TokenizeError - malformed literal, bad escape, unknown character
└── AnalyzeError - grammar and semantic errors
    ├── ExpectedTokenError - a required token is missing
    ├── DuplicateDeclarationError - name declared twice in one scope
    ├── NotDeclaredError - reference to an unknown name
    ├── NotInitializedError - read before any assignment
    ├── AssignToConstantError - assignment to a 'const'
    ├── ArgumentCountError - wrong number of call arguments
    ├── InvalidBreakContinueError - break/continue outside a loop
    └── InvalidTypeError - unknown or misplaced type name

Error Message Format
--------------------
    main.c0:5:12: error: 'count' is not declared
        count = count + 1;
        ^
    hint: declare it first with 'let count: int;'
"""

from enum import Enum
from typing import Optional

from c0_sdk.errors import C0Error, Position


class ErrorCode(Enum):
    """Kinds of front end errors."""

    INVALID_INPUT = "InvalidInput"
    EXPECTED_TOKEN = "ExpectedToken"
    DUPLICATE_DECLARATION = "DuplicateDeclaration"
    NOT_DECLARED = "NotDeclared"
    NOT_INITIALIZED = "NotInitialized"
    ASSIGN_TO_CONSTANT = "AssignToConstant"
    ARGUMENT_COUNT = "ArgumentCount"
    INVALID_BREAK_CONTINUE = "InvalidBreakContinue"
    INVALID_TYPE = "InvalidType"
    INVALID_RETURN = "InvalidReturn"


# =============================================================================
# Base Front End Exception
# =============================================================================

class CompileError(C0Error):
    """
    Base exception for all front end errors.

    Attributes:
        kind: The ErrorCode classifying this error
        message: The error description
        position: Where in the source the error occurred
        filename: Name of the source file
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line
    """

    default_kind = ErrorCode.INVALID_INPUT

    def __init__(
        self,
        message: str,
        position: Optional[Position] = None,
        kind: Optional[ErrorCode] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        filename: str = "<input>",
    ):
        self.kind = kind or self.default_kind
        self.message = message
        self.position = position
        self.hint = hint
        self.source_line = source_line
        self.filename = filename
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

            main.c0:5:12: error: 'count' is not declared
                count = count + 1;
                ^
            hint: declare it first with 'let count: int;'
        """
        parts = []

        if self.position:
            parts.append(f"{self.filename}:{self.position}: error: {self.message}")
        else:
            parts.append(f"{self.filename}: error: {self.message}")

        if self.source_line is not None and self.position is not None:
            parts.append(f"    {self.source_line}")
            if self.position.column > 0:
                padding = " " * (4 + self.position.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_context(self, filename: str, source_line: Optional[str]) -> "CompileError":
        """
        Attach file name and source line to an error raised without them.

        The tokenizer and analyzer know positions but not always the file
        they are reading; the compiler driver fills those in here before
        re-raising.
        """
        self.filename = filename
        if self.source_line is None:
            self.source_line = source_line
        self.args = (self._format_message(),)
        return self


# =============================================================================
# Tokenizer Errors
# =============================================================================

class TokenizeError(CompileError):
    """
    Malformed input found while tokenizing.

    Examples:
        - '1.' (a fraction needs at least one digit)
        - '"a\\z"' (unknown escape sequence)
        - "'ab'" (more than one character in a char literal)
        - '!' on its own, '#', '@'
    """

    default_kind = ErrorCode.INVALID_INPUT


# =============================================================================
# Analyzer Errors
# =============================================================================

class AnalyzeError(CompileError):
    """
    Grammar or semantic error found by the analyzer.

    The analyzer is fail-fast: the first AnalyzeError aborts analysis
    of the whole compilation unit.
    """

    default_kind = ErrorCode.INVALID_INPUT


class ExpectedTokenError(AnalyzeError):
    """
    A required token is missing.

    Attributes:
        expected: The TokenKind that was required, or a description of
                  the construct that was required ("expression")
        found: The token that was found instead (None at end of input)
    """

    default_kind = ErrorCode.EXPECTED_TOKEN

    def __init__(
        self,
        expected,
        found,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
        description: Optional[str] = None,
    ):
        self.expected = expected
        self.found = found

        if found is None:
            found_text = "end of input"
        else:
            found_text = f"'{found.text}'"

        super().__init__(
            f"expected {description or expected}, found {found_text}",
            position=position,
            source_line=source_line,
        )


class DuplicateDeclarationError(AnalyzeError):
    """Identifier declared more than once in the same scope."""

    default_kind = ErrorCode.DUPLICATE_DECLARATION

    def __init__(
        self,
        identifier: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"redeclaration of '{identifier}'",
            position=position,
            hint="names may be reused only in an inner block",
            source_line=source_line,
        )


class NotDeclaredError(AnalyzeError):
    """Reference to a variable or function that is not visible."""

    default_kind = ErrorCode.NOT_DECLARED

    def __init__(
        self,
        identifier: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
        what: str = "variable",
    ):
        self.identifier = identifier
        super().__init__(
            f"{what} '{identifier}' is not declared",
            position=position,
            source_line=source_line,
        )


class NotInitializedError(AnalyzeError):
    """Variable read before any value was assigned to it."""

    default_kind = ErrorCode.NOT_INITIALIZED

    def __init__(
        self,
        identifier: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"'{identifier}' is used before it is initialized",
            position=position,
            hint=f"assign a value to '{identifier}' first",
            source_line=source_line,
        )


class AssignToConstantError(AnalyzeError):
    """Assignment to a name declared with 'const'."""

    default_kind = ErrorCode.ASSIGN_TO_CONSTANT

    def __init__(
        self,
        identifier: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.identifier = identifier
        super().__init__(
            f"cannot assign to constant '{identifier}'",
            position=position,
            hint="declare it with 'let' if it needs to change",
            source_line=source_line,
        )


class ArgumentCountError(AnalyzeError):
    """Wrong number of arguments in a function call."""

    default_kind = ErrorCode.ARGUMENT_COUNT

    def __init__(
        self,
        function_name: str,
        expected: int,
        actual: int,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.function_name = function_name
        self.expected = expected
        self.actual = actual

        word = "argument" if expected == 1 else "arguments"
        super().__init__(
            f"'{function_name}' expects {expected} {word}, got {actual}",
            position=position,
            source_line=source_line,
        )


class InvalidBreakContinueError(AnalyzeError):
    """'break' or 'continue' outside of a while loop."""

    default_kind = ErrorCode.INVALID_BREAK_CONTINUE

    def __init__(
        self,
        keyword: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
    ):
        self.keyword = keyword
        super().__init__(
            f"'{keyword}' statement not within a loop",
            position=position,
            source_line=source_line,
        )


class InvalidTypeError(AnalyzeError):
    """Unknown type name, or 'void' where a value type is required."""

    default_kind = ErrorCode.INVALID_TYPE

    def __init__(
        self,
        type_name: str,
        position: Optional[Position] = None,
        source_line: Optional[str] = None,
        allowed: tuple[str, ...] = ("int", "double"),
    ):
        self.type_name = type_name
        choices = ", ".join(f"'{name}'" for name in allowed)
        super().__init__(
            f"invalid type '{type_name}'",
            position=position,
            hint=f"expected one of {choices}",
            source_line=source_line,
        )
