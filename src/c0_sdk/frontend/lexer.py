"""
c0 Tokenizer
============

This module implements the tokenizer for the c0 teaching language.
It converts source text into a lazy, pull-based stream of tokens for
the analyzer.

Token Categories
----------------
- Keywords: fn, let, const, as, while, if, else, return, break, continue
  (matched case-insensitively)
- Identifiers: variable, function and type names
- Numbers: unsigned decimal integers and doubles (1.5, 2.0e-3, 6E10)
- Strings: "double quoted", escapes kept verbatim in the payload
- Characters: 'x', '\\n'
- Operators: + - * / = == != < > <= >= ->
- Delimiters: ( ) { } , : ;

Comments
--------
- Single-line: // comment (runs to the end of the line)

Escape Sequences
----------------
\\\\ (backslash), \\' (quote), \\" (double quote),
\\n (newline), \\r (return), \\t (tab)

Example Usage
-------------
>>> from c0_sdk.frontend.lexer import Tokenizer
>>> for token in Tokenizer('let x: int = 42;').tokenize():
...     print(token)
Token(LET, 'let', 1:1)
Token(IDENT, 'x', 1:5)
Token(COLON, ':', 1:6)
Token(IDENT, 'int', 1:8)
Token(ASSIGN, '=', 1:12)
Token(UINT_LITERAL, 42, 1:14)
Token(SEMICOLON, ';', 1:16)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional, Union

from c0_sdk.errors import Position
from c0_sdk.frontend.errors import TokenizeError
from c0_sdk.frontend.source import LINE_BREAK, SourceReader


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds for the c0 language.

    This is the public token vocabulary: intermediate scanning states
    (digits, escape sequences, raw string characters) never appear here.
    """

    # === Keywords ===
    FN = auto()             # fn
    LET = auto()            # let
    CONST = auto()          # const
    AS = auto()             # as
    WHILE = auto()          # while
    IF = auto()             # if
    ELSE = auto()           # else
    RETURN = auto()         # return
    BREAK = auto()          # break
    CONTINUE = auto()       # continue

    # === Literals ===
    UINT_LITERAL = auto()   # 42
    DOUBLE_LITERAL = auto() # 4.2e1
    STRING_LITERAL = auto() # "..."
    CHAR_LITERAL = auto()   # '.'

    # === Identifiers ===
    IDENT = auto()

    # === Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    MUL = auto()            # *
    DIV = auto()            # /
    ASSIGN = auto()         # =
    EQ = auto()             # ==
    NEQ = auto()            # !=
    LT = auto()             # <
    GT = auto()             # >
    LE = auto()             # <=
    GE = auto()             # >=

    # === Delimiters ===
    L_PAREN = auto()        # (
    R_PAREN = auto()        # )
    L_BRACE = auto()        # {
    R_BRACE = auto()        # }
    ARROW = auto()          # ->
    COMMA = auto()          # ,
    COLON = auto()          # :
    SEMICOLON = auto()      # ;


# =============================================================================
# Keyword and Escape Tables
# =============================================================================

KEYWORDS: dict[str, TokenKind] = {
    "fn": TokenKind.FN,
    "let": TokenKind.LET,
    "const": TokenKind.CONST,
    "as": TokenKind.AS,
    "while": TokenKind.WHILE,
    "if": TokenKind.IF,
    "else": TokenKind.ELSE,
    "return": TokenKind.RETURN,
    "break": TokenKind.BREAK,
    "continue": TokenKind.CONTINUE,
}

# Character after the backslash -> decoded character
ESCAPE_SEQUENCES: dict[str, str] = {
    "\\": "\\",
    "'": "'",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "*": TokenKind.MUL,
    "/": TokenKind.DIV,
    "(": TokenKind.L_PAREN,
    ")": TokenKind.R_PAREN,
    "{": TokenKind.L_BRACE,
    "}": TokenKind.R_BRACE,
    ",": TokenKind.COMMA,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
}

TokenValue = Union[int, float, str, None]

# Human-readable names used in "expected ..." diagnostics
TOKEN_DESCRIPTIONS: dict[TokenKind, str] = {
    **{kind: f"'{text}'" for text, kind in KEYWORDS.items()},
    **{kind: f"'{text}'" for text, kind in SINGLE_CHAR_TOKENS.items()},
    TokenKind.UINT_LITERAL: "integer literal",
    TokenKind.DOUBLE_LITERAL: "floating point literal",
    TokenKind.STRING_LITERAL: "string literal",
    TokenKind.CHAR_LITERAL: "character literal",
    TokenKind.IDENT: "identifier",
    TokenKind.MINUS: "'-'",
    TokenKind.ASSIGN: "'='",
    TokenKind.EQ: "'=='",
    TokenKind.NEQ: "'!='",
    TokenKind.LT: "'<'",
    TokenKind.GT: "'>'",
    TokenKind.LE: "'<='",
    TokenKind.GE: "'>='",
    TokenKind.ARROW: "'->'",
}


def describe(kind: TokenKind) -> str:
    """Return the diagnostic name of a token kind ("';'", "identifier")."""
    return TOKEN_DESCRIPTIONS[kind]


def decode_escapes(payload: str) -> str:
    """
    Decode the escape sequences kept verbatim in a string/char payload.

    >>> decode_escapes('a\\\\nb')
    'a\\nb'
    """
    chars = []
    i = 0
    while i < len(payload):
        char = payload[i]
        if char == "\\" and i + 1 < len(payload):
            chars.append(ESCAPE_SEQUENCES.get(payload[i + 1], payload[i + 1]))
            i += 2
        else:
            chars.append(char)
            i += 1
    return "".join(chars)


def _is_digit(char: str) -> bool:
    return len(char) == 1 and "0" <= char <= "9"


def _is_ident_start(char: str) -> bool:
    return char == "_" or char.isalpha()


def _is_ident_char(char: str) -> bool:
    return char == "_" or char.isalpha() or char.isdigit()


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from c0 source.

    Attributes:
        kind: The TokenKind classification
        value: Payload - int for UINT_LITERAL, float for DOUBLE_LITERAL,
               the raw text (escapes undecoded) for strings and chars,
               the matched text for identifiers, keywords and operators
        start: Position of the first character
        end: Position just past the last character
    """
    kind: TokenKind
    value: TokenValue
    start: Position
    end: Position

    def __repr__(self) -> str:
        """Format token for debugging output."""
        if isinstance(self.value, (int, float)):
            return f"Token({self.kind.name}, {self.value}, {self.start})"
        return f"Token({self.kind.name}, {self.value!r}, {self.start})"

    @property
    def text(self) -> str:
        """Source-like rendering of the token for diagnostics."""
        if self.kind == TokenKind.STRING_LITERAL:
            return f'"{self.value}"'
        if self.kind == TokenKind.CHAR_LITERAL:
            return f"'{self.value}'"
        return str(self.value)

    @property
    def decoded_value(self) -> TokenValue:
        """The payload with escape sequences decoded (strings and chars)."""
        if self.kind in (TokenKind.STRING_LITERAL, TokenKind.CHAR_LITERAL):
            return decode_escapes(self.value)
        return self.value

    def is_keyword(self) -> bool:
        """Return True if this token is one of the reserved words."""
        return self.kind in KEYWORDS.values()


# =============================================================================
# Tokenizer Implementation
# =============================================================================

class Tokenizer:
    """
    Pull-based tokenizer for c0 source.

    Each call to next_token() skips whitespace and comments and scans
    exactly one token; the tokenizer keeps no state between calls other
    than its character cursor. Lookahead is the analyzer's job.

    Usage:
        tokenizer = Tokenizer(source_text, "main.c0")
        while (token := tokenizer.next_token()) is not None:
            ...

    Attributes:
        reader: The underlying character cursor
        filename: Name of the source file (for error reporting)
        max_uint: Largest value accepted for an unsigned integer literal
    """

    def __init__(
        self,
        source: Union[str, SourceReader],
        filename: str = "<input>",
        integer_bits: int = 64,
    ):
        """
        Initialize the tokenizer.

        Args:
            source: Source text, or a SourceReader positioned at its start
            filename: Name of the source file (for error messages)
            integer_bits: Width of the target's unsigned integers

        Raises:
            ValueError: If integer_bits is less than 1
        """
        if isinstance(source, SourceReader):
            self.reader = source
        else:
            self.reader = SourceReader(source)
        self.filename = filename
        if integer_bits < 1:
            raise ValueError(f"integer_bits must be positive, got {integer_bits}")
        self.max_uint = (1 << integer_bits) - 1

    def next_token(self) -> Optional[Token]:
        """
        Scan the next token.

        Returns:
            The next Token, or None at end of input

        Raises:
            TokenizeError: If the input is malformed
        """
        self._skip_whitespace_and_comments()

        if self.reader.is_eof():
            return None

        char = self.reader.peek()

        if _is_digit(char):
            return self._scan_number()

        if _is_ident_start(char):
            return self._scan_identifier()

        if char == "'":
            return self._scan_char()

        if char == '"':
            return self._scan_string()

        return self._scan_operator()

    def tokenize(self) -> Iterator[Token]:
        """
        Generate every remaining token.

        Raises:
            TokenizeError: If the input is malformed
        """
        while (token := self.next_token()) is not None:
            yield token

    # =========================================================================
    # Helpers
    # =========================================================================

    def _make_token(self, kind: TokenKind, value: TokenValue, start: Position) -> Token:
        """Create a token that ends at the current cursor position."""
        return Token(kind=kind, value=value, start=start, end=self.reader.current_pos())

    def _error(
        self,
        message: str,
        position: Position,
        hint: Optional[str] = None,
    ) -> TokenizeError:
        """Create an InvalidInput error at the given position."""
        return TokenizeError(
            message,
            position,
            hint=hint,
            source_line=self.reader.line_text(position.line),
            filename=self.filename,
        )

    def _skip_whitespace_and_comments(self) -> None:
        """Skip whitespace and // comments."""
        reader = self.reader
        while not reader.is_eof():
            char = reader.peek()

            if char.isspace():
                reader.advance()
                continue

            # Single-line comment: // (unterminated at EOF is fine)
            if char == "/" and reader.peek(1) == "/":
                while not reader.is_eof() and reader.peek() not in ("\n", "\r"):
                    reader.advance()
                continue

            break

    def _scan_digits(self) -> list[str]:
        chars = []
        while _is_digit(self.reader.peek()):
            chars.append(self.reader.advance())
        return chars

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_number(self) -> Token:
        """
        Scan an unsigned integer or double literal.

        Grammar:
            digits ('.' digits)? ([eE] [+-]? digits)?

        A fraction or an exponent makes the literal a double.
        """
        reader = self.reader
        start = reader.current_pos()
        chars = self._scan_digits()
        is_double = False

        if reader.peek() == ".":
            chars.append(reader.advance())
            if not _is_digit(reader.peek()):
                raise self._error(
                    "expected digit after '.' in floating point literal",
                    reader.current_pos(),
                )
            chars.extend(self._scan_digits())
            is_double = True

        if reader.peek() in ("e", "E"):
            chars.append(reader.advance())
            if reader.peek() in ("+", "-"):
                chars.append(reader.advance())
            if not _is_digit(reader.peek()):
                raise self._error(
                    "expected digit in exponent of floating point literal",
                    reader.current_pos(),
                )
            chars.extend(self._scan_digits())
            is_double = True

        text = "".join(chars)
        if is_double:
            return self._make_token(TokenKind.DOUBLE_LITERAL, float(text), start)

        # Digit runs longer than the widest value never fit, and converting
        # them could exceed the interpreter's int conversion limit.
        digits = text.lstrip("0") or "0"
        if len(digits) > len(str(self.max_uint)) or int(digits) > self.max_uint:
            shown = text if len(text) <= 24 else text[:20] + "..."
            raise self._error(
                f"integer literal {shown} is out of range",
                start,
                hint=f"the largest unsigned integer is {self.max_uint}",
            )
        return self._make_token(TokenKind.UINT_LITERAL, int(digits), start)

    def _scan_identifier(self) -> Token:
        """Scan an identifier or keyword."""
        start = self.reader.current_pos()
        chars = []
        while _is_ident_char(self.reader.peek()):
            chars.append(self.reader.advance())

        name = "".join(chars)
        keyword = KEYWORDS.get(name.lower())
        if keyword is not None:
            return self._make_token(keyword, name, start)

        return self._make_token(TokenKind.IDENT, name, start)

    def _scan_escape(self) -> str:
        """
        Scan a backslash escape and return it verbatim (two characters).

        Raises:
            TokenizeError: At the backslash if the escape is unknown
        """
        backslash_pos = self.reader.current_pos()
        self.reader.advance()  # consume backslash

        char = self.reader.peek()
        if char == "" or char not in ESCAPE_SEQUENCES:
            raise self._error(
                "invalid escape sequence",
                backslash_pos,
                hint="valid escapes are \\\\ \\' \\\" \\n \\r \\t",
            )
        self.reader.advance()
        return "\\" + char

    def _scan_char(self) -> Token:
        """Scan a single-quoted character literal."""
        reader = self.reader
        start = reader.current_pos()
        reader.advance()  # consume opening '

        char = reader.peek()
        if char == "\\":
            payload = self._scan_escape()
        elif char == "" or char == "'":
            raise self._error(
                "empty character literal",
                reader.current_pos(),
                hint="character literals contain exactly one character",
            )
        else:
            payload = reader.advance()

        if reader.peek() != "'":
            raise self._error(
                "character literal too long or missing closing quote",
                reader.current_pos(),
                hint="character literals contain exactly one character",
            )
        reader.advance()  # consume closing '

        return self._make_token(TokenKind.CHAR_LITERAL, payload, start)

    def _scan_string(self) -> Token:
        """Scan a double-quoted string literal."""
        reader = self.reader
        start = reader.current_pos()
        reader.advance()  # consume opening "

        chars = []
        while True:
            char = reader.peek()

            if char == "":
                raise self._error(
                    "unterminated string literal",
                    reader.current_pos(),
                    hint="add closing '\"' to complete the string",
                )

            if char == '"':
                reader.advance()
                return self._make_token(TokenKind.STRING_LITERAL, "".join(chars), start)

            if char == "\\":
                chars.append(self._scan_escape())
            else:
                chars.append(reader.advance())

    def _scan_operator(self) -> Token:
        """
        Scan an operator or delimiter.

        Two-character operators are disambiguated with one character of
        lookahead: - ->, = ==, ! !=, < <=, > >=.
        """
        reader = self.reader
        start = reader.current_pos()
        char = reader.advance()

        if char == "-":
            if reader.peek() == ">":
                reader.advance()
                return self._make_token(TokenKind.ARROW, "->", start)
            return self._make_token(TokenKind.MINUS, "-", start)

        if char == "=":
            if reader.peek() == "=":
                reader.advance()
                return self._make_token(TokenKind.EQ, "==", start)
            return self._make_token(TokenKind.ASSIGN, "=", start)

        if char == "!":
            if reader.peek() == "=":
                reader.advance()
                return self._make_token(TokenKind.NEQ, "!=", start)
            raise self._error("'!' must be followed by '='", start)

        if char == "<":
            if reader.peek() == "=":
                reader.advance()
                return self._make_token(TokenKind.LE, "<=", start)
            return self._make_token(TokenKind.LT, "<", start)

        if char == ">":
            if reader.peek() == "=":
                reader.advance()
                return self._make_token(TokenKind.GE, ">=", start)
            return self._make_token(TokenKind.GT, ">", start)

        if char in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[char], char, start)

        raise self._error(f"invalid character '{char}' (0x{ord(char):02X})", start)


# =============================================================================
# Convenience Functions
# =============================================================================

def tokenize(source: str, filename: str = "<input>", integer_bits: int = 64) -> list[Token]:
    """Tokenize a complete source string into a list."""
    return list(Tokenizer(source, filename, integer_bits).tokenize())


def token_text(source: str, token: Token, first_line: int = 1) -> str:
    """
    Return the exact slice of source covered by a token.

    Args:
        source: The text the token was scanned from
        token: A token produced from that text
        first_line: Line number the text started at
    """
    line_starts = [0]
    line_starts.extend(match.end() for match in LINE_BREAK.finditer(source))

    def offset(position: Position) -> int:
        return line_starts[position.line - first_line] + position.column - 1

    return source[offset(token.start):offset(token.end)]
