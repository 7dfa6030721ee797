"""
c0 Analyzer
===========

This module implements the single-pass recursive descent analyzer for
c0. It pulls tokens from a Tokenizer one at a time, checks the program
against the grammar and the scoping rules, and appends stack machine
instructions as it goes. No syntax tree is built.

Grammar (EBNF)
--------------
program     ::= item*
item        ::= function | stmt
function    ::= 'fn' IDENT '(' params? ')' '->' TYPE block
params      ::= param (',' param)*
param       ::= 'const'? IDENT ':' TYPE

stmt        ::= if_stmt | while_stmt | 'break' ';' | 'continue' ';'
              | 'return' expr? ';' | decl_stmt | block | expr ';' | ';'
if_stmt     ::= 'if' expr block ('else' 'if' expr block)* ('else' block)?
while_stmt  ::= 'while' expr block
decl_stmt   ::= 'let' IDENT ':' TYPE ('=' expr)? ';'
              | 'const' IDENT ':' TYPE '=' expr ';'
block       ::= '{' stmt* '}'

Expression Precedence (lowest to highest)
-----------------------------------------
1. assignment     IDENT '=' expr (right-associative, statement level)
2. comparison     == != < > <= >=
3. additive       + -
4. multiplicative * /
5. cast           expr 'as' TYPE
6. unary          -
7. primary        literal, IDENT, call, '(' expr ')'

Binary operators are left-associative and parsed by precedence
climbing. An assignment leaves nothing on the stack, so it can only
stand on its own as an expression statement.

Example Usage
-------------
>>> from c0_sdk.frontend.lexer import Tokenizer
>>> from c0_sdk.frontend.parser import Analyzer
>>> analyzer = Analyzer(Tokenizer('let x: int = 1 + 2;'))
>>> for instruction in analyzer.analyze():
...     print(instruction)
    push      1
    push      2
    add
    store     0
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Union

from c0_sdk.errors import Position
from c0_sdk.frontend.errors import (
    AnalyzeError,
    ArgumentCountError,
    AssignToConstantError,
    CompileError,
    ErrorCode,
    ExpectedTokenError,
    InvalidBreakContinueError,
    InvalidTypeError,
    NotInitializedError,
)
from c0_sdk.frontend.instructions import Instruction, Operation
from c0_sdk.frontend.lexer import Token, TokenKind, Tokenizer, describe
from c0_sdk.frontend.symbols import FunctionSignature, FunctionTable, SymbolTable

logger = logging.getLogger(__name__)


# Binary operator -> (precedence, operation)
BINARY_OPERATORS: dict[TokenKind, tuple[int, Operation]] = {
    TokenKind.EQ: (1, Operation.CMP_EQ),
    TokenKind.NEQ: (1, Operation.CMP_NE),
    TokenKind.LT: (1, Operation.CMP_LT),
    TokenKind.GT: (1, Operation.CMP_GT),
    TokenKind.LE: (1, Operation.CMP_LE),
    TokenKind.GE: (1, Operation.CMP_GE),
    TokenKind.PLUS: (2, Operation.ADD),
    TokenKind.MINUS: (2, Operation.SUB),
    TokenKind.MUL: (3, Operation.MUL),
    TokenKind.DIV: (3, Operation.DIV),
}

VALUE_TYPES = ("int", "double")
RETURN_TYPES = ("int", "double", "void")

# Deepest nesting of blocks, expressions and unary minus, kept well under
# the interpreter's recursion limit
MAX_NESTING_DEPTH = 64

_UNREAD = object()


class Analyzer:
    """
    Recursive descent analyzer and code generator for c0.

    Usage:
        analyzer = Analyzer(Tokenizer(source, "main.c0"))
        instructions = analyzer.analyze()

    Attributes:
        tokenizer: The token source
        symbols: Variable scopes and slot allocation
        functions: Registered function signatures
        instructions: The emitted instruction sequence
        token_count: Number of tokens consumed so far
        strict_initialization: Reject reads of unassigned variables
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        strict_initialization: bool = True,
        include_builtins: bool = True,
    ):
        self.tokenizer = tokenizer
        self.strict_initialization = strict_initialization
        self.symbols = SymbolTable()
        self.functions = FunctionTable(include_builtins=include_builtins)
        self.instructions: list[Instruction] = []
        self.token_count = 0

        self._lookahead = _UNREAD
        self._next_label = 0
        # (continue label, break label) for each enclosing while loop
        self._loops: list[tuple[int, int]] = []
        self._current_function: Optional[FunctionSignature] = None
        self._depth = 0

    # =========================================================================
    # Public Interface
    # =========================================================================

    def analyze(self) -> list[Instruction]:
        """
        Analyze the whole token stream.

        Returns:
            The emitted instructions

        Raises:
            TokenizeError: If the tokenizer rejects the input
            AnalyzeError: On the first grammar or semantic error
        """
        logger.debug(f"Analyzing {self.tokenizer.filename}")
        try:
            while self._peek() is not None:
                self._analyze_item()
        except CompileError as error:
            if error.position is not None and error.source_line is None:
                error.with_context(
                    self.tokenizer.filename,
                    self.tokenizer.reader.line_text(error.position.line),
                )
            raise

        logger.debug(
            f"Analysis complete: {len(self.instructions)} instructions, "
            f"{self.symbols.slot_count} slots, {self.token_count} tokens"
        )
        return self.instructions

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _peek(self) -> Optional[Token]:
        """Look at the next token without consuming it (None at EOF)."""
        if self._lookahead is _UNREAD:
            self._lookahead = self.tokenizer.next_token()
        return self._lookahead

    def _next(self) -> Optional[Token]:
        """Consume and return the next token."""
        token = self._peek()
        self._lookahead = _UNREAD
        if token is not None:
            self.token_count += 1
        return token

    def _check(self, *kinds: TokenKind) -> bool:
        """Check if the next token is one of the given kinds."""
        token = self._peek()
        return token is not None and token.kind in kinds

    def _next_if(self, *kinds: TokenKind) -> Optional[Token]:
        """
        Consume the next token if it is one of the given kinds.

        Returns:
            The consumed token, or None if no match
        """
        if self._check(*kinds):
            return self._next()
        return None

    def _expect(self, kind: TokenKind) -> Token:
        """
        Consume a token of the given kind.

        Raises:
            ExpectedTokenError: If the next token is anything else
        """
        if self._check(kind):
            return self._next()
        raise self._expected(kind, describe(kind))

    def _expected(self, expected, description: str) -> ExpectedTokenError:
        """Create an ExpectedTokenError for the next token."""
        found = self._peek()
        return ExpectedTokenError(
            expected,
            found,
            position=self._position_of(found),
            description=description,
        )

    def _position_of(self, token: Optional[Token]) -> Position:
        if token is None:
            return self.tokenizer.reader.current_pos()
        return token.start

    @contextmanager
    def _nested(self, position: Position) -> Iterator[None]:
        """Track one level of nesting, failing past MAX_NESTING_DEPTH."""
        if self._depth >= MAX_NESTING_DEPTH:
            raise AnalyzeError(
                "program is nested too deeply",
                position,
                hint=f"at most {MAX_NESTING_DEPTH} levels of blocks and parentheses are supported",
            )
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    # =========================================================================
    # Emission
    # =========================================================================

    def _emit(self, operation: Operation, operand=None) -> None:
        self.instructions.append(Instruction(operation, operand))

    def _new_label(self) -> int:
        label = self._next_label
        self._next_label += 1
        return label

    # =========================================================================
    # Top Level
    # =========================================================================

    def _analyze_item(self) -> None:
        """Parse a function definition or a top-level statement."""
        if self._check(TokenKind.FN):
            self._analyze_function()
        else:
            self._analyze_statement()

    def _analyze_type(self, allowed: tuple[str, ...] = VALUE_TYPES) -> str:
        """Parse a type name and check it is one of the allowed types."""
        token = self._expect(TokenKind.IDENT)
        if token.value not in allowed:
            raise InvalidTypeError(token.value, token.start, allowed=allowed)
        return token.value

    def _analyze_param(self) -> tuple[Token, bool]:
        is_constant = self._next_if(TokenKind.CONST) is not None
        name_token = self._expect(TokenKind.IDENT)
        self._expect(TokenKind.COLON)
        self._analyze_type()
        return name_token, is_constant

    def _analyze_function(self) -> None:
        """
        Parse a function definition.

        Emits:
            jump   L_skip
            L_entry:
            store  <param slots, last first>
            <body>
            ret
            L_skip:

        The function is registered before its body so it can call itself.
        """
        self._expect(TokenKind.FN)
        name_token = self._expect(TokenKind.IDENT)

        self._expect(TokenKind.L_PAREN)
        params: list[tuple[Token, bool]] = []
        if not self._check(TokenKind.R_PAREN):
            params.append(self._analyze_param())
            while self._next_if(TokenKind.COMMA):
                params.append(self._analyze_param())
        self._expect(TokenKind.R_PAREN)

        self._expect(TokenKind.ARROW)
        return_type = self._analyze_type(RETURN_TYPES)

        skip_label = self._new_label()
        entry_label = self._new_label()
        signature = self.functions.register(
            name_token.value,
            len(params),
            return_type != "void",
            entry_label,
            name_token.start,
        )

        self._emit(Operation.JUMP, skip_label)
        self._emit(Operation.LABEL, entry_label)

        enclosing = self._current_function
        self._current_function = signature
        try:
            with self.symbols.scope():
                slots = [
                    self.symbols.declare(
                        token.value,
                        is_constant=is_constant,
                        is_initialized=True,
                        position=token.start,
                    )
                    for token, is_constant in params
                ]
                # Arguments arrive with the last one on top of the stack
                for slot in reversed(slots):
                    self._emit(Operation.STORE, slot)

                self._analyze_block()
        finally:
            self._current_function = enclosing

        self._emit(Operation.RET)
        self._emit(Operation.LABEL, skip_label)
        logger.debug(
            f"Analyzed function '{signature.name}' "
            f"({signature.param_count} params, returns {return_type})"
        )

    # =========================================================================
    # Statements
    # =========================================================================

    def _analyze_statement(self) -> None:
        token = self._peek()
        if token is None:
            raise self._expected("statement", "statement")

        kind = token.kind
        if kind == TokenKind.IF:
            self._analyze_if()
        elif kind == TokenKind.WHILE:
            self._analyze_while()
        elif kind in (TokenKind.BREAK, TokenKind.CONTINUE):
            self._analyze_break_continue()
        elif kind == TokenKind.RETURN:
            self._analyze_return()
        elif kind in (TokenKind.LET, TokenKind.CONST):
            self._analyze_decl_stmt()
        elif kind == TokenKind.L_BRACE:
            self._analyze_block()
        elif kind == TokenKind.SEMICOLON:
            self._next()
        else:
            self._analyze_expression_statement()

    def _analyze_block(self) -> None:
        """Parse '{' stmt* '}' in a new scope."""
        brace = self._expect(TokenKind.L_BRACE)
        with self._nested(brace.start), self.symbols.scope():
            while not self._check(TokenKind.R_BRACE):
                if self._peek() is None:
                    raise self._expected(TokenKind.R_BRACE, describe(TokenKind.R_BRACE))
                self._analyze_statement()
        self._expect(TokenKind.R_BRACE)

    def _analyze_decl_stmt(self) -> None:
        """
        Parse a 'let' or 'const' declaration.

        The name is declared before its initializer is analyzed and is
        only marked initialized afterwards, so 'let x: int = x;' reads
        an uninitialized variable.
        """
        is_constant = self._next_if(TokenKind.CONST) is not None
        if not is_constant:
            self._expect(TokenKind.LET)

        name_token = self._expect(TokenKind.IDENT)
        self._expect(TokenKind.COLON)
        self._analyze_type()

        name = name_token.value
        slot = self.symbols.declare(
            name,
            is_constant=is_constant,
            is_initialized=False,
            position=name_token.start,
        )

        # 'const' requires an initializer
        if is_constant:
            self._expect(TokenKind.ASSIGN)
            has_initializer = True
        else:
            has_initializer = self._next_if(TokenKind.ASSIGN) is not None

        if has_initializer:
            self._analyze_value()
            self._emit(Operation.STORE, slot)
            self.symbols.mark_initialized(name, name_token.start)

        self._expect(TokenKind.SEMICOLON)

    def _analyze_if(self) -> None:
        """
        Parse an if / else if / else chain.

        Emits, for each conditional branch:
            <cond>
            br.false L_next
            <block>
            jump     L_end
            L_next:
        followed by the optional else block and L_end.
        """
        self._expect(TokenKind.IF)
        end_label = self._new_label()
        self._analyze_conditional_branch(end_label)

        while self._next_if(TokenKind.ELSE):
            if self._next_if(TokenKind.IF):
                self._analyze_conditional_branch(end_label)
            else:
                self._analyze_block()
                break

        self._emit(Operation.LABEL, end_label)

    def _analyze_conditional_branch(self, end_label: int) -> None:
        next_label = self._new_label()
        self._analyze_value()
        self._emit(Operation.BRANCH_IF_FALSE, next_label)
        self._analyze_block()
        self._emit(Operation.JUMP, end_label)
        self._emit(Operation.LABEL, next_label)

    def _analyze_while(self) -> None:
        """
        Parse a while loop.

        Emits:
            L_start:
            <cond>
            br.false L_end
            <block>
            jump     L_start
            L_end:
        """
        self._expect(TokenKind.WHILE)
        start_label = self._new_label()
        end_label = self._new_label()

        self._emit(Operation.LABEL, start_label)
        self._analyze_value()
        self._emit(Operation.BRANCH_IF_FALSE, end_label)

        self._loops.append((start_label, end_label))
        try:
            self._analyze_block()
        finally:
            self._loops.pop()

        self._emit(Operation.JUMP, start_label)
        self._emit(Operation.LABEL, end_label)

    def _analyze_break_continue(self) -> None:
        token = self._next()
        if not self._loops:
            raise InvalidBreakContinueError(token.text, token.start)

        continue_label, break_label = self._loops[-1]
        if token.kind == TokenKind.BREAK:
            self._emit(Operation.JUMP, break_label)
        else:
            self._emit(Operation.JUMP, continue_label)
        self._expect(TokenKind.SEMICOLON)

    def _analyze_return(self) -> None:
        token = self._expect(TokenKind.RETURN)
        function = self._current_function
        if function is None:
            raise AnalyzeError(
                "'return' outside of a function",
                token.start,
                kind=ErrorCode.INVALID_RETURN,
            )

        if self._check(TokenKind.SEMICOLON):
            if function.returns_value:
                raise AnalyzeError(
                    f"'{function.name}' must return a value",
                    token.start,
                    kind=ErrorCode.INVALID_RETURN,
                )
        else:
            if not function.returns_value:
                raise AnalyzeError(
                    f"'{function.name}' is declared '-> void' and cannot return a value",
                    token.start,
                    kind=ErrorCode.INVALID_RETURN,
                )
            self._analyze_value()

        self._expect(TokenKind.SEMICOLON)
        self._emit(Operation.RET)

    def _analyze_expression_statement(self) -> None:
        start = self._position_of(self._peek())
        leaves_value = self._analyze_expression(allow_assignment=True)
        if self._check(TokenKind.ASSIGN):
            raise AnalyzeError("only a variable name can be assigned to", start)
        self._expect(TokenKind.SEMICOLON)
        if leaves_value:
            self._emit(Operation.POP)

    # =========================================================================
    # Expressions
    #
    # Each method returns True if the code it emitted leaves a value on
    # the stack. Assignments and calls to void functions leave nothing.
    # =========================================================================

    def _analyze_expression(self, allow_assignment: bool = False) -> bool:
        with self._nested(self._position_of(self._peek())):
            return self._analyze_binary(1, allow_assignment)

    def _analyze_value(self) -> None:
        """Analyze an expression that must produce a value."""
        position = self._position_of(self._peek())
        self._require_value(self._analyze_expression(), position)

    def _require_value(self, leaves_value: bool, position: Position) -> None:
        if not leaves_value:
            raise AnalyzeError(
                "expression does not produce a value",
                position,
                kind=ErrorCode.INVALID_TYPE,
            )

    def _analyze_binary(self, min_precedence: int, allow_assignment: bool = False) -> bool:
        """Parse binary operators of at least min_precedence, left to right."""
        start = self._position_of(self._peek())
        leaves_value = self._analyze_cast(allow_assignment)

        while True:
            token = self._peek()
            if token is None or token.kind not in BINARY_OPERATORS:
                break
            precedence, operation = BINARY_OPERATORS[token.kind]
            if precedence < min_precedence:
                break

            self._next()
            self._require_value(leaves_value, start)
            right_start = self._position_of(self._peek())
            self._require_value(self._analyze_binary(precedence + 1), right_start)
            self._emit(operation)
            leaves_value = True

        return leaves_value

    def _analyze_cast(self, allow_assignment: bool = False) -> bool:
        start = self._position_of(self._peek())
        leaves_value = self._analyze_unary(allow_assignment)

        while self._next_if(TokenKind.AS):
            self._require_value(leaves_value, start)
            self._emit(Operation.CAST, self._analyze_type())

        return leaves_value

    def _analyze_unary(self, allow_assignment: bool = False) -> bool:
        minus = self._next_if(TokenKind.MINUS)
        if minus is None:
            return self._analyze_primary(allow_assignment)

        operand_start = self._position_of(self._peek())
        with self._nested(minus.start):
            self._require_value(self._analyze_unary(), operand_start)
        self._emit(Operation.NEG)
        return True

    def _analyze_primary(self, allow_assignment: bool = False) -> bool:
        token = self._peek()
        if token is None:
            raise self._expected("expression", "expression")

        kind = token.kind
        if kind in (TokenKind.UINT_LITERAL, TokenKind.DOUBLE_LITERAL):
            self._next()
            self._emit(Operation.PUSH, token.value)
            return True

        if kind == TokenKind.STRING_LITERAL:
            self._next()
            self._emit(Operation.PUSH, token.decoded_value)
            return True

        if kind == TokenKind.CHAR_LITERAL:
            self._next()
            self._emit(Operation.PUSH, ord(token.decoded_value))
            return True

        if kind == TokenKind.IDENT:
            self._next()
            return self._analyze_identifier(token, allow_assignment)

        if kind == TokenKind.L_PAREN:
            self._next()
            leaves_value = self._analyze_expression()
            self._expect(TokenKind.R_PAREN)
            return leaves_value

        raise self._expected("expression", "expression")

    def _analyze_identifier(self, token: Token, allow_assignment: bool) -> bool:
        """Analyze a call, an assignment or a variable read."""
        name = token.value

        if self._check(TokenKind.L_PAREN):
            return self._analyze_call(token)

        if allow_assignment and self._next_if(TokenKind.ASSIGN):
            symbol = self.symbols.lookup(name, token.start)
            if symbol.is_constant:
                raise AssignToConstantError(name, token.start)
            self._analyze_value()
            self._emit(Operation.STORE, symbol.slot)
            self.symbols.mark_initialized(name, token.start)
            return False

        if self._check(TokenKind.ASSIGN):
            raise AnalyzeError(
                "assignment is not an expression",
                self._peek().start,
                hint=f"assign to '{name}' in a statement of its own",
            )

        symbol = self.symbols.lookup(name, token.start)
        if self.strict_initialization and not symbol.is_initialized:
            raise NotInitializedError(name, token.start)
        self._emit(Operation.LOAD, symbol.slot)
        return True

    def _analyze_call(self, name_token: Token) -> bool:
        """
        Analyze a function call.

        Emits the arguments left to right, then:
            call   func_id, argc
        """
        signature = self.functions.resolve(name_token.value, name_token.start)

        self._expect(TokenKind.L_PAREN)
        argc = 0
        if not self._check(TokenKind.R_PAREN):
            self._analyze_value()
            argc += 1
            while self._next_if(TokenKind.COMMA):
                self._analyze_value()
                argc += 1
        self._expect(TokenKind.R_PAREN)

        if argc != signature.param_count:
            raise ArgumentCountError(
                signature.name, signature.param_count, argc, name_token.start
            )

        self._emit(Operation.CALL, (signature.func_id, argc))
        return signature.returns_value


# =============================================================================
# Convenience Functions
# =============================================================================

def analyze(
    source: Union[str, Tokenizer],
    filename: str = "<input>",
    strict_initialization: bool = True,
    include_builtins: bool = True,
) -> list[Instruction]:
    """
    Analyze c0 source text (or an existing Tokenizer) into instructions.

    Raises:
        TokenizeError: If the tokenizer rejects the input
        AnalyzeError: On the first grammar or semantic error
    """
    tokenizer = source if isinstance(source, Tokenizer) else Tokenizer(source, filename)
    analyzer = Analyzer(
        tokenizer,
        strict_initialization=strict_initialization,
        include_builtins=include_builtins,
    )
    return analyzer.analyze()
