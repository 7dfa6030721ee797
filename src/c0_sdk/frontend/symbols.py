"""
Symbol Tables
=============

Scope management for the c0 analyzer.

SymbolTable
-----------
A stack of lexical scopes. Each scope maps a variable name to a
SymbolEntry recording whether the name is constant, whether it has been
assigned, and the storage slot it was given.

- A name may shadow a name from an outer scope.
- A name may not be declared twice in the same scope.
- Lookups search from the innermost scope outwards.
- Slots are handed out from one counter for the whole compilation unit
  and are never reused, even after their scope is exited.

FunctionTable
-------------
Function signatures, keyed by name. Calls are resolved against it. The
c0 standard library is registered up front:

| Function  | Params | Returns |
|-----------|--------|---------|
| getint    | 0      | int     |
| getdouble | 0      | double  |
| getchar   | 0      | int     |
| putint    | 1      | void    |
| putdouble | 1      | void    |
| putchar   | 1      | void    |
| putstr    | 1      | void    |
| putln     | 0      | void    |
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from c0_sdk.errors import Position
from c0_sdk.frontend.errors import DuplicateDeclarationError, NotDeclaredError

logger = logging.getLogger(__name__)


# =============================================================================
# Variable Symbols
# =============================================================================

@dataclass
class SymbolEntry:
    """
    Storage record for a declared variable.

    Owned by the SymbolTable; callers receive SymbolInfo snapshots.

    Attributes:
        is_constant: True for names declared with 'const'
        is_initialized: True once a value has been assigned
        slot: Storage slot index
    """
    is_constant: bool
    is_initialized: bool
    slot: int


@dataclass(frozen=True)
class SymbolInfo:
    """Read-only view of a SymbolEntry returned by lookups."""
    name: str
    is_constant: bool
    is_initialized: bool
    slot: int


class SymbolTable:
    """
    Stack of lexical scopes for variable declarations.

    The table starts with one global scope that is never popped.

    Example:
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=True)
        with table.scope():
            table.declare("x", is_constant=True, is_initialized=True)
            assert table.lookup("x").is_constant
        assert not table.lookup("x").is_constant
    """

    def __init__(self):
        self._scopes: list[dict[str, SymbolEntry]] = [{}]
        self._next_slot = 0

    @property
    def depth(self) -> int:
        """Number of active scopes (1 = only the global scope)."""
        return len(self._scopes)

    @property
    def slot_count(self) -> int:
        """Number of slots handed out so far."""
        return self._next_slot

    def enter_scope(self) -> None:
        """Push a new innermost scope."""
        self._scopes.append({})
        logger.debug(f"Entered scope (depth {self.depth})")

    def exit_scope(self) -> None:
        """
        Pop the innermost scope, discarding its declarations.

        Raises:
            RuntimeError: If only the global scope is active
        """
        if len(self._scopes) == 1:
            raise RuntimeError("cannot exit the global scope")
        discarded = self._scopes.pop()
        logger.debug(f"Exited scope (depth {self.depth + 1}, {len(discarded)} names dropped)")

    @contextmanager
    def scope(self) -> Iterator[None]:
        """Context manager pairing enter_scope() with exit_scope()."""
        self.enter_scope()
        try:
            yield
        finally:
            self.exit_scope()

    def is_declared_in_current_scope(self, name: str) -> bool:
        """Return True if name is declared in the innermost scope."""
        return name in self._scopes[-1]

    def declare(
        self,
        name: str,
        is_constant: bool,
        is_initialized: bool,
        position: Optional[Position] = None,
    ) -> int:
        """
        Declare a variable in the innermost scope.

        Args:
            name: Variable name
            is_constant: True for 'const' declarations
            is_initialized: True if the declaration carries a value
            position: Where the declaration appears (for errors)

        Returns:
            The slot assigned to the variable

        Raises:
            DuplicateDeclarationError: If name exists in the innermost scope
        """
        if self.is_declared_in_current_scope(name):
            raise DuplicateDeclarationError(name, position)

        slot = self._next_slot
        self._next_slot += 1
        self._scopes[-1][name] = SymbolEntry(
            is_constant=is_constant,
            is_initialized=is_initialized,
            slot=slot,
        )
        return slot

    def _resolve(self, name: str, position: Optional[Position]) -> SymbolEntry:
        for scope in reversed(self._scopes):
            entry = scope.get(name)
            if entry is not None:
                return entry
        raise NotDeclaredError(name, position)

    def lookup(self, name: str, position: Optional[Position] = None) -> SymbolInfo:
        """
        Resolve a name, innermost scope first.

        Raises:
            NotDeclaredError: If no active scope declares name
        """
        entry = self._resolve(name, position)
        return SymbolInfo(
            name=name,
            is_constant=entry.is_constant,
            is_initialized=entry.is_initialized,
            slot=entry.slot,
        )

    def mark_initialized(self, name: str, position: Optional[Position] = None) -> None:
        """
        Record that the nearest visible declaration of name has a value.

        Raises:
            NotDeclaredError: If no active scope declares name
        """
        self._resolve(name, position).is_initialized = True


# =============================================================================
# Function Symbols
# =============================================================================

@dataclass(frozen=True)
class FunctionSignature:
    """
    A callable function.

    Attributes:
        name: Function name
        func_id: Index used by CALL instructions
        param_count: Number of parameters
        returns_value: False for functions declared '-> void'
        entry_label: Label of the function's first instruction
                     (None for standard library functions)
        is_builtin: True for standard library functions
    """
    name: str
    func_id: int
    param_count: int
    returns_value: bool
    entry_label: Optional[int] = None
    is_builtin: bool = False


# name -> (param_count, returns_value)
STANDARD_LIBRARY: dict[str, tuple[int, bool]] = {
    "getint": (0, True),
    "getdouble": (0, True),
    "getchar": (0, True),
    "putint": (1, False),
    "putdouble": (1, False),
    "putchar": (1, False),
    "putstr": (1, False),
    "putln": (0, False),
}


class FunctionTable:
    """
    Registry of function signatures.

    Function ids are assigned in registration order, starting at 0 with
    the standard library when it is included.
    """

    def __init__(self, include_builtins: bool = True):
        self._functions: dict[str, FunctionSignature] = {}
        if include_builtins:
            for name, (param_count, returns_value) in STANDARD_LIBRARY.items():
                self._add(name, param_count, returns_value, None, is_builtin=True)

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[FunctionSignature]:
        return iter(self._functions.values())

    def __len__(self) -> int:
        return len(self._functions)

    def _add(
        self,
        name: str,
        param_count: int,
        returns_value: bool,
        entry_label: Optional[int],
        is_builtin: bool = False,
    ) -> FunctionSignature:
        signature = FunctionSignature(
            name=name,
            func_id=len(self._functions),
            param_count=param_count,
            returns_value=returns_value,
            entry_label=entry_label,
            is_builtin=is_builtin,
        )
        self._functions[name] = signature
        return signature

    def register(
        self,
        name: str,
        param_count: int,
        returns_value: bool,
        entry_label: Optional[int] = None,
        position: Optional[Position] = None,
    ) -> FunctionSignature:
        """
        Register a user-defined function.

        Raises:
            DuplicateDeclarationError: If the name is already registered
        """
        if name in self._functions:
            raise DuplicateDeclarationError(name, position)
        signature = self._add(name, param_count, returns_value, entry_label)
        logger.debug(f"Registered function '{name}' (id {signature.func_id}, {param_count} params)")
        return signature

    def resolve(self, name: str, position: Optional[Position] = None) -> FunctionSignature:
        """
        Look up a function by name.

        Raises:
            NotDeclaredError: If no function has that name
        """
        signature = self._functions.get(name)
        if signature is None:
            raise NotDeclaredError(name, position, what="function")
        return signature
