# =============================================================================
# test_symbols.py - Symbol Table Unit Tests
# =============================================================================
# Tests for variable scopes and the function table.
#
# Test coverage includes:
#   - Declaration, lookup and shadowing across nested scopes
#   - Duplicate declarations within one scope
#   - Slot allocation (monotonic, never reused)
#   - Initialization tracking
#   - Standard library registration and call resolution
# =============================================================================

import pytest

from c0_sdk.errors import Position
from c0_sdk.frontend.errors import (
    DuplicateDeclarationError,
    ErrorCode,
    NotDeclaredError,
)
from c0_sdk.frontend.symbols import STANDARD_LIBRARY, FunctionTable, SymbolTable


# =============================================================================
# Scope Tests
# =============================================================================

class TestScopes:
    """Test declaration and lookup across scopes."""

    def test_declare_and_lookup(self):
        """A declared name resolves to its entry."""
        table = SymbolTable()
        slot = table.declare("x", is_constant=False, is_initialized=True)
        info = table.lookup("x")
        assert info.name == "x"
        assert info.slot == slot
        assert not info.is_constant
        assert info.is_initialized

    def test_duplicate_in_same_scope(self):
        """The same name cannot be declared twice in one scope."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=False)
        with pytest.raises(DuplicateDeclarationError) as exc_info:
            table.declare("x", is_constant=True, is_initialized=True, position=Position(3, 5))
        assert exc_info.value.kind == ErrorCode.DUPLICATE_DECLARATION
        assert exc_info.value.position == Position(3, 5)

    def test_redeclare_after_scope_exit(self):
        """A name is free again once its scope has been exited."""
        table = SymbolTable()
        table.enter_scope()
        table.declare("x", is_constant=False, is_initialized=False)
        table.exit_scope()
        table.enter_scope()
        table.declare("x", is_constant=False, is_initialized=False)
        assert table.lookup("x").slot == 1

    def test_shadowing(self):
        """An inner declaration hides the outer one until its scope exits."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=True)
        with table.scope():
            table.declare("x", is_constant=True, is_initialized=True)
            assert table.lookup("x").is_constant
            assert table.lookup("x").slot == 1
        assert not table.lookup("x").is_constant
        assert table.lookup("x").slot == 0

    def test_outer_names_visible(self):
        """Lookups search outwards through enclosing scopes."""
        table = SymbolTable()
        table.declare("outer", is_constant=False, is_initialized=True)
        with table.scope():
            with table.scope():
                assert table.lookup("outer").slot == 0

    def test_inner_names_invisible_after_exit(self):
        """Names declared in a block are not visible outside it."""
        table = SymbolTable()
        with table.scope():
            table.declare("x", is_constant=False, is_initialized=True)
        with pytest.raises(NotDeclaredError):
            table.lookup("x")

    def test_lookup_undeclared(self):
        """An unknown name raises NotDeclaredError at the given position."""
        table = SymbolTable()
        with pytest.raises(NotDeclaredError) as exc_info:
            table.lookup("ghost", Position(2, 7))
        assert exc_info.value.kind == ErrorCode.NOT_DECLARED
        assert exc_info.value.position == Position(2, 7)
        assert "'ghost'" in exc_info.value.message

    def test_cannot_exit_global_scope(self):
        """The global scope is never popped."""
        table = SymbolTable()
        with pytest.raises(RuntimeError):
            table.exit_scope()
        assert table.depth == 1

    def test_scope_context_exits_on_error(self):
        """scope() pops its scope even when the body raises."""
        table = SymbolTable()
        with pytest.raises(DuplicateDeclarationError):
            with table.scope():
                table.declare("x", is_constant=False, is_initialized=False)
                table.declare("x", is_constant=False, is_initialized=False)
        assert table.depth == 1

    def test_is_declared_in_current_scope(self):
        """Only the innermost scope is checked."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=False)
        assert table.is_declared_in_current_scope("x")
        with table.scope():
            assert not table.is_declared_in_current_scope("x")


# =============================================================================
# Slot and Initialization Tests
# =============================================================================

class TestSlots:
    """Test slot allocation and initialization tracking."""

    def test_slots_are_monotonic(self):
        """Slots are handed out in order and never reused."""
        table = SymbolTable()
        assert table.declare("a", is_constant=False, is_initialized=False) == 0
        with table.scope():
            assert table.declare("b", is_constant=False, is_initialized=False) == 1
        assert table.declare("c", is_constant=False, is_initialized=False) == 2
        assert table.slot_count == 3

    def test_mark_initialized(self):
        """mark_initialized() updates the visible declaration."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=False)
        assert not table.lookup("x").is_initialized
        table.mark_initialized("x")
        assert table.lookup("x").is_initialized

    def test_mark_initialized_targets_innermost(self):
        """Only the shadowing declaration is marked."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=False)
        with table.scope():
            table.declare("x", is_constant=False, is_initialized=False)
            table.mark_initialized("x")
            assert table.lookup("x").is_initialized
        assert not table.lookup("x").is_initialized

    def test_lookup_returns_snapshot(self):
        """Lookups return a copy that does not change afterwards."""
        table = SymbolTable()
        table.declare("x", is_constant=False, is_initialized=False)
        before = table.lookup("x")
        table.mark_initialized("x")
        assert not before.is_initialized

    def test_mark_undeclared(self):
        """Marking an unknown name raises NotDeclaredError."""
        with pytest.raises(NotDeclaredError):
            SymbolTable().mark_initialized("nope")


# =============================================================================
# Function Table Tests
# =============================================================================

class TestFunctionTable:
    """Test function registration and resolution."""

    def test_standard_library_registered(self):
        """The standard library is available by default."""
        table = FunctionTable()
        assert len(table) == len(STANDARD_LIBRARY)
        putint = table.resolve("putint")
        assert putint.param_count == 1
        assert not putint.returns_value
        assert putint.is_builtin
        assert table.resolve("getint").returns_value

    def test_without_builtins(self):
        """include_builtins=False starts with an empty table."""
        table = FunctionTable(include_builtins=False)
        assert len(table) == 0
        assert "putint" not in table

    def test_register_assigns_next_id(self):
        """User functions are numbered after the builtins."""
        table = FunctionTable()
        signature = table.register("main", 0, False, entry_label=3)
        assert signature.func_id == len(STANDARD_LIBRARY)
        assert signature.entry_label == 3
        assert not signature.is_builtin
        assert "main" in table

    def test_duplicate_function(self):
        """A function name can only be registered once."""
        table = FunctionTable()
        table.register("f", 0, True)
        with pytest.raises(DuplicateDeclarationError):
            table.register("f", 1, True, position=Position(4, 4))

    def test_builtin_names_are_taken(self):
        """User functions cannot reuse standard library names."""
        with pytest.raises(DuplicateDeclarationError):
            FunctionTable().register("putint", 1, False)

    def test_resolve_unknown(self):
        """Unknown callees raise NotDeclaredError naming a function."""
        with pytest.raises(NotDeclaredError) as exc_info:
            FunctionTable().resolve("missing", Position(1, 1))
        assert "function 'missing'" in exc_info.value.message

    def test_iteration_order(self):
        """Iteration follows function ids."""
        table = FunctionTable(include_builtins=False)
        table.register("a", 0, False)
        table.register("b", 2, True)
        assert [(f.name, f.func_id) for f in table] == [("a", 0), ("b", 1)]
