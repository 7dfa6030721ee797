"""
Stack Machine Instructions
==========================

The analyzer's output: an ordered, append-only list of instructions for
a stack-based virtual machine. The binary encoding and the VM itself
live outside this package.

Instruction Set
---------------
| Operation        | Operand          | Stack effect                  |
|------------------|------------------|-------------------------------|
| PUSH             | literal value    | -> value                      |
| LOAD             | slot             | -> value                      |
| STORE            | slot             | value ->                      |
| POP              |                  | value ->                      |
| NEG              |                  | a -> -a                       |
| ADD SUB MUL DIV  |                  | a b -> a op b                 |
| CMP_EQ ... CMP_GE|                  | a b -> bool                   |
| CAST             | type name        | a -> a converted              |
| LABEL            | label id         | (marks a jump target)         |
| JUMP             | label id         |                               |
| BRANCH_IF_FALSE  | label id         | cond ->                       |
| CALL             | (func_id, argc)  | args... -> result?            |
| RET              |                  | (returns from function)       |

Control flow refers to symbolic labels rather than instruction indices,
so an instruction never has to be patched after it is appended.
resolve_labels() computes the index of every label for an emitter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional


class Operation(Enum):
    """Stack machine operations."""

    PUSH = "push"
    LOAD = "load"
    STORE = "store"
    POP = "pop"

    NEG = "neg"
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"

    CMP_EQ = "cmp.eq"
    CMP_NE = "cmp.ne"
    CMP_LT = "cmp.lt"
    CMP_GT = "cmp.gt"
    CMP_LE = "cmp.le"
    CMP_GE = "cmp.ge"

    CAST = "cast"

    LABEL = "label"
    JUMP = "jump"
    BRANCH_IF_FALSE = "br.false"
    CALL = "call"
    RET = "ret"


@dataclass(frozen=True)
class Instruction:
    """
    One operation with an optional operand.

    Attributes:
        operation: The Operation to perform
        operand: Literal value, slot, label id, type name or
                 (func_id, argc) depending on the operation
    """
    operation: Operation
    operand: Optional[Any] = None

    def __str__(self) -> str:
        if self.operation == Operation.LABEL:
            return f"L{self.operand}:"
        if self.operand is None:
            return f"    {self.operation.value}"
        if self.operation in (Operation.JUMP, Operation.BRANCH_IF_FALSE):
            return f"    {self.operation.value:<10}L{self.operand}"
        if self.operation == Operation.CALL:
            func_id, argc = self.operand
            return f"    {self.operation.value:<10}{func_id}, {argc}"
        return f"    {self.operation.value:<10}{self.operand!r}"


def resolve_labels(instructions: Iterable[Instruction]) -> dict[int, int]:
    """
    Map every label id to the index of its LABEL instruction.

    Raises:
        ValueError: If a label is defined twice
    """
    labels: dict[int, int] = {}
    for index, instruction in enumerate(instructions):
        if instruction.operation != Operation.LABEL:
            continue
        if instruction.operand in labels:
            raise ValueError(f"label L{instruction.operand} defined twice")
        labels[instruction.operand] = index
    return labels


def format_listing(instructions: Iterable[Instruction]) -> str:
    """Render instructions as a human-readable listing, one per line."""
    return "\n".join(str(instruction) for instruction in instructions)
