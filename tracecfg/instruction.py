"""Instruction records fed into the control-flow graph."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class JumpKind(Enum):
    """How a traced jump transferred control.

    Conditional jumps are recorded as either taken or not taken depending on
    which path execution followed in the trace being fed in.
    """

    UNCONDITIONAL = "unconditional"
    CONDITIONAL_TAKEN = "conditional_taken"
    CONDITIONAL_NOT_TAKEN = "conditional_not_taken"

    @property
    def conditional(self) -> bool:
        return self is not JumpKind.UNCONDITIONAL


@dataclass(frozen=True)
class Plain:
    """A non-branching instruction."""

    mnemonic: str
    operand: Optional[str] = None

    def describe(self) -> str:
        if self.operand is None:
            return self.mnemonic
        return f"{self.mnemonic} {self.operand}"


@dataclass(frozen=True)
class Jump:
    """A control-transfer instruction.

    ``failure_address`` is the fallthrough target of a conditional jump and is
    ignored for unconditional ones.  It is not validated here: the graph reports
    a missing failure address when the jump is executed.
    """

    mnemonic: str
    success_address: int
    kind: JumpKind = JumpKind.UNCONDITIONAL
    failure_address: Optional[int] = None

    def describe(self) -> str:
        return f"{self.mnemonic} {self.success_address}"


Instruction = Union[Plain, Jump]


def is_jump(instruction: Instruction) -> bool:
    return isinstance(instruction, Jump)
