"""Errors raised while building a control-flow graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - imported for type checking only
    from .instruction import Jump


class CFGError(Exception):
    """Base class for every error raised by :meth:`ControlFlowGraph.execute`."""


class MissingBlockError(CFGError, IndexError):
    """An edge or cursor operation referenced a block that does not exist."""

    def __init__(self, index: int) -> None:
        super().__init__(f"basic block {index} does not exist")
        self.index = index


class MissingCurrentBlockError(CFGError, IndexError):
    """The cursor points outside of the block collection."""

    def __init__(self, index: int) -> None:
        super().__init__(f"current block {index} does not exist")
        self.index = index


class ExpectedFailureAddressError(CFGError, ValueError):
    """A conditional jump was executed without a failure address."""

    def __init__(self, program_counter: int, jump: "Jump") -> None:
        super().__init__(
            f"conditional jump {jump.mnemonic!r} at {program_counter} "
            f"({jump.kind.value}) has no failure address"
        )
        self.program_counter = program_counter
        self.jump = jump


class ProgramCounterRewindError(CFGError, ValueError):
    """The program counter moved below the start of the current block."""

    def __init__(self, program_counter: int, block_start: int) -> None:
        super().__init__(
            f"program counter {program_counter} precedes the current block "
            f"start {block_start}"
        )
        self.program_counter = program_counter
        self.block_start = block_start
