"""Public package exports for the trace-driven CFG builder."""

from .cfg import BasicBlock, ControlFlowGraph, Edge, ReplayPolicy
from .errors import (
    CFGError,
    ExpectedFailureAddressError,
    MissingBlockError,
    MissingCurrentBlockError,
    ProgramCounterRewindError,
)
from .instruction import Instruction, Jump, JumpKind, Plain, is_jump

__all__ = [
    "BasicBlock",
    "ControlFlowGraph",
    "Edge",
    "ReplayPolicy",
    "CFGError",
    "ExpectedFailureAddressError",
    "MissingBlockError",
    "MissingCurrentBlockError",
    "ProgramCounterRewindError",
    "Instruction",
    "Jump",
    "JumpKind",
    "Plain",
    "is_jump",
]
