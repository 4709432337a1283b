"""Trace-driven control-flow graph construction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import (
    ExpectedFailureAddressError,
    MissingBlockError,
    MissingCurrentBlockError,
    ProgramCounterRewindError,
)
from .instruction import Instruction, Jump, JumpKind


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edge:
    """Snapshot of an outgoing edge handed to graph consumers."""

    target: int
    count: int

    @property
    def traversed(self) -> bool:
        return self.count > 0


class BasicBlock:
    """A straight-line run of instructions and its outgoing edges.

    Edges reference other blocks by their index in the owning graph.  Each
    target appears at most once; ``count`` tracks how many times the edge was
    observed as the branch actually taken, so an edge with a count of zero is
    a known but never-taken path.
    """

    def __init__(self, start: int) -> None:
        self._start = start
        self._end = start
        self._instructions: Dict[int, Instruction] = {}
        self._edges: List[List[int]] = []

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    def __len__(self) -> int:
        return len(self._instructions)

    def __contains__(self, address: object) -> bool:
        return address in self._instructions

    def __repr__(self) -> str:
        return (
            f"BasicBlock(start={self._start}, end={self._end}, "
            f"instructions={len(self._instructions)}, edges={len(self._edges)})"
        )

    def add_instruction(self, address: int, instruction: Instruction) -> bool:
        """Record ``instruction`` at ``address`` unless the address is taken.

        Returns ``True`` when the instruction was inserted.  An address that is
        already present keeps its instruction and ``end`` is left alone, which
        makes replaying the same address a no-op.
        """

        if address in self._instructions:
            return False
        self._instructions[address] = instruction
        self._end = max(self._end, address)
        return True

    def instruction_at(self, address: int) -> Optional[Instruction]:
        return self._instructions.get(address)

    def instructions(self) -> Iterator[Tuple[int, Instruction]]:
        yield from self._instructions.items()

    def add_edge(self, target: int, traversed: bool) -> None:
        increment = 1 if traversed else 0
        for edge in self._edges:
            if edge[0] == target:
                edge[1] += increment
                return
        self._edges.append([target, increment])

    def edge_to(self, target: int) -> Optional[Edge]:
        for edge_target, count in self._edges:
            if edge_target == target:
                return Edge(edge_target, count)
        return None

    def traversal_count(self, target: int) -> Optional[int]:
        """Return how often the edge to ``target`` was taken, ``None`` without an edge."""

        edge = self.edge_to(target)
        return None if edge is None else edge.count

    def edges(self) -> Iterator[Edge]:
        for target, count in self._edges:
            yield Edge(target, count)


class ReplayPolicy(Enum):
    """What happens to edge counts when an executed jump is fed again."""

    IDEMPOTENT = "idempotent"
    ACCUMULATE = "accumulate"


class ControlFlowGraph:
    """Fold a stream of traced instructions into basic blocks and edges.

    The graph starts with a single block at the entry point and a cursor on
    it.  Every instruction passed to :meth:`execute` is appended to the block
    under the cursor; jumps additionally resolve their target blocks (creating
    them on first reference), install the edges and move the cursor to the
    block control actually continued in.  Block indices are assigned in
    creation order and never change.

    ``replay_policy`` decides whether feeding an already recorded jump again
    counts as another traversal (:attr:`ReplayPolicy.ACCUMULATE`) or is ignored
    for edge bookkeeping (:attr:`ReplayPolicy.IDEMPOTENT`).  Either way the
    cursor follows the replayed jump so the instructions fed next land in the
    right block.
    """

    def __init__(
        self,
        entry_point: int,
        *,
        replay_policy: ReplayPolicy = ReplayPolicy.IDEMPOTENT,
    ) -> None:
        self._entry_point = entry_point
        self._replay_policy = replay_policy
        self._blocks: List[BasicBlock] = []
        self._index_by_start: Dict[int, int] = {}
        self._owners: Dict[Tuple[int, Instruction], int] = {}
        self._current = self._add_block(BasicBlock(entry_point))

    @classmethod
    def from_trace(
        cls,
        entry_point: int,
        trace: Iterable[Tuple[int, Instruction]],
        *,
        replay_policy: ReplayPolicy = ReplayPolicy.IDEMPOTENT,
    ) -> "ControlFlowGraph":
        """Build a graph by executing every ``(program_counter, instruction)`` pair."""

        graph = cls(entry_point, replay_policy=replay_policy)
        for program_counter, instruction in trace:
            graph.execute(program_counter, instruction)
        return graph

    @property
    def entry_point(self) -> int:
        return self._entry_point

    @property
    def replay_policy(self) -> ReplayPolicy:
        return self._replay_policy

    @property
    def current_block(self) -> int:
        return self._current

    @property
    def current(self) -> BasicBlock:
        return self._current_block()

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[BasicBlock]:
        return self.blocks()

    def blocks(self) -> Iterator[BasicBlock]:
        yield from self._blocks

    def block(self, index: int) -> BasicBlock:
        if not 0 <= index < len(self._blocks):
            raise MissingBlockError(index)
        return self._blocks[index]

    def block_at(self, address: int) -> Optional[int]:
        """Return the index of the block starting at ``address`` if there is one."""

        return self._index_by_start.get(address)

    def edge_count(self) -> int:
        return sum(1 for block in self._blocks for _ in block.edges())

    # ------------------------------------------------------------------
    # construction
    # ------------------------------------------------------------------
    def execute(self, program_counter: int, instruction: Instruction) -> None:
        """Feed the next traced instruction into the graph.

        An identical ``(program_counter, instruction)`` pair seen before is a
        replay: the cursor moves to the block that first recorded it and, for
        jumps, on to the block the jump leads to.  A failing jump keeps the
        instruction it already appended to the current block; only the control
        transfer is abandoned.
        """

        current = self._current_block()
        owner = self._owners.get((program_counter, instruction))

        if owner is not None:
            logger.debug("replaying %r at %d from block %d", instruction, program_counter, owner)
            self._current = owner
            if isinstance(instruction, Jump):
                install_edges = self._replay_policy is ReplayPolicy.ACCUMULATE
                self._transfer(program_counter, instruction, owner, install_edges=install_edges)
            return

        if program_counter < current.start:
            raise ProgramCounterRewindError(program_counter, current.start)

        self._owners[(program_counter, instruction)] = self._current
        if not current.add_instruction(program_counter, instruction):
            logger.warning(
                "address %d already holds %r, ignoring %r",
                program_counter,
                current.instruction_at(program_counter),
                instruction,
            )

        if isinstance(instruction, Jump):
            self._transfer(program_counter, instruction, self._current, install_edges=True)

    def add_edge(self, src_block: int, dest_block: int, traversed: bool) -> None:
        """Connect ``src_block`` to ``dest_block``, validating both indices."""

        self.block(dest_block)
        self.block(src_block).add_edge(dest_block, traversed)

    def query_block_or_create(self, address: int) -> int:
        """Return the index of the block starting at ``address``, creating it if needed."""

        index = self._index_by_start.get(address)
        if index is None:
            index = self._add_block(BasicBlock(address))
            logger.debug("created block %d at %d", index, address)
        return index

    def _transfer(
        self,
        program_counter: int,
        jump: Jump,
        source: int,
        *,
        install_edges: bool,
    ) -> None:
        if not jump.kind.conditional:
            target = self.query_block_or_create(jump.success_address)
            if install_edges:
                self.add_edge(source, target, True)
            self._current = target
            return

        if jump.failure_address is None:
            raise ExpectedFailureAddressError(program_counter, jump)

        taken = jump.kind is JumpKind.CONDITIONAL_TAKEN
        failure = self.query_block_or_create(jump.failure_address)
        if install_edges:
            self.add_edge(source, failure, not taken)
        success = self.query_block_or_create(jump.success_address)
        if install_edges:
            self.add_edge(source, success, taken)
        self._current = success if taken else failure

    def _add_block(self, block: BasicBlock) -> int:
        self._blocks.append(block)
        index = len(self._blocks) - 1
        self._index_by_start.setdefault(block.start, index)
        return index

    def _current_block(self) -> BasicBlock:
        if not 0 <= self._current < len(self._blocks):
            raise MissingCurrentBlockError(self._current)
        return self._blocks[self._current]

    # ------------------------------------------------------------------
    # rendering
    # ------------------------------------------------------------------
    def to_text(self) -> str:
        lines: List[str] = [
            f"cfg entry=0x{self._entry_point:04X} blocks={len(self._blocks)} current={self._current}"
        ]
        for index, block in enumerate(self._blocks):
            edges = ", ".join(f"{edge.target}:{edge.count}" for edge in block.edges())
            lines.append(
                f"  block {index} 0x{block.start:04X}..0x{block.end:04X}"
                f" size={len(block)} edges=[{edges}]"
            )
            for address, instruction in sorted(block.instructions(), key=lambda item: item[0]):
                lines.append(f"    0x{address:04X}: {instruction.describe()}")
        return "\n".join(lines) + "\n"
