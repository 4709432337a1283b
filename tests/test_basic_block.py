from tracecfg import BasicBlock, Edge, Plain


def test_new_block_is_empty() -> None:
    block = BasicBlock(0x10)

    assert block.start == 0x10
    assert block.end == 0x10
    assert len(block) == 0
    assert list(block.instructions()) == []
    assert list(block.edges()) == []


def test_end_tracks_greatest_inserted_address() -> None:
    block = BasicBlock(2)
    for address in (3, 4, 7):
        assert block.add_instruction(address, Plain("NOP"))

    assert block.end == 7
    assert block.start == 2
    assert len(block) == 3


def test_reinserting_an_address_is_a_no_op() -> None:
    block = BasicBlock(2)
    block.add_instruction(3, Plain("INC"))
    block.add_instruction(5, Plain("DEC"))

    assert not block.add_instruction(3, Plain("CLAC"))

    assert block.instruction_at(3) == Plain("INC")
    assert block.end == 5
    assert len(block) == 2


def test_edges_are_deduplicated_by_target() -> None:
    block = BasicBlock(0)
    block.add_edge(1, False)
    block.add_edge(2, True)
    block.add_edge(1, True)
    block.add_edge(1, True)
    block.add_edge(2, False)

    assert list(block.edges()) == [Edge(1, 2), Edge(2, 1)]
    assert block.edge_to(1) == Edge(1, 2)
    assert block.edge_to(3) is None


def test_untraversed_edge_is_recorded_with_zero_count() -> None:
    block = BasicBlock(0)
    block.add_edge(4, False)

    edge = block.edge_to(4)
    assert edge is not None
    assert edge.count == 0
    assert not edge.traversed


def test_accessors_reflect_mutations_made_before_consumption() -> None:
    block = BasicBlock(0)
    instructions = block.instructions()
    edges = block.edges()
    block.add_instruction(1, Plain("INC"))
    block.add_edge(3, True)

    assert list(instructions) == [(1, Plain("INC"))]
    assert list(edges) == [Edge(3, 1)]
    assert list(block.instructions()) == [(1, Plain("INC"))]


def test_traversal_count() -> None:
    block = BasicBlock(0)
    block.add_edge(1, False)
    block.add_edge(2, True)
    block.add_edge(2, True)

    assert block.traversal_count(1) == 0
    assert block.traversal_count(2) == 2
    assert block.traversal_count(3) is None
