import pytest

from tracecfg import Jump, JumpKind, Plain, is_jump


def test_plain_describe_with_and_without_operand() -> None:
    assert Plain("INC").describe() == "INC"
    assert Plain("LDAC", "Op").describe() == "LDAC Op"


def test_jump_describe_uses_success_address() -> None:
    jump = Jump("JMP", 9, JumpKind.CONDITIONAL_TAKEN, 6)
    assert jump.describe() == "JMP 9"


def test_instructions_compare_by_value() -> None:
    assert Plain("INC") == Plain("INC")
    assert Jump("JMP", 9) == Jump("JMP", 9, JumpKind.UNCONDITIONAL, None)
    assert Jump("JMP", 9, JumpKind.CONDITIONAL_TAKEN, 6) != Jump(
        "JMP", 9, JumpKind.CONDITIONAL_NOT_TAKEN, 6
    )


@pytest.mark.parametrize(
    "kind, conditional",
    [
        (JumpKind.UNCONDITIONAL, False),
        (JumpKind.CONDITIONAL_TAKEN, True),
        (JumpKind.CONDITIONAL_NOT_TAKEN, True),
    ],
)
def test_jump_kind_conditional(kind: JumpKind, conditional: bool) -> None:
    assert kind.conditional is conditional


def test_is_jump() -> None:
    assert is_jump(Jump("JMP", 1))
    assert not is_jump(Plain("NOP"))
