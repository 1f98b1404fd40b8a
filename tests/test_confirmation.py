from cmdpad.commands.confirmation import (
    ConfirmationPrompt, auto_confirm, create_confirmation_gate, deny_all,
)

from tests.helpers import make_spec


def scripted(*answers):
    remaining = list(answers)

    def answer(prompt):
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    return answer


def test_prompt_repeats_until_valid_answer(capsys):
    prompt = ConfirmationPrompt(scripted("what", "YES"))
    assert prompt(make_spec("git push"), "git push", "reason") is True
    assert "Invalid choice" in capsys.readouterr().out


def test_prompt_declines():
    assert ConfirmationPrompt(scripted("n"))(make_spec("x"), "x", "") is False


def test_end_of_input_declines():
    assert ConfirmationPrompt(scripted())(make_spec("x"), "x", "") is False


def test_gate_selection():
    assert create_confirmation_gate(assume_yes=True) is auto_confirm
    assert create_confirmation_gate(interactive=False) is deny_all
    assert isinstance(create_confirmation_gate(), ConfirmationPrompt)
