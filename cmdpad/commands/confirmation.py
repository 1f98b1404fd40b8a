"""Interactive confirmation for commands flagged as risky."""

from typing import Callable, Optional

from .models import CommandSpec
from ..constants import CLR_YELLOW, CLR_BOLD_YELLOW, CLR_RED, CLR_RESET
from ..utils.logging import logger

# Signature shared by every confirmation gate: (spec, resolved command, reason) -> proceed?
ConfirmCallback = Callable[[CommandSpec, str, str], bool]


class ConfirmationPrompt:
    """Asks the user on the terminal before a risky command runs."""

    def __init__(self, input_func: Callable[[str], str] = input):
        self.input_func = input_func

    def __call__(self, spec: CommandSpec, command: str, reason: str) -> bool:
        print(f"{CLR_YELLOW}'{CLR_BOLD_YELLOW}{spec.name}{CLR_YELLOW}' will run:{CLR_RESET}")
        print(f"  {CLR_BOLD_YELLOW}{command}{CLR_RESET}")
        if reason:
            print(f"{CLR_YELLOW}{reason}{CLR_RESET}")

        while True:
            try:
                decision = self.input_func(f"{CLR_YELLOW}Run it? (y)es/(n)o: {CLR_RESET}").strip().lower()
            except EOFError:
                decision = 'n'

            if decision in ['y', 'yes', 'n', 'no']:
                break
            print(f"{CLR_RED}Invalid choice. Enter y or n.{CLR_RESET}")

        if decision.startswith('y'):
            logger.user(f"Confirmed '{spec.id}'.")
            return True
        logger.user(f"Declined '{spec.id}'.")
        return False


def auto_confirm(spec: CommandSpec, command: str, reason: str) -> bool:
    """Gate that approves everything (``--yes``)."""
    logger.debug(f"Auto-confirmed '{spec.id}': {reason}")
    return True


def deny_all(spec: CommandSpec, command: str, reason: str) -> bool:
    """Gate that refuses every risky command (non-interactive runs without ``--yes``)."""
    logger.warning(f"'{spec.id}' needs confirmation ({reason}); rerun with --yes to allow it.")
    return False


def create_confirmation_gate(assume_yes: bool = False, interactive: bool = True,
                             input_func: Optional[Callable[[str], str]] = None) -> ConfirmCallback:
    """Pick the confirmation gate for the current session."""
    if assume_yes:
        return auto_confirm
    if not interactive:
        return deny_all
    return ConfirmationPrompt(input_func or input)
