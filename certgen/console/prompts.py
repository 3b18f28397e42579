"""Confirmation and secret prompts.

Provisioning code never talks to the terminal directly. It asks a
``Prompter`` instead, so the same workflow runs against a real terminal,
a non-interactive default, or a scripted test double.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, List, Optional

import click


logger = logging.getLogger(__name__)


class Prompter(ABC):
    """Answers yes/no questions and secret prompts."""

    @abstractmethod
    def confirm(self, question: str) -> bool:
        """Return True if the user accepts ``question``."""

    @abstractmethod
    def ask_secret(self, prompt: str) -> str:
        """Return a secret string; empty string means no secret."""


class TerminalPrompter(Prompter):
    """Interactive prompter backed by click."""

    def confirm(self, question: str) -> bool:
        return click.confirm(question, default=False)

    def ask_secret(self, prompt: str) -> str:
        return click.prompt(prompt, default="", hide_input=True, show_default=False)


class AutoPrompter(Prompter):
    """Non-interactive prompter: fixed confirmation answer, never a passphrase."""

    def __init__(self, assume_yes: bool = True):
        self.assume_yes = assume_yes

    def confirm(self, question: str) -> bool:
        logger.info(f"{question} -> {'yes' if self.assume_yes else 'no'}")
        return self.assume_yes

    def ask_secret(self, prompt: str) -> str:
        return ""


class ScriptedPrompter(Prompter):
    """
    Prompter replaying queued answers.

    Confirmations fall back to ``default_confirm`` and secrets to the empty
    string once their queues run dry. Every question is recorded in
    ``questions`` in the order asked.
    """

    def __init__(
        self,
        confirmations: Iterable[bool] = (),
        secrets: Iterable[str] = (),
        default_confirm: bool = True
    ):
        self._confirmations = deque(confirmations)
        self._secrets = deque(secrets)
        self.default_confirm = default_confirm
        self.questions: List[str] = []
        self.secret_prompts: List[str] = []

    def confirm(self, question: str) -> bool:
        self.questions.append(question)
        if self._confirmations:
            return self._confirmations.popleft()
        return self.default_confirm

    def ask_secret(self, prompt: str) -> str:
        self.secret_prompts.append(prompt)
        if self._secrets:
            return self._secrets.popleft()
        return ""


def ask_new_passphrase(prompter: Prompter, path: str) -> Optional[str]:
    """
    Ask for a new key passphrase, twice.

    Args:
        prompter: Prompter to ask
        path: Key file the passphrase protects

    Returns:
        The passphrase, or None when the user chose no encryption
    """
    while True:
        passphrase = prompter.ask_secret(f"Passphrase for {path} (empty for none)")
        if not passphrase:
            return None

        confirmation = prompter.ask_secret(f"Repeat passphrase for {path}")
        if passphrase == confirmation:
            return passphrase

        logger.warning("Passphrases do not match, try again")
