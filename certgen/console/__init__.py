"""User interaction adapters."""

from .prompts import Prompter, TerminalPrompter, AutoPrompter, ScriptedPrompter, ask_new_passphrase

__all__ = [
    "Prompter",
    "TerminalPrompter",
    "AutoPrompter",
    "ScriptedPrompter",
    "ask_new_passphrase",
]
