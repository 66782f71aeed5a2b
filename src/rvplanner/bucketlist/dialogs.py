"""
Dialog and notification collaborators.

The controller never talks to a terminal or a browser directly. It awaits a `Dialogs`
implementation (modal, cancelable: cancel is `False` / `None`) and reports outcomes to a
`Notifier` (the toast of the web UI, stderr/logging for the CLI).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Literal, Protocol

logger = logging.getLogger(__name__)

Level = Literal["success", "info", "warning", "error"]
FieldType = Literal["text", "textarea", "select", "number"]

# Console answer that empties a pre-filled field (a blank answer keeps it).
CLEAR = "-"


@dataclass(frozen=True)
class FormField:
    id: str
    label: str
    type: FieldType = "text"
    value: str = ""
    placeholder: str = ""
    # (value, label) pairs for `select` fields.
    options: list[tuple[str, str]] = field(default_factory=list)


class Dialogs(Protocol):
    async def confirm(self, message: str) -> bool: ...

    async def prompt_text(self, title: str, message: str, default: str = "") -> str | None: ...

    async def prompt_form(self, title: str, fields: list[FormField]) -> dict[str, str] | None: ...


class Notifier(Protocol):
    def notify(self, message: str, level: Level = "info") -> None: ...


_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingNotifier:
    """Routes user-facing notices to the `rvplanner.notify` logger."""

    def __init__(self, name: str = "rvplanner.notify"):
        self._logger = logging.getLogger(name)

    def notify(self, message: str, level: Level = "info") -> None:
        self._logger.log(_LOG_LEVELS.get(level, logging.INFO), message)


class ConsoleDialogs:
    """Terminal dialogs for the CLI. Ctrl-D (EOF) cancels any prompt.

    `assume_yes` answers every confirmation with yes (the CLI `--yes` flag). In forms a
    blank answer keeps the shown value and `-` clears it.
    """

    def __init__(
        self,
        *,
        assume_yes: bool = False,
        input_fn: Callable[[str], str] = input,
        output_fn: Callable[[str], None] = print,
    ):
        self._assume_yes = assume_yes
        self._input = input_fn
        self._output = output_fn

    async def _ask(self, prompt: str) -> str | None:
        try:
            return await asyncio.to_thread(self._input, prompt)
        except EOFError:
            self._output("")
            return None

    async def confirm(self, message: str) -> bool:
        if self._assume_yes:
            return True
        answer = await self._ask(f"{message} [y/N] ")
        return (answer or "").strip().lower() in {"y", "yes"}

    async def prompt_text(self, title: str, message: str, default: str = "") -> str | None:
        self._output(f"== {title} ==")
        suffix = f" [{default}]" if default else ""
        answer = await self._ask(f"{message}{suffix} ")
        if answer is None:
            return None
        return answer.strip() or default

    async def prompt_form(self, title: str, fields: list[FormField]) -> dict[str, str] | None:
        self._output(f"== {title} ==  (Ctrl-D cancels)")
        result: dict[str, str] = {}
        for f in fields:
            if f.type == "select":
                for i, (_value, label) in enumerate(f.options, start=1):
                    self._output(f"  {i}. {label}")
            hint = f" [{f.value}]" if f.value else (f" ({f.placeholder})" if f.placeholder else "")
            answer = await self._ask(f"{f.label}{hint}: ")
            if answer is None:
                return None
            answer = answer.strip()
            if f.type == "select" and answer.isdigit() and 1 <= int(answer) <= len(f.options):
                # The chosen option's value is kept even when it is "" (e.g. "Unfiled").
                result[f.id] = f.options[int(answer) - 1][0]
            elif answer == CLEAR:
                result[f.id] = ""
            else:
                result[f.id] = answer or f.value
        return result
