from __future__ import annotations

import logging

from rich.console import Console

LOGGER = logging.getLogger(__name__)


class Notifier:
    """Fire-and-forget user notices printed to the console."""

    def __init__(self, console: Console):
        self._console = console

    def notify(self, message: str) -> None:
        try:
            self._console.print(f"[bold cyan]{message}[/bold cyan]")
        except Exception as exc:  # noqa: BLE001
            LOGGER.debug("Unable to display notice %r: %s", message, exc)
