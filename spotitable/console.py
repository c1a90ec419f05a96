from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

console = Console()

logger = logging.getLogger("spotitable")
logger.setLevel(logging.INFO)
handler = RichHandler(
    console=console,
    show_time=False,
    show_level=True,
    show_path=False,
    markup=True,
)
if not logger.handlers:
    logger.addHandler(handler)


def set_verbose(enabled: bool) -> None:
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


__all__ = ["console", "logger", "set_verbose"]
