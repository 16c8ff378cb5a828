# markrec/ui.py
# Presentation-only utilities for CLI output.
from __future__ import annotations

from typing import IO

from markrec.models import RecommendedItem, Result


def _writeln(text: str = "", *, file: IO[str]) -> None:
    file.write(text + "\n")


def render_item(item: RecommendedItem, *, file: IO[str]) -> None:
    _writeln(f"《{item.name}》", file=file)
    _writeln(f"Link: {item.link}", file=file)
    _writeln(f"Based on: {', '.join(item.source_names)}", file=file)
    _writeln(f"Rate: {item.rating:.1f}", file=file)
    _writeln(f"Recommended times: {item.relevance}", file=file)
    _writeln(file=file)


def render_result(result: Result, *, file: IO[str]) -> None:
    for item in result.items:
        render_item(item, file=file)
