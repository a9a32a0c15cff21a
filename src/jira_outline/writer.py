# src/jira_outline/writer.py
from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Optional

from .errors import OutputError

log = logging.getLogger(__name__)


def compose_document(blocks: Iterable[str], preamble: Optional[str] = None) -> str:
    """Preamble (if any) and blocks, each newline-terminated, separated by one blank line."""
    parts = [preamble] if preamble else []
    parts.extend(b for b in blocks if b)
    return "\n".join(p if p.endswith("\n") else p + "\n" for p in parts)


def write_document(path: str | Path, text: str) -> None:
    p = Path(path)
    try:
        with p.open("w", encoding="utf-8") as fh:
            fh.write(text)
    except OSError as e:
        raise OutputError(f"Cannot write {p}: {e.strerror or e}") from e
    log.info("Output written", extra={"path": str(p), "bytes": len(text.encode("utf-8"))})
