# src/jira_outline/render.py
from __future__ import annotations
import re
from typing import Callable, Dict, Iterable, List, Optional

from .normalize import Field, NormalizedIssue

PLACEHOLDER_RE = re.compile(r"\{([A-Z][A-Z0-9-]*)\}")

Formatter = Callable[[str], str]


def _identity(value: str) -> str:
    return value


def _timestamp(value: str) -> str:
    return f"<{value}>"


def _plain_text(value: str) -> str:
    return value.replace("\r\n", "\n").replace("\r", "\n").rstrip()


FORMATTERS: Dict[Field, Formatter] = {fld: _identity for fld in Field}
FORMATTERS[Field.DUE_DATE] = _timestamp
FORMATTERS[Field.DESCRIPTION] = _plain_text


def format_field(name: str, issue: NormalizedIssue) -> str:
    """Value for placeholder ``name`` (as written in the template), '' if unknown or absent."""
    fld = Field.from_name(name.lower())
    if fld is None:
        return ""
    value: Optional[str] = issue.get(fld.value)
    if value is None:
        return ""
    return FORMATTERS[fld](value)


# Only "\n" ends a line; \r, \x0c or \u2028 inside a value do not.
BLANK_LINE_RE = re.compile(r"^[^\S\n]*(?:\n|\Z)", re.MULTILINE)


def drop_blank_lines(text: str) -> str:
    return BLANK_LINE_RE.sub("", text)


def render_issue(template: str, issue: NormalizedIssue) -> str:
    substituted = PLACEHOLDER_RE.sub(lambda m: format_field(m.group(1), issue), template)
    return drop_blank_lines(substituted)


def render_issues(template: str, issues: Iterable[NormalizedIssue]) -> List[str]:
    return [render_issue(template, issue) for issue in issues]
