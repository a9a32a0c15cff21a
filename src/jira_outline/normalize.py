# src/jira_outline/normalize.py
from __future__ import annotations
import logging
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import BROWSE_PATH
from .errors import MissingIssueKeyError

log = logging.getLogger(__name__)


class Field(str, Enum):
    URL = "url"
    KEY = "key"
    SUMMARY = "summary"
    DESCRIPTION = "description"
    PROJECT_NAME = "project-name"
    PROJECT_KEY = "project-key"
    ASSIGNEE = "assignee"
    PRIORITY = "priority"
    ISSUE_TYPE = "issue-type"
    DUE_DATE = "due-date"

    @classmethod
    def from_name(cls, name: str) -> Optional["Field"]:
        try:
            return cls(name)
        except ValueError:
            return None


# Field -> path inside the raw issue. URL is derived from the key.
FIELD_PATHS: Dict[Field, Tuple[str, ...]] = {
    Field.KEY: ("key",),
    Field.SUMMARY: ("fields", "summary"),
    Field.DESCRIPTION: ("fields", "description"),
    Field.PROJECT_NAME: ("fields", "project", "name"),
    Field.PROJECT_KEY: ("fields", "project", "key"),
    Field.ASSIGNEE: ("fields", "assignee", "displayName"),
    Field.PRIORITY: ("fields", "priority", "name"),
    Field.ISSUE_TYPE: ("fields", "issuetype", "name"),
    Field.DUE_DATE: ("fields", "duedate"),
}

NormalizedIssue = Mapping[str, Optional[str]]


def lookup(tree: Any, *path: str) -> Optional[Any]:
    """Follows ``path`` through nested dicts; None as soon as a step is missing."""
    if not path:
        return tree
    if not isinstance(tree, Mapping):
        return None
    head, *rest = path
    if head not in tree:
        return None
    return lookup(tree[head], *rest)


def _adf_text(node: Any) -> str:
    # Atlassian Document Format (API v3 descriptions): collect text nodes,
    # one line per block-level node.
    if isinstance(node, list):
        return "".join(_adf_text(n) for n in node)
    if not isinstance(node, Mapping):
        return ""
    if node.get("type") == "text":
        return str(node.get("text") or "")
    if node.get("type") == "hardBreak":
        return "\n"
    inner = _adf_text(node.get("content") or [])
    if node.get("type") in ("paragraph", "heading", "codeBlock", "listItem", "blockquote"):
        return inner.rstrip("\n") + "\n"
    return inner


def _as_text(field: Field, value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    if field is Field.DESCRIPTION and isinstance(value, Mapping) and value.get("type") == "doc":
        return _adf_text(value).rstrip("\n")
    return None


def normalize_issue(raw: Dict[str, Any], base_url: str) -> NormalizedIssue:
    if not isinstance(raw, Mapping):
        raise MissingIssueKeyError(f"Issue entry is not an object: {raw!r}")
    values: Dict[str, Optional[str]] = {}
    for fld, path in FIELD_PATHS.items():
        values[fld.value] = _as_text(fld, lookup(raw, *path))

    key = values[Field.KEY.value]
    if not key:
        raise MissingIssueKeyError(f"Issue without key (id={raw.get('id')!r})")
    values[Field.URL.value] = f"{base_url.rstrip('/')}{BROWSE_PATH}{key}"

    # keep the declaration order of Field
    return MappingProxyType({fld.value: values[fld.value] for fld in Field})


def normalize_issues(raws: Iterable[Dict[str, Any]], base_url: str) -> List[NormalizedIssue]:
    """Normalizes every raw issue; issues without a key are skipped with a warning."""
    out: List[NormalizedIssue] = []
    for raw in raws:
        try:
            out.append(normalize_issue(raw, base_url))
        except MissingIssueKeyError as e:
            log.warning("Skipping issue", extra={"reason": str(e)})
    return out
