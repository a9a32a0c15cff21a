# src/jira_outline/export.py
from __future__ import annotations

import logging
from typing import List, Optional

from .config import Settings
from .jira_api import JiraClient
from .normalize import NormalizedIssue, normalize_issues
from .render import render_issues
from .writer import compose_document, write_document

log = logging.getLogger(__name__)


def fetch_normalized(settings: Settings, client: Optional[JiraClient] = None) -> List[NormalizedIssue]:
    """Runs the search and flattens every returned issue."""
    jc = client or JiraClient(settings)
    try:
        raws = jc.search(jql=settings.jql, fields=settings.fields)
    finally:
        if client is None:
            jc.close()
    return normalize_issues(raws, settings.base_url)


def build_document(settings: Settings, client: Optional[JiraClient] = None) -> tuple[str, int]:
    issues = fetch_normalized(settings, client)
    blocks = render_issues(settings.issue_format, issues)
    return compose_document(blocks, settings.output_preamble), len(blocks)


def export_issues(settings: Settings, *, client: Optional[JiraClient] = None) -> int:
    """
    Fetch, normalize, render and write. The output file is only touched once
    the document is complete, so a failed fetch leaves the old file in place.
    Returns the number of exported issues.
    """
    log.info("Export starting", extra={"base_url": settings.base_url, "output": str(settings.output_file)})
    text, count = build_document(settings, client)
    write_document(settings.output_file, text)
    log.info("Export done", extra={"count": count, "output": str(settings.output_file)})
    return count
