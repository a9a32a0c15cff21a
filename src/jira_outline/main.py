# src/jira_outline/main.py
from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import shutil
import sys
from pathlib import Path
from textwrap import shorten

from .config import Settings
from .errors import OutlineError
from .export import build_document, export_issues, fetch_normalized
from .jira_api import JiraClient
from .logging_setup import setup_logging

log = logging.getLogger(__name__)


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.load(config_path=args.config, env_path=args.env)
    if getattr(args, "output", None):
        settings = dataclasses.replace(settings, output_file=Path(args.output).expanduser())
    return settings


def cmd_export(args: argparse.Namespace) -> int:
    settings = _settings(args)
    if args.stdout:
        text, _ = build_document(settings)
        sys.stdout.write(text)
        return 0
    export_issues(settings)
    return 0


def cmd_preview(args: argparse.Namespace) -> int:
    settings = _settings(args)
    issues = fetch_normalized(settings)
    term_w = shutil.get_terminal_size((120, 20)).columns

    def fmt(issue):
        return [
            issue["key"],
            issue["issue-type"] or "-",
            issue["priority"] or "-",
            shorten(issue["summary"] or "", width=max(20, term_w - 60), placeholder="…"),
            issue["due-date"] or "-",
        ]

    headers = ["Key", "Type", "Priority", "Summary", "Due"]
    data = [headers] + [fmt(i) for i in issues]
    widths = [max(len(row[i]) for row in data) for i in range(len(headers))]
    lines = ["  ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)).rstrip() for row in data]
    lines.insert(1, "  ".join("-" * w for w in widths))
    print("\n".join(lines))
    print(f"{len(issues)} issue(s)")
    return 0


def cmd_dump(args: argparse.Namespace) -> int:
    settings = _settings(args)
    with JiraClient(settings) as client:
        data = client.search_raw(jql=settings.jql, fields=settings.fields)
    print(json.dumps(data, ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jira-outline")
    parser.add_argument("--config", help="YAML-Datei mit api-root, issue-format, ... (alternativ JIRA_OUTLINE_CONFIG)")
    parser.add_argument("--env", help="Pfad zu einer .env-Datei")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug-Logging (überschreibt LOG_LEVEL)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_exp = sub.add_parser("export", help="Offene Issues rendern und in die Ausgabedatei schreiben")
    p_exp.add_argument("--output", help="Ausgabedatei (überschreibt output-file)")
    p_exp.add_argument("--stdout", action="store_true", help="Dokument auf stdout ausgeben statt Datei schreiben")
    p_exp.set_defaults(func=cmd_export)

    p_prev = sub.add_parser("preview", help="Gefundene Issues als Tabelle anzeigen")
    p_prev.set_defaults(func=cmd_preview)

    p_dump = sub.add_parser("dump", help="Rohe /search-Antwort als JSON ausgeben")
    p_dump.set_defaults(func=cmd_dump)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.cmd, verbose=args.verbose)
    try:
        return args.func(args)
    except OutlineError as e:
        log.error("%s failed: %s", args.cmd, e, exc_info=args.verbose)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
