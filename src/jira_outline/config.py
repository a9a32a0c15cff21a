# src/jira_outline/config.py
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import httpx
import yaml
from dotenv import load_dotenv, find_dotenv

from .errors import ConfigError

SEARCH_PATH = "/rest/api/2/search"
BROWSE_PATH = "/browse/"

DEFAULT_JQL = (
    "assignee = currentUser() AND resolution = Unresolved "
    "ORDER BY priority DESC, created ASC"
)
DEFAULT_FIELDS: Tuple[str, ...] = (
    "summary",
    "assignee",
    "duedate",
    "project",
    "priority",
    "description",
    "issuetype",
)
DEFAULT_ISSUE_FORMAT = """* TODO [[{URL}][{KEY}]] {SUMMARY}
  {DUE-DATE}
  :PROPERTIES:
  :PROJECT: {PROJECT-NAME}
  :PRIORITY: {PRIORITY}
  :TYPE: {ISSUE-TYPE}
  :ASSIGNEE: {ASSIGNEE}
  :END:
{DESCRIPTION}
"""

# option name in the YAML file -> environment variable that overrides it
OPTION_ENV = {
    "api-root": "JIRA_BASE_URL",
    "auth-username": "JIRA_USERNAME",
    "auth-password": "JIRA_PASSWORD",
    "output-file": "JIRA_OUTPUT_FILE",
    "output-preamble": "JIRA_OUTPUT_PREAMBLE",
    "issue-format": "JIRA_ISSUE_FORMAT",
    "jql": "JIRA_JQL",
    "fields": "JIRA_FIELDS",
    "timeout": "JIRA_TIMEOUT_S",
    "ca-bundle": "JIRA_CA_BUNDLE",
}
REQUIRED_OPTIONS = ("api-root", "auth-username", "auth-password", "output-file")


def _load_dotenv(env_path: Optional[str | Path]) -> None:
    if env_path:
        p = Path(env_path)
        if p.is_file():
            load_dotenv(p, override=False)
            return
    p = Path.cwd() / ".env"
    if p.is_file():
        load_dotenv(p, override=False)
        return
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(found, override=False)


def _read_config_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    unknown = sorted(set(data) - set(OPTION_ENV))
    if unknown:
        raise ConfigError(f"Unknown option(s) in {path}: {', '.join(unknown)}")
    return data


def _text(options: Dict[str, Any], name: str) -> Optional[str]:
    # YAML may hand back ints, dates or bools for scalar options
    val = options.get(name)
    if val is None or val == "":
        return None
    return val if isinstance(val, str) else str(val)


def _split_fields(val: Any) -> Tuple[str, ...]:
    if isinstance(val, str):
        items = val.split(",")
    elif not isinstance(val, (list, tuple)):
        items = [str(val)]
    else:
        items = [str(v) for v in val]
    return tuple(s.strip() for s in items if s and s.strip())


@dataclass(frozen=True)
class Settings:
    base_url: str
    username: str
    password: str
    output_file: Path
    output_preamble: Optional[str] = None
    issue_format: str = DEFAULT_ISSUE_FORMAT
    jql: str = DEFAULT_JQL
    fields: Tuple[str, ...] = DEFAULT_FIELDS
    timeout_s: float = 30.0
    ca_bundle: Optional[str] = None

    @classmethod
    def load(
        cls,
        config_path: Optional[str | Path] = None,
        env_path: Optional[str | Path] = None,
    ) -> "Settings":
        """
        Reads settings from an optional YAML file, then lets environment
        variables (including a .env file) override single options.
        """
        _load_dotenv(env_path)

        options: Dict[str, Any] = {}
        config_path = config_path or os.getenv("JIRA_OUTLINE_CONFIG")
        if config_path:
            options.update(_read_config_file(Path(config_path)))

        for name, env_name in OPTION_ENV.items():
            val = os.getenv(env_name)
            if val is not None and val != "":
                options[name] = val

        missing = [OPTION_ENV[n] for n in REQUIRED_OPTIONS if not options.get(n)]
        if missing:
            raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")

        try:
            timeout_s = float(options.get("timeout") or 30.0)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid timeout: {options.get('timeout')!r}") from e

        fields = _split_fields(options["fields"]) if options.get("fields") else DEFAULT_FIELDS

        return cls(
            base_url=str(options["api-root"]).rstrip("/"),
            username=str(options["auth-username"]),
            password=str(options["auth-password"]),
            output_file=Path(str(options["output-file"])).expanduser(),
            output_preamble=_text(options, "output-preamble"),
            issue_format=_text(options, "issue-format") or DEFAULT_ISSUE_FORMAT,
            jql=_text(options, "jql") or DEFAULT_JQL,
            fields=fields,
            timeout_s=timeout_s,
            ca_bundle=_text(options, "ca-bundle"),
        )

    def build_client(self, transport: httpx.BaseTransport | None = None) -> httpx.Client:
        headers = {"Accept": "application/json"}
        timeout = httpx.Timeout(self.timeout_s)
        verify = self.ca_bundle if self.ca_bundle else True
        return httpx.Client(
            base_url=self.base_url,
            auth=httpx.BasicAuth(self.username, self.password),
            headers=headers,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )
