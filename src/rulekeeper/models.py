"""Data models for the rules service."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp as returned by the API.

    Nanosecond fractions are truncated to microseconds. Returns None for
    missing or unparseable values.
    """
    if not value:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def release_name(project_id: str, release: str) -> str:
    """Full resource name of a release: projects/{project}/releases/{release}."""
    return f"projects/{project_id}/releases/{release}"


def ruleset_id(name: str) -> str:
    """Trailing id segment of a ruleset name (projects/p/rulesets/<id>)."""
    return name.rstrip("/").rsplit("/", 1)[-1]


@dataclass
class RulesetFile:
    """A single source file in a ruleset."""

    name: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RulesetFile:
        return cls(name=data.get("name", ""), content=data.get("content", ""))

    @classmethod
    def from_path(cls, path: Path | str, name: str | None = None) -> RulesetFile:
        """Read a local rules file. The file name defaults to the path's name."""
        path = Path(path)
        return cls(name=name or path.name, content=path.read_text())


@dataclass
class Release:
    """Binding from a release name to a ruleset."""

    name: str
    ruleset_name: str
    create_time: datetime | None = None
    update_time: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Release:
        return cls(
            name=data.get("name", ""),
            ruleset_name=data.get("rulesetName", ""),
            create_time=parse_timestamp(data.get("createTime")),
            update_time=parse_timestamp(data.get("updateTime")),
        )

    @property
    def short_name(self) -> str:
        """Release name without the projects/{p}/releases/ prefix."""
        _, sep, rest = self.name.partition("/releases/")
        return rest if sep else self.name


@dataclass
class PageOfRulesets:
    """One page of a ruleset listing. Ruleset entries are passed through as-is."""

    rulesets: list[dict[str, Any]] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_page_token)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PageOfRulesets:
        return cls(
            rulesets=data.get("rulesets") or [],
            next_page_token=data.get("nextPageToken") or None,
        )


@dataclass
class PageOfReleases:
    """One page of a release listing."""

    releases: list[Release] = field(default_factory=list)
    next_page_token: str | None = None

    @property
    def has_more(self) -> bool:
        return bool(self.next_page_token)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PageOfReleases:
        return cls(
            releases=[Release.from_api(r) for r in data.get("releases") or []],
            next_page_token=data.get("nextPageToken") or None,
        )
