"""Release local rules files to a service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .client import RulesClient
from .models import RulesetFile

logger = logging.getLogger(__name__)


@dataclass
class DeployResult:
    """Outcome of releasing rules for one service."""

    ruleset_name: str
    release_name: str
    changed: bool


def same_files(current: Sequence[RulesetFile], new: Sequence[RulesetFile]) -> bool:
    """True when both sequences hold the same files in the same order."""
    if len(current) != len(new):
        return False
    return all(a.name == b.name and a.content == b.content for a, b in zip(current, new))


async def release_rules(
    client: RulesClient,
    project_id: str,
    service: str,
    files: Sequence[RulesetFile],
) -> DeployResult:
    """Create a ruleset from files and release it under ``service``.

    If the currently released ruleset already has identical content, nothing
    is created and the existing ruleset name is reported with changed=False.
    """
    latest = await client.get_latest_ruleset_name(project_id, service)
    if latest:
        current = await client.get_ruleset_content(latest)
        if same_files(current, files):
            logger.debug("[rules] %s unchanged, skipping release", service)
            return DeployResult(ruleset_name=latest, release_name=service, changed=False)

    ruleset_name = await client.create_ruleset(project_id, files)
    released = await client.update_or_create_release(project_id, ruleset_name, service)
    return DeployResult(ruleset_name=ruleset_name, release_name=released, changed=True)
