"""rulekeeper: client for the Firebase Rules API.

Lists, fetches, creates, tests and releases rulesets.

Usage:
    # CLI
    $ rulekeeper latest cloud.firestore --project my-project
    $ rulekeeper deploy firestore.rules --service cloud.firestore

    # Python API
    from rulekeeper import RulesClient, RulesetFile

    async with RulesClient(token=token) as client:
        name = await client.create_ruleset("my-project", [RulesetFile("firestore.rules", src)])
        await client.update_or_create_release("my-project", name, "cloud.firestore")
"""

try:
    from importlib.metadata import version as _get_version

    __version__ = _get_version("rulekeeper")
except Exception:
    __version__ = "0.0.0-dev"

from .client import RulesClient
from .config import RulesConfig
from .errors import RulesError
from .models import PageOfReleases, PageOfRulesets, Release, RulesetFile

__all__ = [
    "__version__",
    "PageOfReleases",
    "PageOfRulesets",
    "Release",
    "RulesClient",
    "RulesConfig",
    "RulesError",
    "RulesetFile",
]
