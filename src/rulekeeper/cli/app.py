"""Main CLI application using Typer."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Any, Awaitable, Callable, Optional, TypeVar

import typer
from rich.markup import escape

from ..client import RulesClient
from ..config import RulesConfig
from ..deploy import release_rules
from ..errors import RulesError
from ..models import RulesetFile, ruleset_id
from ..responses import classify, raise_for_result
from .commands import config as config_commands
from .output import (
    console,
    print_error,
    print_info,
    print_releases_table,
    print_rulesets_table,
    print_success,
    print_test_issues,
)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

T = TypeVar("T")

app = typer.Typer(
    name="rulekeeper",
    help="Manage Firebase security rulesets and releases",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_commands.app, name="config")

ProjectOption = Annotated[
    Optional[str],
    typer.Option("--project", "-P", help="Project id (defaults to configured project)"),
]
FilesArgument = Annotated[
    list[Path],
    typer.Argument(help="Rules source files", exists=True, dir_okay=False, readable=True),
]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log requests and responses"),
    ] = False,
):
    """Inspect, test and release security rules.

    Examples:
        rulekeeper latest cloud.firestore -P my-project
        rulekeeper rulesets --all
        rulekeeper test firestore.rules
        rulekeeper deploy firestore.rules --service cloud.firestore
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)
    ctx.obj = RulesConfig.load()


def _make_client(config: RulesConfig) -> RulesClient:
    return RulesClient.from_config(config)


def _project(ctx: typer.Context, project: str | None) -> str:
    config: RulesConfig = ctx.obj
    project = project or config.project
    if not project:
        print_error("No project given. Pass --project or run 'rulekeeper config set project <id>'")
        raise typer.Exit(1)
    return project


def _run(ctx: typer.Context, operation: Callable[[RulesClient], Awaitable[T]]) -> T:
    """Run an async operation with a fresh client, mapping RulesError to an exit code."""

    async def runner() -> T:
        async with _make_client(ctx.obj) as client:
            return await operation(client)

    try:
        return asyncio.run(runner())
    except RulesError as e:
        print_error(escape(e.message))
        raise typer.Exit(e.code)


def _read_files(paths: list[Path]) -> list[RulesetFile]:
    return [RulesetFile.from_path(p) for p in paths]


@app.command("latest")
def latest(
    ctx: typer.Context,
    service: Annotated[str, typer.Argument(help="Service, e.g. cloud.firestore")],
    project: ProjectOption = None,
):
    """Show the ruleset currently released for a service."""
    project_id = _project(ctx, project)
    name = _run(ctx, lambda c: c.get_latest_ruleset_name(project_id, service))
    if name is None:
        print_info(f"No release found for {service}")
        return
    console.print(name)


@app.command("show")
def show(
    ctx: typer.Context,
    ruleset_name: Annotated[str, typer.Argument(help="Full ruleset name (projects/.../rulesets/...)")],
):
    """Print the source files of a ruleset."""
    files = _run(ctx, lambda c: c.get_ruleset_content(ruleset_name))
    for f in files:
        console.rule(escape(f.name))
        console.print(f.content, markup=False, highlight=False)


@app.command("rulesets")
def rulesets(
    ctx: typer.Context,
    project: ProjectOption = None,
    page_token: Annotated[
        Optional[str],
        typer.Option("--page-token", help="Token from a previous page"),
    ] = None,
    all_pages: Annotated[
        bool,
        typer.Option("--all", "-a", help="Follow page tokens and list everything"),
    ] = False,
):
    """List rulesets in a project."""
    project_id = _project(ctx, project)
    if all_pages:
        items = _run(ctx, lambda c: c.list_all_rulesets(project_id))
        print_rulesets_table(items)
        return

    page = _run(ctx, lambda c: c.list_rulesets(project_id, page_token))
    print_rulesets_table(page.rulesets)
    if page.has_more:
        print_info(f"Next page: --page-token {page.next_page_token}")


@app.command("releases")
def releases(
    ctx: typer.Context,
    project: ProjectOption = None,
):
    """List releases in a project."""
    project_id = _project(ctx, project)
    items = _run(ctx, lambda c: c.list_all_releases(project_id))
    print_releases_table(items)


@app.command("test")
def dry_run(
    ctx: typer.Context,
    files: FilesArgument,
    project: ProjectOption = None,
):
    """Validate rules files without releasing them."""
    project_id = _project(ctx, project)
    sources = _read_files(files)

    async def operation(client: RulesClient) -> Any:
        response = await client.test_ruleset(project_id, sources)
        return raise_for_result(classify(response))

    body = _run(ctx, operation)
    issues = (body.get("issues") or []) if isinstance(body, dict) else []
    if not issues:
        print_success("No issues found")
        return

    print_test_issues(issues)
    if any(issue.get("severity") == "ERROR" for issue in issues):
        raise typer.Exit(1)


@app.command("deploy")
def deploy(
    ctx: typer.Context,
    files: FilesArgument,
    service: Annotated[
        str,
        typer.Option("--service", "-s", help="Release name, e.g. cloud.firestore"),
    ],
    project: ProjectOption = None,
):
    """Create a ruleset from files and release it."""
    project_id = _project(ctx, project)
    sources = _read_files(files)
    result = _run(ctx, lambda c: release_rules(c, project_id, service, sources))
    if not result.changed:
        print_info(f"{service} already uses these rules ({result.ruleset_name})")
        return
    print_success(f"Released {result.ruleset_name} as {result.release_name}")


@app.command("delete")
def delete(
    ctx: typer.Context,
    ruleset: Annotated[str, typer.Argument(help="Ruleset id or full ruleset name")],
    project: ProjectOption = None,
):
    """Delete a ruleset."""
    project_id = _project(ctx, project)
    rid = ruleset_id(ruleset)
    _run(ctx, lambda c: c.delete_ruleset(project_id, rid))
    print_success(f"Deleted ruleset {rid}")


if __name__ == "__main__":
    app()
