"""Command line interface for snippet-runner."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from snippet_runner.config import RunnerConfig, build_http_client, load_config
from snippet_runner.core.execution.external_runner import ExternalRunnerGateway
from snippet_runner.core.execution.handler_registry import (
    HandlerRegistry,
    default_handler_names,
)
from snippet_runner.core.execution.result_types import CycleReport
from snippet_runner.core.execution.runner_compiler import SubprocessRunnerCompiler
from snippet_runner.core.execution.snippet_runner import SnippetRunner
from snippet_runner.core.parsing.script_parser import parse_script
from snippet_runner.host.static_source import (
    StaticFeatureGate,
    StaticRuleSource,
    load_rules_file,
)
from snippet_runner.schemas.snippet import ExecutionContext


@click.group()
@click.version_option(package_name="snippet-runner")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Snippet Runner - parse and dispatch snippet scripts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("script")
@click.option(
    "--output-format",
    type=click.Choice(["json", "text"]),
    default="text",
    help="Output format for parsed snippets",
)
def parse(script: str, output_format: str) -> None:
    """Parse SCRIPT and print its snippets."""
    snippets = parse_script(script)

    if output_format == "json":
        click.echo(json.dumps([s.to_filter() for s in snippets], indent=2))
        return

    if not snippets:
        click.echo("No snippets found")
        return

    for index, snippet in enumerate(snippets, start=1):
        args = " ".join(repr(arg) for arg in snippet.args)
        click.echo(f"{index}. {snippet.name} {args}".rstrip())


@cli.command()
@click.argument("rules_file", type=click.Path(path_type=Path))
def partition(rules_file: Path) -> None:
    """Show which snippets in RULES_FILE run locally or externally.

    Local handlers need a DOM host, so `run` sends every snippet to the
    external runner.
    """
    try:
        data = load_rules_file(rules_file)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    rules = data.get("snippets", [])
    if not isinstance(rules, list):
        raise click.ClickException("'snippets' must be a list of scripts")

    local_names = set(default_handler_names())
    table = Table(title=f"Snippets in {rules_file}")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Arguments")
    table.add_column("Target")

    index = 0
    for rule in rules:
        if not isinstance(rule, str):
            continue
        for snippet in parse_script(rule):
            index += 1
            target = (
                "local (DOM host)" if snippet.name in local_names else "external"
            )
            args = escape(json.dumps(snippet.args))
            table.add_row(str(index), escape(snippet.name), args, target)

    Console().print(table)


@cli.command()
@click.argument("rules_file", type=click.Path(path_type=Path))
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Config file (defaults to .snippet-runner/config.yaml)",
)
@click.option("--runner-url", default=None, help="External runner URL or path")
def run(rules_file: Path, config_path: Path | None, runner_url: str | None) -> None:
    """Run one dispatch cycle for the snippets in RULES_FILE."""
    try:
        config = load_config(config_path)
        source = StaticRuleSource.from_file(rules_file)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    url = runner_url or config.runner_url
    if not url:
        raise click.ClickException(
            "No external runner configured. Pass --runner-url or set runner_url "
            "in .snippet-runner/config.yaml"
        )

    report = asyncio.run(_run_once(source, config, url))
    result: dict[str, Any] = (
        {"status": "suppressed"} if report is None else report.to_dict()
    )
    click.echo(json.dumps(result, indent=2))


async def _run_once(
    source: StaticRuleSource, config: RunnerConfig, runner_url: str
) -> CycleReport | None:
    """Run a single cycle without local DOM handlers."""
    compiler = SubprocessRunnerCompiler(
        interpreter=config.interpreter, timeout=config.runner_timeout_seconds
    )

    async with (
        build_http_client(config) as client,
        ExternalRunnerGateway(runner_url, compiler, http_client=client) as gateway,
    ):
        runner = SnippetRunner(
            rule_source=source,
            feature_gate=StaticFeatureGate(),
            gateway=gateway,
            registry=HandlerRegistry().freeze(),
            context=ExecutionContext(world=config.world),
        )
        try:
            report = await runner.start()
            await runner.drain()
        finally:
            runner.stop()
    return report


if __name__ == "__main__":
    cli()
