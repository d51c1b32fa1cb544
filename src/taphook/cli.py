# Copyright 2026 Pennyworth Technologies, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command line tools for inspecting hook manifests."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from taphook import __version__
from taphook.config import (
    VALID_LOG_LEVELS,
    VALID_OUTPUT_FORMATS,
    ConfigLoadError,
    ConfigValidationError,
    get_config,
)
from taphook.dispatch.templates import TEMPLATES
from taphook.manifest import ManifestError, build_hook, describe_hook, load_manifest

console = Console()
logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(VALID_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: from config, WARNING)",
)
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """taphook - inspect ordered plugin hooks."""
    ctx.ensure_object(dict)

    try:
        config = get_config()
    except (ConfigLoadError, ConfigValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    _configure_logging(log_level or config.defaults.log_level)
    ctx.obj["config"] = config


@main.command()
def version() -> None:
    """Show version."""
    console.print(f"taphook {__version__}")


@main.command()
def templates() -> None:
    """List registered dispatch templates."""
    table = Table(title="Dispatch templates")
    table.add_column("Name")
    table.add_column("Description")
    for name, template_class in TEMPLATES.items():
        table.add_row(name, (template_class.__doc__ or "").strip().splitlines()[0])
    console.print(table)


@main.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice(VALID_OUTPUT_FORMATS),
    default=None,
    help="Output format (default: from config)",
)
@click.option("--template", "-t", default=None, help="Override the manifest's template")
@click.pass_context
def plan(
    ctx: click.Context, manifest: Path, output_format: str | None, template: str | None
) -> None:
    """Show the resolved tap order of a hook manifest."""
    config = ctx.obj["config"]
    output_format = output_format or config.defaults.output_format

    try:
        loaded = load_manifest(manifest)
        hook = build_hook(loaded, template=template or loaded.template or config.defaults.template)
    except ManifestError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    description = describe_hook(hook)
    logger.info("Resolved %d tap(s) from %s", len(hook.taps), manifest)

    if output_format == "json":
        click.echo(json.dumps(description, indent=2, default=str))
        return

    table = Table(title=f"{manifest.name} ({description['template']})")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Stage", justify="right")
    table.add_column("Before")
    for tap in description["taps"]:
        table.add_row(
            str(tap["position"]),
            tap["name"],
            tap["type"],
            str(tap["stage"]),
            ", ".join(tap["before"]) or "-",
        )
    console.print(table)
    console.print(f"Classification: [bold]{description['classification']}[/bold]")


@main.group()
def config() -> None:
    """Configuration commands."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the merged configuration as JSON."""
    click.echo(json.dumps(ctx.obj["config"].to_dict(), indent=2))


if __name__ == "__main__":
    main()
