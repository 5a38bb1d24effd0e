"""CLI entry point: jar-rebuild.

Subcommands:
    jar-rebuild rebuild app.jar -o out/ --cfr-jar cfr.jar   # full project rebuild
    jar-rebuild deps app.jar [--json]                       # inferred dependencies only
    jar-rebuild refs app.jar [--json]                       # per-class type references
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from jar_rebuilder.config import RebuilderConfig
from jar_rebuilder.core.logging import setup_logging
from jar_rebuilder.decompiler.cfr import CfrDecompiler
from jar_rebuilder.exceptions import RebuilderError
from jar_rebuilder.models.dependency import DependencySet
from jar_rebuilder.pipeline import PipelineRun


def _load_config(**overrides: object) -> RebuilderConfig:
    try:
        return RebuilderConfig.from_env(**overrides)
    except ValidationError as e:
        click.echo(f"Error: invalid configuration:\n{e}", err=True)
        sys.exit(1)


def _dependency_rows(deps: DependencySet) -> list[dict]:
    return [
        {
            "group_id": d.group_id,
            "artifact_id": d.artifact_id,
            "version": d.version,
            "scope": d.scope,
            "type": d.type,
            "classifier": d.classifier,
            "source": d.source,
            "needs_review": d.needs_review,
        }
        for d in deps
    ]


def _print_deps(deps: DependencySet, as_json: bool) -> None:
    if as_json:
        click.echo(json.dumps(_dependency_rows(deps), indent=2))
        return

    click.echo(f"Resolved {len(deps)} dependencies\n")
    for d in deps:
        scope = f" ({d.scope})" if d.scope and d.scope != "compile" else ""
        review = "  [needs review]" if d.needs_review else ""
        click.echo(f"  {d}{scope}  <- {d.source}{review}")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """jar-rebuild: reconstruct a Maven project from a compiled archive."""
    setup_logging("DEBUG" if verbose else None)


@main.command("rebuild")
@click.argument("archive", type=click.Path(dir_okay=False))
@click.option("-o", "--output", "output_dir", default=".", type=click.Path(file_okay=False),
              help="Directory that receives <archive-name>/")
@click.option("--cfr-jar", default=None, help="Path to cfr.jar (or JAR_REBUILDER_CFR_JAR)")
@click.option("--java", "java_bin", default=None, help="Java executable used to run CFR")
@click.option("--no-decompile", is_flag=True, help="Skip decompilation; write pom.xml and resources only")
def rebuild(
    archive: str,
    output_dir: str,
    cfr_jar: str | None,
    java_bin: str | None,
    no_decompile: bool,
) -> None:
    """Rebuild ARCHIVE into an editable Maven project."""
    config = _load_config(cfr_jar=cfr_jar, java_bin=java_bin)

    decompiler = None
    if not no_decompile:
        if not config.cfr_jar:
            click.echo("Error: --cfr-jar is required unless --no-decompile is given", err=True)
            sys.exit(1)
        decompiler = CfrDecompiler(config.cfr_jar, config.java_bin, config.decompile_timeout)

    run = PipelineRun(archive, output_dir, decompiler=decompiler, config=config)
    try:
        report = run.run()
    except RebuilderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"\nProject written to {report.project_dir}")
    click.echo(f"  Classes scanned: {report.classes_scanned}")
    click.echo(f"  Sources written: {report.sources_written}")
    click.echo(f"  Resources copied: {report.resources_copied}")
    click.echo(f"  Dependencies: {len(report.dependencies)}")
    if report.embedded_descriptor:
        click.echo(f"  Embedded pom: {report.embedded_descriptor}")
    if report.malformed_classes:
        click.echo(f"  Malformed classes: {len(report.malformed_classes)}")
    if report.decompiler_failures:
        click.echo(f"  Decompiler failures: {len(report.decompiler_failures)}")
    if report.collisions:
        click.echo(f"  Path collisions (last write kept): {len(report.collisions)}")
        for path in report.collisions:
            click.echo(f"    {path}")

    summary = run.progress.get_summary()
    click.echo(f"\nPipeline summary (total: {summary['total_duration']}s):")
    for p in summary["phases"]:
        status_icon = {"completed": "+", "failed": "!", "skipped": "-", "running": "~"}.get(
            p["status"], "?"
        )
        duration = f" ({p['duration']}s)" if p["duration"] else ""
        detail = f" - {p['detail']}" if p["detail"] else ""
        click.echo(f"  [{status_icon}] {p['phase']}{duration}{detail}")


@main.command("deps")
@click.argument("archive", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def deps(archive: str, as_json: bool) -> None:
    """Infer the dependencies of ARCHIVE without writing anything."""
    run = PipelineRun(archive, config=_load_config())
    try:
        resolved = run.inspect()
    except RebuilderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _print_deps(resolved, as_json)


@main.command("refs")
@click.argument("archive", type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def refs(archive: str, as_json: bool) -> None:
    """List the types each class in ARCHIVE references."""
    run = PipelineRun(archive, config=_load_config())
    try:
        run.inspect()
    except RebuilderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        rows = {owner: sorted(types) for owner, types in sorted(run.corpus.items())}
        click.echo(json.dumps(rows, indent=2))
        return

    click.echo(f"{len(run.corpus)} classes in {Path(archive).name}\n")
    for owner, types in sorted(run.corpus.items()):
        click.echo(f"  {owner}")
        for type_name in sorted(types):
            if type_name != owner:
                click.echo(f"    {type_name}")
    if run.malformed_classes:
        click.echo(f"\nMalformed classes skipped: {len(run.malformed_classes)}", err=True)


if __name__ == "__main__":
    main()
