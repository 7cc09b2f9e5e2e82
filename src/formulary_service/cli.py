"""
Operator CLI for a formulary plan.

Commands:
  - import-drugs: Bulk import drugs from a JSON file (a list of drug objects)
  - stats: Print tier, PA and step-therapy counts
  - search: Token search over brand and generic names
  - classes: List known therapeutic classes
  - export: Dump every tiered drug as JSON
  - clear: Delete every key of the plan

The store comes from configuration (STORE_BACKEND, REDIS_URL, PLAN_ID). With
the default in-memory backend nothing outlives a single command, so point the
CLI at Redis for real use.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from formulary_service.config import settings
from formulary_service.services.formulary import FormularyService, create_formulary_service
from formulary_service.services.kv_store import KeyValueStoreError
from formulary_service.utils.logging import get_logger, log_event
from formulary_service.utils.namespace import validate_plan_id

app = typer.Typer(help="Formulary index and workflow CLI.")
logger = get_logger("formulary_service.cli")


def _service(plan_id: Optional[str]) -> FormularyService:
    try:
        config = settings.model_copy(update={"plan_id": validate_plan_id(plan_id)}) if plan_id else settings
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--plan-id") from exc
    return create_formulary_service(config)


def _fail(exc: Exception) -> None:
    typer.secho(f"Store error: {exc}", fg=typer.colors.RED)
    raise typer.Exit(code=1) from exc


@app.command("import-drugs")
def import_drugs(
    path: Path = typer.Argument(..., help="JSON file containing a list of drugs."),
    plan_id: Optional[str] = typer.Option(None, help="Plan namespace (defaults to PLAN_ID)."),
) -> None:
    """Bulk import drugs; invalid entries are reported, not fatal."""
    if not path.exists():
        typer.secho(f"No such file: {path}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        typer.secho(f"Invalid JSON in {path}: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1) from exc
    if not isinstance(payload, list):
        typer.secho("Expected a JSON list of drug objects", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    service = _service(plan_id)
    try:
        result = service.bulk_import_drugs(payload)
    except KeyValueStoreError as exc:
        _fail(exc)
    log_event(logger, "bulk_import_completed", plan_id=service.plan_id, **result.model_dump())
    color = typer.colors.GREEN if result.failed == 0 else typer.colors.YELLOW
    typer.secho(f"Imported {result.success} drugs ({result.failed} failed)", fg=color)


@app.command()
def stats(plan_id: Optional[str] = typer.Option(None, help="Plan namespace.")) -> None:
    """Print formulary statistics as JSON."""
    try:
        summary = _service(plan_id).get_formulary_stats()
    except KeyValueStoreError as exc:
        _fail(exc)
    typer.echo(summary.model_dump_json(indent=2))


@app.command()
def search(
    query: str = typer.Argument(..., help="Name query; every token of 3+ characters must match."),
    limit: int = typer.Option(50, help="Maximum number of results."),
    plan_id: Optional[str] = typer.Option(None, help="Plan namespace."),
) -> None:
    """Search drugs by brand or generic name tokens."""
    try:
        drugs = _service(plan_id).search_drugs(query, limit)
    except KeyValueStoreError as exc:
        _fail(exc)
    if not drugs:
        typer.secho("No matching drugs", fg=typer.colors.YELLOW)
        return
    for drug in drugs:
        typer.echo(f"{drug.ndc}  {drug.name} ({drug.generic_name})  tier {drug.tier}")


@app.command()
def classes(plan_id: Optional[str] = typer.Option(None, help="Plan namespace.")) -> None:
    """List therapeutic classes present in the formulary."""
    try:
        labels = _service(plan_id).get_therapeutic_classes()
    except KeyValueStoreError as exc:
        _fail(exc)
    for label in labels:
        typer.echo(label)


@app.command()
def export(
    output: Optional[Path] = typer.Option(None, help="Write JSON here instead of stdout."),
    plan_id: Optional[str] = typer.Option(None, help="Plan namespace."),
) -> None:
    """Export every tiered drug, grouped by tier."""
    try:
        drugs = _service(plan_id).export_formulary()
    except KeyValueStoreError as exc:
        _fail(exc)
    payload = json.dumps([drug.model_dump(mode="json") for drug in drugs], indent=2)
    if output is None:
        typer.echo(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload)
    typer.secho(f"Exported {len(drugs)} drugs to {output}", fg=typer.colors.GREEN)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", help="Confirm deletion of the whole plan."),
    plan_id: Optional[str] = typer.Option(None, help="Plan namespace."),
) -> None:
    """Delete every key of the plan, including PA requests and rules."""
    if not yes:
        typer.secho("Refusing to clear without --yes", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    try:
        deleted = _service(plan_id).clear_formulary()
    except KeyValueStoreError as exc:
        _fail(exc)
    typer.secho(f"Deleted {deleted} keys", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
