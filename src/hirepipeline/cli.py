"""Typer CLI entrypoint for the hiring pipeline."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pendulum
import typer
from dependency_injector import providers
from pydantic import ValidationError

from .config import ConfigManager
from .container import create_container
from .events import JsonlEventEmitter
from .logging import configure_logging
from .pipeline import HiringPipeline, SubmissionResult
from .stores import CatalogLoader, JsonFileApplicationStore

app = typer.Typer(help="Hiring pipeline round-progression CLI.")

CatalogOption = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Catalog JSON path (jobs, questions, assessments).")
StateOption = typer.Option(..., dir_okay=False, resolve_path=True, help="Application state JSON path.")
EventsOption = typer.Option(None, dir_okay=False, help="Event log output (JSONL).")
ConfigOption = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path.")
LogLevelOption = typer.Option("WARNING", help="Log level for structured logging.")


def _build_pipeline(
    catalog: Path,
    state: Path,
    events: Optional[Path],
    config: Optional[Path],
    log_level: str,
) -> HiringPipeline:
    settings: dict[str, Any] = {}
    if config:
        if config.suffix not in (".yaml", ".yml"):
            raise typer.BadParameter("Config file must be .yaml or .yml", param_name="config")
        try:
            settings = ConfigManager(config.parent).load_app_config(config.stem).to_settings()
        except ValidationError as exc:
            raise typer.BadParameter(f"Invalid config: {exc}", param_name="config") from exc

    configure_logging(log_level)

    try:
        loaded_catalog = CatalogLoader().load(catalog)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_name="catalog") from exc

    container = create_container(settings=settings)
    container.catalog.override(providers.Object(loaded_catalog))
    container.application_store.override(providers.Object(JsonFileApplicationStore(state)))
    if events:
        container.event_emitter.override(providers.Object(JsonlEventEmitter(events)))
    return container.pipeline()


def _load_answers(path: Optional[Path]) -> list[dict[str, Any]] | None:
    if path is None:
        return None
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = json.load(handle)
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"Invalid answers JSON: {exc}", param_name="answers") from exc
    if not isinstance(data, list):
        raise typer.BadParameter("Answers file must be a JSON array", param_name="answers")
    return data


def _report(result: SubmissionResult) -> None:
    typer.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def apply(
    job_id: str = typer.Option(..., help="Job identifier."),
    candidate_id: str = typer.Option(..., help="Candidate identifier."),
    answers: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Screening answers JSON path."),
    catalog: Path = CatalogOption,
    state: Path = StateOption,
    events: Optional[Path] = EventsOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Submit an application, evaluating a leading screening round."""
    pipeline = _build_pipeline(catalog, state, events, config, log_level)
    _report(pipeline.submit_application(job_id, candidate_id, _load_answers(answers)))


@app.command("submit-round")
def submit_round(
    job_id: str = typer.Option(..., help="Job identifier."),
    round_id: int = typer.Option(..., help="Round identifier."),
    candidate_id: str = typer.Option(..., help="Candidate identifier."),
    answers: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Answers JSON path."),
    started_at: Optional[str] = typer.Option(None, help="ISO timestamp the candidate started the round."),
    catalog: Path = CatalogOption,
    state: Path = StateOption,
    events: Optional[Path] = EventsOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Submit answers for a round and apply progression rules."""
    started = None
    if started_at:
        try:
            started = pendulum.parse(started_at)
        except ValueError as exc:
            raise typer.BadParameter(f"Invalid timestamp: {started_at}", param_name="started_at") from exc
    pipeline = _build_pipeline(catalog, state, events, config, log_level)
    _report(
        pipeline.submit_round_assessment(
            job_id,
            round_id,
            candidate_id,
            _load_answers(answers) or [],
            started_at=started,
        )
    )


@app.command()
def feedback(
    job_id: str = typer.Option(..., help="Job identifier."),
    round_id: int = typer.Option(..., help="Round identifier."),
    candidate_id: str = typer.Option(..., help="Candidate identifier."),
    rating: int = typer.Option(..., help="Rating from 0 to 5."),
    comment: str = typer.Option("", help="Free-form comment."),
    catalog: Path = CatalogOption,
    state: Path = StateOption,
    events: Optional[Path] = EventsOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Attach candidate feedback to a completed round."""
    pipeline = _build_pipeline(catalog, state, events, config, log_level)
    _report(pipeline.submit_round_feedback(job_id, round_id, candidate_id, rating, comment))


@app.command("schedule-next")
def schedule_next(
    job_id: str = typer.Option(..., help="Job identifier."),
    candidate_id: str = typer.Option(..., help="Candidate identifier."),
    catalog: Path = CatalogOption,
    state: Path = StateOption,
    events: Optional[Path] = EventsOption,
    config: Optional[Path] = ConfigOption,
    log_level: str = LogLevelOption,
) -> None:
    """Schedule the candidate's next round."""
    pipeline = _build_pipeline(catalog, state, events, config, log_level)
    _report(pipeline.schedule_next_round(job_id, candidate_id))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
