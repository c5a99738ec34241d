"""Dependency injection container for the hiring pipeline."""

from __future__ import annotations

from dependency_injector import containers, providers

from .core import (
    AssessmentScorer,
    RoundProgressionEngine,
    ScheduleGenerator,
    ScorerRegistry,
    ScreeningEvaluator,
)
from .core.evaluators.screening import ScreeningConfig
from .core.scheduling import ScheduleConfig
from .events import LoggingEventEmitter
from .pipeline import HiringPipeline
from .stores import InMemoryApplicationStore, InMemoryCatalog


def _max_retries(value: object) -> int:
    return 3 if value is None else int(value)


class PipelineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    catalog = providers.Singleton(InMemoryCatalog)
    application_store = providers.Singleton(InMemoryApplicationStore)
    event_emitter = providers.Singleton(LoggingEventEmitter)

    screening_evaluator = providers.Singleton(ScreeningEvaluator, questions=catalog)
    assessment_scorer = providers.Singleton(
        AssessmentScorer,
        questions=catalog,
        assessments=catalog,
    )

    scorer_registry = providers.Singleton(
        ScorerRegistry,
        scorers=providers.Dict(
            screening=screening_evaluator,
            assessment=assessment_scorer,
        ),
    )

    schedule_generator = providers.Singleton(ScheduleGenerator)

    engine = providers.Singleton(
        RoundProgressionEngine,
        jobs=catalog,
        store=application_store,
        scorers=scorer_registry,
        schedule_generator=schedule_generator,
        emitter=event_emitter,
        max_retries=config.max_retries.as_(_max_retries),
    )

    pipeline = providers.Factory(HiringPipeline, engine=engine)


def create_container(*, settings: dict | None = None) -> PipelineContainer:
    """Instantiate container with optional overrides."""

    container = PipelineContainer()

    if not settings:
        return container

    engine_settings = settings.get("engine", {}) if isinstance(settings, dict) else {}
    if engine_settings:
        container.config.override(engine_settings)

    screening_settings = settings.get("screening", {}) if isinstance(settings, dict) else {}
    if screening_settings:
        screening_config = ScreeningConfig(**screening_settings)
        container.screening_evaluator.override(
            providers.Singleton(
                ScreeningEvaluator,
                questions=container.catalog,
                config=screening_config,
            )
        )

    schedule_settings = settings.get("schedule", {}) if isinstance(settings, dict) else {}
    if schedule_settings:
        schedule_config = ScheduleConfig(**schedule_settings)
        container.schedule_generator.override(
            providers.Singleton(ScheduleGenerator, config=schedule_config)
        )

    return container
