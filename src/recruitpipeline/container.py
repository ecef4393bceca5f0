"""Dependency injection container for the recruitment pipeline."""

from __future__ import annotations

from typing import Any

from dependency_injector import containers, providers

from .core import (
    AdvancementConfig,
    AutoSaveConfig,
    DecisionStore,
    DecisionStoreConfig,
    EvaluationSummaryService,
    RankingConfig,
    RankingEngine,
    RoundAdvancementEngine,
    ScoreAggregator,
)
from .notifications import HTTPNotifier, NullNotifier
from .service import RecruitmentService
from .store import InMemoryRecordStore


class PipelineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    store = providers.Singleton(InMemoryRecordStore)
    notifier = providers.Singleton(NullNotifier)
    audit_logger = providers.Object(None)
    scheduler = providers.Object(None)

    aggregator = providers.Singleton(ScoreAggregator)
    ranking = providers.Singleton(RankingEngine, aggregator=aggregator)
    decision_store = providers.Singleton(DecisionStore, store)
    summaries = providers.Singleton(EvaluationSummaryService, store)
    advancement = providers.Singleton(
        RoundAdvancementEngine,
        store,
        decision_store,
        notifier=notifier,
        audit_logger=audit_logger,
    )
    autosave_config = providers.Singleton(AutoSaveConfig)

    service = providers.Factory(
        RecruitmentService,
        store=store,
        aggregator=aggregator,
        ranking=ranking,
        decisions=decision_store,
        summaries=summaries,
        advancement=advancement,
        autosave_config=autosave_config,
        scheduler=scheduler,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    store: Any | None = None,
    notifier: Any | None = None,
    audit_logger: Any | None = None,
    scheduler: Any | None = None,
) -> PipelineContainer:
    """Instantiate container with optional overrides."""

    container = PipelineContainer()

    if store is not None:
        container.store.override(providers.Object(store))
    if notifier is not None:
        container.notifier.override(providers.Object(notifier))
    if audit_logger is not None:
        container.audit_logger.override(providers.Object(audit_logger))
    if scheduler is not None:
        container.scheduler.override(providers.Object(scheduler))

    settings = settings if isinstance(settings, dict) else {}

    if "ranking" in settings:
        ranking_config = RankingConfig(**settings["ranking"])
        container.ranking.override(
            providers.Singleton(RankingEngine, config=ranking_config, aggregator=container.aggregator)
        )

    if "decisions" in settings:
        decision_config = DecisionStoreConfig(**settings["decisions"])
        container.decision_store.override(
            providers.Singleton(DecisionStore, container.store, config=decision_config)
        )

    if "advancement" in settings:
        advancement_config = AdvancementConfig(**settings["advancement"])
        container.advancement.override(
            providers.Singleton(
                RoundAdvancementEngine,
                container.store,
                container.decision_store,
                notifier=container.notifier,
                audit_logger=container.audit_logger,
                config=advancement_config,
            )
        )

    if "autosave" in settings:
        container.autosave_config.override(
            providers.Object(AutoSaveConfig(**settings["autosave"]))
        )

    if "notifier" in settings and notifier is None:
        container.notifier.override(
            providers.Singleton(HTTPNotifier, **settings["notifier"])
        )

    return container
