"\"\"\"Dependency injection container for the eligibility system.\"\"\""

from __future__ import annotations

from typing import Any, Callable

import pendulum
from dependency_injector import containers, providers

from .audit import AuditStore
from .config import RuleConfigEditor, RuleConfigStore, RuleRegistry
from .core import (
    EligibilityEngine,
    ExceptionGate,
    OutcomeResolver,
    SoftValidator,
    StrictValidator,
)
from .export import AuditExporter
from .schemas.config import AppConfig
from .session import EvaluationSession


class AdmitGuardContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    now_provider = providers.Object(pendulum.now)

    rule_store = providers.Singleton(RuleConfigStore, path=config.rules_path)
    rule_registry = providers.Singleton(RuleRegistry.from_store, store=rule_store)
    rule_editor = providers.Singleton(
        RuleConfigEditor,
        registry=rule_registry,
        store=rule_store,
    )

    strict_validator = providers.Singleton(StrictValidator)
    soft_validator = providers.Singleton(SoftValidator)
    exception_gate = providers.Singleton(ExceptionGate)
    outcome_resolver = providers.Singleton(OutcomeResolver)

    engine = providers.Singleton(
        EligibilityEngine,
        registry=rule_registry,
        strict_validator=strict_validator,
        soft_validator=soft_validator,
        exception_gate=exception_gate,
        outcome_resolver=outcome_resolver,
        now_provider=now_provider,
        timezone=config.timezone,
    )

    audit_store = providers.Singleton(AuditStore, path=config.audit_log_path)
    exporter = providers.Singleton(AuditExporter)

    session = providers.Factory(
        EvaluationSession,
        engine=engine,
        audit_store=audit_store,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    now_provider: Callable[[], Any] | None = None,
) -> AdmitGuardContainer:
    """Instantiate container with optional overrides."""

    container = AdmitGuardContainer()

    merged = AppConfig().to_settings()
    if isinstance(settings, dict):
        merged.update({key: value for key, value in settings.items() if value is not None})
    container.config.from_dict(merged)

    if now_provider is not None:
        container.now_provider.override(providers.Object(now_provider))

    return container
