"""
Notification Engine

Wires the rule evaluator to the notification store.

FLOW:
1. The host hands over a snapshot provider (a callable returning the
   latest StateSnapshot)
2. evaluate() builds candidates from the snapshot
3. The store inserts the ones it has not seen (dedupe by id)

Evaluation is triggered two ways:
- on_state_change(): the host calls it whenever a watched slice changes
- start(): a background asyncio task re-evaluates every
  evaluation_interval_seconds, catching date-based conditions that become
  true without any state change ("due today"). Each periodic pass runs in
  a worker thread; the store lock makes that safe.

stop() cancels the background task and waits for it, so no timer outlives
the engine.
"""

import asyncio
from typing import Callable, Optional

import structlog

from household_alerts.audit import AuditLogger, create_correlation_id
from household_alerts.config import EngineSettings, RuleSettings, get_settings
from household_alerts.models.entities import StateSnapshot
from household_alerts.models.notification import Notification
from household_alerts.rules import RuleEvaluator
from household_alerts.services.storage import (
    InMemoryAuditStorage,
    LocalFileNotificationStorage,
)
from household_alerts.store import NotificationStore


logger = structlog.get_logger(__name__)

SnapshotProvider = Callable[[], StateSnapshot]


class NotificationEngine:
    """
    Runs evaluation passes and merges their results into a store.

    The engine owns no notification state; the store does.
    """

    def __init__(
        self,
        store: NotificationStore,
        snapshot_provider: SnapshotProvider,
        evaluator: Optional[RuleEvaluator] = None,
        settings: Optional[EngineSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._snapshot_provider = snapshot_provider
        self._settings = settings or get_settings().engine
        self._audit_logger = audit_logger
        self._evaluator = evaluator or RuleEvaluator(
            engine_settings=self._settings,
            audit_logger=audit_logger,
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def store(self) -> NotificationStore:
        return self._store

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def evaluate(self) -> list[Notification]:
        """
        Run one evaluation pass against the latest snapshot.

        Returns:
            The notifications that were new to the store
        """
        snapshot = self._snapshot_provider()
        correlation_id = create_correlation_id()

        candidates = self._evaluator.evaluate(
            snapshot.finance,
            snapshot.life,
            language=snapshot.language,
            correlation_id=correlation_id,
        )
        if not candidates:
            return []

        inserted = self._store.add_notifications(candidates)
        logger.info(
            "evaluation_merged",
            candidates=len(candidates),
            inserted=len(inserted),
            correlation_id=str(correlation_id),
        )
        return inserted

    def on_state_change(self) -> list[Notification]:
        """Re-evaluate immediately after the host's state changed."""
        return self.evaluate()

    def start(self) -> None:
        """
        Start periodic evaluation on the running event loop.

        Evaluates once right away, then every evaluation_interval_seconds.
        Calling start() on a running engine does nothing.
        """
        if self.is_running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_periodic())
        logger.info("engine_started", interval=self._settings.evaluation_interval_seconds)
        if self._audit_logger:
            self._audit_logger.log_engine_started(self._settings.evaluation_interval_seconds)

    async def stop(self) -> None:
        """Cancel periodic evaluation and wait until the task has finished."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("engine_stopped")
        if self._audit_logger:
            self._audit_logger.log_engine_stopped()

    async def _run_periodic(self) -> None:
        interval = self._settings.evaluation_interval_seconds
        while True:
            try:
                # Storage retries sleep between attempts, so the pass runs in a worker thread.
                await asyncio.to_thread(self.evaluate)
            except Exception as e:
                # One failed pass must not kill the timer; the next one retries.
                logger.exception("periodic_evaluation_failed", error=str(e))
                if self._audit_logger:
                    self._audit_logger.log_error(
                        error_type=type(e).__name__,
                        error_message=str(e),
                    )
            await asyncio.sleep(interval)

    async def __aenter__(self) -> "NotificationEngine":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


def create_engine(
    snapshot_provider: SnapshotProvider,
    persist: Optional[bool] = None,
    rule_settings: Optional[RuleSettings] = None,
    engine_settings: Optional[EngineSettings] = None,
) -> NotificationEngine:
    """
    Factory function to create a fully wired engine.

    Args:
        snapshot_provider: Returns the host's latest state
        persist: Keep notifications in the local JSON store.
                Defaults to the `persist` engine setting.

    Returns:
        A NotificationEngine with its own store and audit logger
    """
    engine_settings = engine_settings or get_settings().engine
    rule_settings = rule_settings or get_settings().rules
    if persist is None:
        persist = engine_settings.persist

    audit_logger = AuditLogger(InMemoryAuditStorage(engine_settings.audit_buffer_size))
    storage = LocalFileNotificationStorage(path=engine_settings.storage_path) if persist else None

    store = NotificationStore(storage=storage, audit_logger=audit_logger)
    evaluator = RuleEvaluator(
        settings=rule_settings,
        engine_settings=engine_settings,
        audit_logger=audit_logger,
    )

    return NotificationEngine(
        store=store,
        snapshot_provider=snapshot_provider,
        evaluator=evaluator,
        settings=engine_settings,
        audit_logger=audit_logger,
    )
