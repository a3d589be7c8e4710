from dataclasses import dataclass
from typing import Callable, Optional

from core.config_loader import AppConfig
from core.matcher import MatchOrchestrator, NotificationQueue
from core.scorer import ScoringEngine


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access goes through the
    store, which opens a fresh unit of work per call.
    """
    config: AppConfig
    store: "SqlMatchingStore"
    orchestrator: MatchOrchestrator
    dispatcher: Optional["ChannelDispatcher"] = None
    notification_queue: Optional[NotificationQueue] = None
    digest_service: Optional["DigestService"] = None

    @classmethod
    def build(cls, config: AppConfig, uow_factory: Optional[Callable] = None) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            uow_factory: Optional unit-of-work factory, defaults to tender_uow

        Returns:
            Fully wired AppContext instance
        """
        from database.store import SqlMatchingStore
        from database.uow import tender_uow

        uow_factory = uow_factory or tender_uow
        matching_config = config.matching
        store = SqlMatchingStore(
            uow_factory=uow_factory,
            tender_limit=matching_config.tender_limit if matching_config else None
        )

        scoring_engine = ScoringEngine(matching_config.scorer if matching_config else None)

        # Notification stack (only if enabled)
        dispatcher = None
        notification_queue = None
        digest_service = None
        if config.notifications and config.notifications.enabled:
            dispatcher, notification_queue, digest_service = cls._build_notification_stack(
                config, store, uow_factory
            )

        orchestrator = MatchOrchestrator(
            profile_store=store,
            tender_store=store,
            notification_queue=notification_queue,
            scoring_engine=scoring_engine
        )

        return cls(
            config=config,
            store=store,
            orchestrator=orchestrator,
            dispatcher=dispatcher,
            notification_queue=notification_queue,
            digest_service=digest_service
        )

    @staticmethod
    def _build_notification_stack(config: AppConfig, store, uow_factory: Callable):
        """Build dispatcher, queue and digest service from notification config."""
        from notification import ChannelDispatcher, DigestService, build_notification_queue

        notification_config = config.notifications
        dispatcher = ChannelDispatcher(
            timeout_seconds=notification_config.dispatch_timeout_seconds,
            base_url=notification_config.base_url
        )
        notification_queue = build_notification_queue(notification_config, store, dispatcher)
        digest_service = DigestService(
            uow_factory=uow_factory,
            store=store,
            dispatcher=dispatcher,
            base_url=notification_config.base_url,
            max_listed=notification_config.digest_max_matches
        )
        return dispatcher, notification_queue, digest_service

    def close(self) -> None:
        """Drain local deliveries."""
        shutdown = getattr(self.notification_queue, 'shutdown', None)
        if shutdown is not None:
            shutdown(wait=True)
