"""
Component Wiring for Finance Tracker

Builds the object graph the presentation layer works with:
identity provider -> remote store -> notifier -> state manager.

DESIGN DECISION: The state manager is constructed explicitly and handed
to the presentation layer. There is no module-level instance to look up.
"""

from typing import Optional

import structlog

from fintrack.config import get_settings
from fintrack.notifications import Notifier, configure_stdlib_logging
from fintrack.services.identity import LocalIdentityProvider
from fintrack.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    InMemoryTransactionStore,
    TransactionStoreInterface,
)
from fintrack.state import TransactionStateManager


logger = structlog.get_logger(__name__)


def create_store(use_storage: bool = True) -> TransactionStoreInterface:
    """
    Create the remote store, falling back to memory when unconfigured.

    Args:
        use_storage: Whether to use Google Sheets.
                     Set to False for testing without storage.
    """
    if not use_storage:
        return InMemoryTransactionStore()

    try:
        return GoogleSheetsTransactionStore(GoogleSheetsClient())
    except Exception as e:
        # Storage not configured - continue without it
        logger.warning("remote_store_unavailable", error=str(e))
        return InMemoryTransactionStore()


def create_app_components(
    use_storage: bool = True,
    identity: Optional[str] = None,
) -> tuple[TransactionStateManager, LocalIdentityProvider, Notifier]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
        identity: Identity to start signed in as. When given, this must be
                  called from a running event loop because the initial
                  load starts immediately.

    Returns:
        (state_manager, identity_provider, notifier)
    """
    app_settings = get_settings().app
    configure_stdlib_logging(app_settings.log_level)

    notifier = Notifier(history_size=app_settings.notification_history_size)
    identity_provider = LocalIdentityProvider(identity)
    store = create_store(use_storage)

    manager = TransactionStateManager.create(
        identity_provider=identity_provider,
        store=store,
        notifier=notifier,
    )

    logger.info(
        "app_components_created",
        store=type(store).__name__,
        environment=app_settings.app_environment,
    )
    return manager, identity_provider, notifier
