"""
Identity Provider

The tracker does not authenticate anyone itself. It only needs to know who
is signed in right now and to hear about it when that changes. Any auth
backend can sit behind IdentityProviderInterface; LocalIdentityProvider is
the in-process implementation used by the app factory and the tests.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional

import structlog


logger = structlog.get_logger(__name__)

IdentityListener = Callable[[Optional[str]], None]


class IdentityProviderInterface(ABC):
    """Source of the current authenticated identity."""

    @property
    @abstractmethod
    def current_identity(self) -> Optional[str]:
        """Id of the signed-in identity, or None when signed out."""
        pass

    @abstractmethod
    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """
        Call `listener` with the new identity on every change.

        Returns:
            A callable that removes the listener
        """
        pass


class LocalIdentityProvider(IdentityProviderInterface):
    """In-process identity holder with explicit sign-in and sign-out."""

    def __init__(self, identity: Optional[str] = None):
        self._identity = identity
        self._listeners: list[IdentityListener] = []

    @property
    def current_identity(self) -> Optional[str]:
        return self._identity

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, identity: str) -> None:
        if not identity:
            raise ValueError("Identity must be a non-empty id")
        self._set(identity)

    def sign_out(self) -> None:
        self._set(None)

    def _set(self, identity: Optional[str]) -> None:
        if identity == self._identity:
            return
        self._identity = identity
        logger.info("identity_changed", identity=identity)
        for listener in list(self._listeners):
            listener(identity)
