"""Identity services package."""

from fintrack.services.identity.provider import (
    IdentityListener,
    IdentityProviderInterface,
    LocalIdentityProvider,
)

__all__ = [
    "IdentityListener",
    "IdentityProviderInterface",
    "LocalIdentityProvider",
]
