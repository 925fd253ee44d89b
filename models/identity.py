"""Identity collaborator: supplies the namespace used for archive storage."""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from config.settings import Settings

GUEST_NAMESPACE = "guest"


@runtime_checkable
class Identity(Protocol):
    def namespace(self) -> Optional[str]:
        """Return a stable scoping key, or None when persistence is unavailable."""
        ...


@dataclass
class StaticIdentity:
    """Identity fixed at construction time.

    A signed-in user scopes storage to their id. With authentication
    disabled everything lives under the shared guest namespace; with
    authentication enabled and nobody signed in there is no namespace.
    """
    user_id: Optional[str] = None
    auth_enabled: bool = False

    def namespace(self) -> Optional[str]:
        if self.user_id:
            return self.user_id
        if not self.auth_enabled:
            return GUEST_NAMESPACE
        return None

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticIdentity":
        return cls(user_id=settings.user_id, auth_enabled=settings.auth_enabled)
