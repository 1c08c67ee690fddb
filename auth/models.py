"""
auth/models.py -- Domain dataclasses for admin identities.

Pattern: Data class (pure data container, zero logic beyond (de)serializing
to the session dict). Routes and dependencies do the work.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

# Session key holding the serialized AdminPrincipal. Written by the local
# login routes here and by the OAuth callback collaborator.
SESSION_KEY = "admin_auth"

LOCAL_PRINCIPAL_ID = "local-dev"


@dataclass
class AdminPrincipal:
    """Represents whoever is operating the admin console for this request.

    local_bypass is True when the identity was granted by the local bypass
    gate rather than by an OAuth login. guild_ids is filled in by the OAuth
    collaborator; local principals carry none and are treated as owners.
    """

    id: str
    username: str
    global_name: str = ""
    avatar: str = ""
    guild_ids: list[str] = field(default_factory=list)
    logged_in_at: Optional[float] = None
    local_bypass: bool = False

    def to_session(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_session(cls, data: Any) -> Optional["AdminPrincipal"]:
        """Rebuild a principal from session data. Returns None on any malformed entry."""
        if not isinstance(data, dict):
            return None
        principal_id = data.get("id")
        username = data.get("username")
        if not isinstance(principal_id, str) or not principal_id or not isinstance(username, str):
            return None
        guild_ids = data.get("guild_ids")
        logged_in_at = data.get("logged_in_at")
        return cls(
            id=principal_id,
            username=username,
            global_name=str(data.get("global_name") or ""),
            avatar=str(data.get("avatar") or ""),
            guild_ids=[str(g) for g in guild_ids] if isinstance(guild_ids, list) else [],
            logged_in_at=float(logged_in_at) if isinstance(logged_in_at, (int, float)) else None,
            local_bypass=data.get("local_bypass") is True,
        )


def local_bypass_principal() -> AdminPrincipal:
    """The identity handed to requests that pass the local bypass gate."""
    return AdminPrincipal(
        id=LOCAL_PRINCIPAL_ID,
        username=LOCAL_PRINCIPAL_ID,
        global_name="Local Dev",
        logged_in_at=time.time(),
        local_bypass=True,
    )
