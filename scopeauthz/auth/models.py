"""Principal data model.

The identity context handed to the authorization engine. Claims are
already extracted and verified upstream; this package never sees tokens.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Principal(BaseModel):
    """An authenticated principal identified by scope and group claims.

    Read-only: the engine never mutates a principal.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique principal identifier")
    scopes: tuple[str, ...] = Field(default_factory=tuple, description="Scope claims, in claim order")
    groups: tuple[str, ...] = Field(default_factory=tuple, description="Group memberships")
    email: str | None = Field(default=None, description="Principal's email")
    name: str | None = Field(default=None, description="Principal's display name")
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("scopes", "groups", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        # Absent claim lists are normal, not an error
        if value is None:
            return ()
        return value

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Principal":
        """Create a Principal from a decoded claims mapping.

        Accepts either a ``scopes`` list or an OAuth2-style ``scope``
        string of space-delimited values. The identifier comes from
        ``sub`` when present, otherwise ``id``.
        """
        scopes = claims.get("scopes")
        if scopes is None:
            raw_scope = claims.get("scope")
            if isinstance(raw_scope, str):
                scopes = raw_scope.split()
            else:
                scopes = raw_scope

        known = {"sub", "id", "scope", "scopes", "groups", "email", "name"}
        return cls(
            id=claims.get("sub") or claims.get("id") or "",
            scopes=scopes,
            groups=claims.get("groups"),
            email=claims.get("email"),
            name=claims.get("name"),
            metadata={k: v for k, v in claims.items() if k not in known},
        )
