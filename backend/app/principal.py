"""Principal for authenticated API callers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParentPrincipal:
    """
    An authenticated parent.

    Resolved once per request from the bearer token and passed explicitly to
    the services that need it.
    """

    parent_id: int
    email: str = ""

    @property
    def id(self) -> int:
        """Account id, used for ownership checks and audit trails."""
        return self.parent_id
