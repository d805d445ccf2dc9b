"""Caller identity passed explicitly into every use case."""

from __future__ import annotations

from dataclasses import dataclass

from mart.domain.exceptions import Unauthorized


@dataclass(frozen=True)
class CallerContext:
    """Who is calling, and the bearer credential to call the backend with.

    Issued and refreshed by the external session collaborator; this
    package only reads it.
    """

    user_id: str | None
    access_token: str | None

    def require(self) -> CallerContext:
        """Raise ``Unauthorized`` unless both identity and token are present."""
        if not self.access_token:
            raise Unauthorized("No access token; please log in")
        if not self.user_id:
            raise Unauthorized("No caller identity; please log in")
        return self

    @property
    def authorization_header(self) -> dict[str, str]:
        self.require()
        return {"Authorization": f"Bearer {self.access_token}"}

    def __repr__(self) -> str:
        token = "***" if self.access_token else None
        return f"CallerContext(user_id={self.user_id!r}, access_token={token!r})"
