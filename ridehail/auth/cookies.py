"""
RideHail - Session Cookie Policy

Maps an access token onto the "token" cookie and defines its logout
counterpart. attach() and clear() share every scoping attribute: a
browser only overwrites a cookie whose name, path and flags match.
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from starlette.responses import Response

from ridehail.config import Settings


COOKIE_NAME = "token"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class SessionCookiePolicy:
    """
    Attributes:
        secure: Send the Secure flag (production only)
        max_age: Cookie lifetime in seconds, equal to the access token TTL
        name: Cookie name
        path: Cookie path
        same_site: SameSite attribute
    """
    secure: bool
    max_age: int
    name: str = COOKIE_NAME
    path: str = "/"
    same_site: str = "strict"

    @classmethod
    def from_settings(cls, settings: Settings, max_age: int) -> "SessionCookiePolicy":
        return cls(secure=settings.is_production, max_age=max_age)

    def attach(self, response: Response, token: str) -> None:
        """Set the session cookie, replacing any earlier one."""
        response.set_cookie(
            key=self.name,
            value=token,
            max_age=self.max_age,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )

    def clear(self, response: Response) -> None:
        """Overwrite the session cookie with an empty, already-expired one."""
        response.set_cookie(
            key=self.name,
            value="",
            expires=EPOCH,
            path=self.path,
            secure=self.secure,
            httponly=True,
            samesite=self.same_site,
        )
