import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import AuthError


@dataclass(frozen=True)
class TokenInfo:
    """App-level bearer token issued by the client-credentials flow."""

    access_token: str
    token_type: str
    expires_at: float
    scope: Optional[str] = None

    @staticmethod
    def from_spotify_token_response(payload: Dict[str, Any], *, now: Optional[float] = None) -> "TokenInfo":
        """Convert Spotify token response JSON into TokenInfo.

        Spotify returns:
        - access_token
        - token_type ("Bearer")
        - expires_in (seconds)
        """

        if not isinstance(payload, dict):
            raise AuthError(f"Spotify token response was not an object: {payload!r}")

        access_token = str(payload.get("access_token") or "").strip()
        if not access_token:
            raise AuthError(f"Spotify token response has no access_token: {payload!r}")

        now_ts = float(time.time() if now is None else now)
        try:
            expires_in = float(payload.get("expires_in", 0))
        except (TypeError, ValueError) as e:
            raise AuthError(f"Spotify token response has an invalid expires_in: {payload!r}") from e

        return TokenInfo(
            access_token=access_token,
            token_type=str(payload.get("token_type") or "Bearer"),
            expires_at=now_ts + expires_in,
            scope=payload.get("scope"),
        )

    @property
    def authorization_header(self) -> str:
        # Spotify answers "bearer" in lower case; the API only accepts "Bearer".
        token_type = "Bearer" if self.token_type.lower() == "bearer" else self.token_type
        return f"{token_type} {self.access_token}"

    def is_expired(self, *, skew_seconds: int = 60, now: Optional[float] = None) -> bool:
        now_ts = float(time.time() if now is None else now)
        return now_ts >= float(self.expires_at) - float(skew_seconds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "token_type": self.token_type,
            "expires_at": self.expires_at,
            "scope": self.scope,
        }
