from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from apps.common import get_logger

logger = get_logger(__name__).bind(component="auth", service="SessionService")


class SessionService:
    def __init__(self, token_class=RefreshToken):
        self.token_class = token_class
        self.logger = logger

    def logout(
        self, refresh_token: Optional[str], actor_id: Optional[int]
    ) -> Optional[Tuple[str, str, Optional[Dict[str, Any]]]]:
        """Blacklist the refresh token. Returns an error tuple on failure."""
        if not refresh_token:
            self.logger.warning("Logout rejected: missing refresh token", actor_id=actor_id)
            return ("VALIDATION_ERROR", "Invalid token", {"refresh": None})
        try:
            token = self.token_class(refresh_token)
            token.blacklist()
        except TokenError as exc:
            self.logger.warning(
                "Logout failed: token error", actor_id=actor_id, error=str(exc)
            )
            return ("VALIDATION_ERROR", "Invalid token", {"error": str(exc)})
        self.logger.info("User logged out", actor_id=actor_id)
        return None
