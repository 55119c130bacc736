"""Identity for favorites access.

Sign-in either trusts a custom token (its subject becomes the user id) or
creates an anonymous id. Until sign-in completes ``user_id`` is None and
favorites calls fail with ``NotAuthenticated`` instead of crashing.
"""

from __future__ import annotations

import logging
import uuid
from typing import Optional

logger = logging.getLogger("fxconvert.identity")


class IdentityService:
    def __init__(self) -> None:
        self.user_id: Optional[str] = None
        self.anonymous = True

    @property
    def is_ready(self) -> bool:
        return self.user_id is not None

    def sign_in(self, token: Optional[str] = None) -> str:
        if token:
            # "<subject>" or "<subject>.<anything>"
            subject = token.split(".", 1)[0].strip()
            if not subject:
                raise ValueError("auth token has an empty subject")
            self.user_id = subject
            self.anonymous = False
        else:
            self.user_id = uuid.uuid4().hex
            self.anonymous = True
        logger.info("authenticated user: %s", self.user_id)
        return self.user_id

    def display_name(self) -> str:
        if not self.user_id:
            return "User: Anon"
        return f"User: {self.user_id[:8]}..."
