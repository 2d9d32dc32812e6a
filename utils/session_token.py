"""
Signed session tokens issued after a completed login.
Tokens are JWTs whose subject is the username; nothing is stored server-side.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256", ttl_minutes: Optional[int] = None):
        if not secret:
            raise ValueError("A signing secret is required for session tokens")
        self.secret = secret
        self.algorithm = algorithm
        self.ttl_minutes = ttl_minutes

    @classmethod
    def from_config(cls, config):
        return cls(
            secret=config.get("JWT_SECRET_KEY") or config.get("SECRET_KEY"),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            ttl_minutes=config.get("JWT_TTL_MINUTES"),
        )

    def issue(self, username: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {"sub": username, "iat": now}
        if self.ttl_minutes:
            claims["exp"] = now + timedelta(minutes=self.ttl_minutes)
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """
        Validate signature (and exp when present) and return the claims.
        Raises jwt.InvalidTokenError (or a subclass) on any failure.
        """
        return jwt.decode(
            token,
            self.secret,
            algorithms=[self.algorithm],
            options={"require": ["sub"]},
        )

    def subject(self, token: str) -> str:
        return self.decode(token)["sub"]
