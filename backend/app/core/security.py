import hmac
import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from app.core.config import Settings
from app.core.errors import ServerMisconfigured, Unauthorized

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class CredentialVerifier:
    """Issues and checks the admin bearer token.

    There is a single shared admin account configured through settings. Tokens
    are stateless HS256 JWTs; nothing is stored server side, so there is no
    revocation or refresh.
    """

    def __init__(
        self,
        admin_username: str | None,
        admin_password_hash: str | None,
        secret: str | None,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=8),
    ) -> None:
        self.admin_username = admin_username
        self.admin_password_hash = admin_password_hash
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialVerifier":
        return cls(
            admin_username=settings.admin_username,
            admin_password_hash=settings.admin_password_hash,
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(hours=settings.token_ttl_hours),
        )

    def issue(self, username: str, password: str) -> str:
        if not self.admin_username or not self.admin_password_hash or not self.secret:
            logger.error("Admin credentials or signing secret are not configured")
            raise ServerMisconfigured("Server configuration error.")

        # the hash is checked even for a wrong username so both failures cost the same
        username_ok = hmac.compare_digest(username.encode("utf-8"), self.admin_username.encode("utf-8"))
        try:
            # bcrypt only looks at the first 72 bytes
            password_ok = bcrypt.checkpw(password.encode("utf-8")[:72], self.admin_password_hash.encode("utf-8"))
        except ValueError as exc:
            logger.error("Configured admin password hash is not a bcrypt hash")
            raise ServerMisconfigured("Server configuration error.") from exc

        if not (username_ok and password_ok):
            logger.info("Rejected admin login")
            raise Unauthorized("Invalid credentials")

        now = datetime.now(timezone.utc)
        claims = {"role": ADMIN_ROLE, "iat": now, "exp": now + self.ttl}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> dict:
        if not self.secret:
            raise ServerMisconfigured("Server configuration error.")
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm], options={"require": ["exp"]})
        except jwt.ExpiredSignatureError as exc:
            raise Unauthorized("Authentication failed: token expired") from exc
        except jwt.PyJWTError as exc:
            raise Unauthorized("Authentication failed: invalid token") from exc


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Authentication failed: missing or invalid Authorization header")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise Unauthorized("Authentication failed: missing or invalid Authorization header")
    return token
