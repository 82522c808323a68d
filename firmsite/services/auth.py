import hmac
import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from firmsite.adapters.auth.tokens import JWTTokenCodec, verify_password
from firmsite.domain.errors import AuthError
from firmsite.ports.clock import ClockPort

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Identity:
    username: str
    role: str
    issued_at: datetime


class AccessGate:
    """Single-admin credential check and signed, expiring tokens."""

    def __init__(
        self,
        admin_username: str,
        admin_password_hash: str,
        codec: JWTTokenCodec,
        clock: ClockPort,
        ttl_minutes: int = 24 * 60,
    ):
        self.admin_username = admin_username
        self.admin_password_hash = admin_password_hash
        self.codec = codec
        self.clock = clock
        self.ttl = timedelta(minutes=ttl_minutes)

    def authenticate(self, username: str, password: str) -> str:
        if not username or not password:
            raise AuthError("Username and password are required")

        user_ok = hmac.compare_digest(username.encode(), self.admin_username.encode())
        # Always run the hash check so timing does not reveal the username
        password_ok = verify_password(password, self.admin_password_hash)
        if not (user_ok and password_ok):
            logger.info("Rejected login for %r", username)
            raise AuthError("Invalid credentials")

        return self.codec.encode(username, ADMIN_ROLE, self.clock.now_utc())

    def verify(self, token: str | None) -> Identity:
        if not token:
            raise AuthError("No token provided")

        payload = self.codec.decode(token)
        if payload is None:
            raise AuthError("Invalid token")

        subject = payload.get("sub")
        role = payload.get("role")
        iat = payload.get("iat")
        if not isinstance(subject, str) or role != ADMIN_ROLE or not isinstance(iat, int | float):
            raise AuthError("Invalid token")

        issued_at = datetime.fromtimestamp(iat, UTC)
        now = self.clock.now_utc()
        if now - issued_at > self.ttl:
            raise AuthError("Token expired")
        if issued_at - now > timedelta(minutes=5):
            raise AuthError("Invalid token")

        return Identity(username=subject, role=role, issued_at=issued_at)
