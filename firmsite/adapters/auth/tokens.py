from datetime import datetime
from typing import Any, cast

from jose import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        result: bool = pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Malformed or unknown hash format
        return False
    return result


def get_password_hash(password: str) -> str:
    result: str = pwd_context.hash(password)
    return result


class JWTTokenCodec:
    """Signs and decodes admin tokens. Expiry is judged by the caller's clock."""

    def __init__(self, secret_key: str, algorithm: str = "HS256") -> None:
        self.secret_key = secret_key
        self.algorithm = algorithm

    def encode(self, subject: str, role: str, issued_at: datetime) -> str:
        claims = {"sub": subject, "role": role, "iat": int(issued_at.timestamp())}
        encoded: str = jwt.encode(claims, self.secret_key, algorithm=self.algorithm)
        return encoded

    def decode(self, token: str) -> dict[str, Any] | None:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except jwt.JWTError:
            return None
        return cast(dict[str, Any], payload)
