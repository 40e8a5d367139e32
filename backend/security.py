"""
Identity and token services.

`PasswordHasher` wraps a bcrypt `CryptContext` and `TokenService` signs
HS256 JWTs carrying `sub` (user id) and `role`. Both read their secrets
and cost settings from the `Settings` they are constructed with.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from errors import UnauthorizedError
from models import Principal, Role
from settings import Settings

ALGO = "HS256"


class PasswordHasher:
    """One-way bcrypt hashing with the configured work factor."""

    def __init__(self, config: Settings):
        self.pwd = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=config.bcrypt_work_factor,
        )

    def hash(self, plaintext: str) -> str:
        return self.pwd.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        try:
            return self.pwd.verify(plaintext, hashed)
        except ValueError:
            # stored value is not a recognisable hash
            return False


class TokenService:
    """Signed session tokens carrying subject id and role."""

    def __init__(self, config: Settings):
        self.secret = config.secret_key
        self.expires = timedelta(minutes=config.jwt_expires_min)

    def issue(self, subject_id: str, role: Role | str) -> str:
        exp = datetime.now(timezone.utc) + self.expires
        payload = {"sub": subject_id, "role": Role(role).value, "exp": exp}
        return jwt.encode(payload, self.secret, algorithm=ALGO)

    def verify(self, token: str) -> Principal:
        try:
            data = jwt.decode(token, self.secret, algorithms=[ALGO])
        except JWTError:
            raise UnauthorizedError("Invalid access token.")
        if not data.get("sub") or not data.get("role"):
            raise UnauthorizedError("Invalid access token.")
        try:
            role = Role(data["role"])
        except ValueError:
            raise UnauthorizedError("Invalid access token.")
        return Principal(subject_id=data["sub"], role=role)
