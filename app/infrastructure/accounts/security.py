"""
Adapters: password hashing and session tokens.

BcryptPasswordHasher implements PasswordHasher with passlib.
JwtTokenService implements TokenService with python-jose (HS256 by
default). Neither ever logs a password, hash, or token.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.domain.accounts.entities import SessionClaims
from app.domain.accounts.errors import InvalidTokenError
from app.domain.accounts.ports import PasswordHasher, TokenService


class BcryptPasswordHasher(PasswordHasher):
    """Salted bcrypt hashes with a configurable work factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Return False for a mismatch or an unrecognised stored hash."""
        if not password_hash:
            return False
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            return False


class JwtTokenService(TokenService):
    """Signed bearer tokens carrying ``accId``, ``email`` and ``phone``."""

    def __init__(
        self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60 * 24
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expires_minutes)

    def issue(self, claims: SessionClaims) -> str:
        expire = datetime.now(timezone.utc) + self._expires
        payload = {
            "accId": claims.acc_id,
            "email": claims.email,
            "phone": claims.phone,
            "exp": expire,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> SessionClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            # Token is invalid (expired, wrong signature, etc.)
            raise InvalidTokenError() from None

        acc_id = payload.get("accId")
        if not acc_id:
            raise InvalidTokenError("Token carries no account")
        return SessionClaims(
            acc_id=acc_id, email=payload.get("email"), phone=payload.get("phone")
        )
