from datetime import datetime, timedelta, timezone
import logging
from typing import Optional

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict, Field

from canteen.enums.user_role import UserRole

DEFAULT_TOKEN_LIFETIME = timedelta(days=7)
DEFAULT_BCRYPT_ROUNDS = 10


class Principal(BaseModel):
    """Identity carried inside every session token."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(alias="userId")
    email: str
    role: UserRole

    def claims(self) -> dict:
        return {"userId": self.user_id, "email": self.email, "role": self.role.value}


class CredentialCodec:
    """Password hashing and signed session tokens.

    The signing secret is injected; nothing here reads the environment.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        token_lifetime: timedelta = DEFAULT_TOKEN_LIFETIME,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.algorithm = algorithm
        self.token_lifetime = token_lifetime
        self.bcrypt_rounds = bcrypt_rounds

    def hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        # bcrypt raises ValueError for a malformed hash; a mismatch is just False.
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))

    def issue_token(self, principal: Principal, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = principal.claims()
        payload["iat"] = int(issued_at.timestamp())
        payload["exp"] = int((issued_at + self.token_lifetime).timestamp())
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Optional[Principal]:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp"]},
            )
            return Principal.model_validate(payload)
        except jwt.ExpiredSignatureError:
            logging.debug("AUTH >>> Token expired")
        except jwt.InvalidTokenError as e:
            logging.debug(f"AUTH >>> Invalid token: {e}")
        except ValueError as e:
            logging.debug(f"AUTH >>> Token claims rejected: {e}")
        return None
