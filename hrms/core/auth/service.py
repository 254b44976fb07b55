# hrms/core/auth/service.py
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from hrms.config.settings import settings

logger = logging.getLogger(__name__)

# Password context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)


class AuthService:
    """Password hashing and token encoding"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        # bcrypt only looks at the first 72 bytes
        encoded_password = plain_password.encode('utf-8')[:72].decode('utf-8', 'ignore')
        try:
            return pwd_context.verify(encoded_password, hashed_password)
        except ValueError as e:
            logger.warning(f"Password verification error: {e}")
            return False

    @staticmethod
    def get_password_hash(password: str) -> str:
        encoded_password = password.encode('utf-8')[:72].decode('utf-8', 'ignore')
        return pwd_context.hash(encoded_password)

    @staticmethod
    def new_token_id() -> str:
        return uuid.uuid4().hex

    @staticmethod
    def create_access_token(
        data: dict,
        token_id: str,
        issued_at: datetime,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Sign a token whose `jti` must also exist in the session store"""
        to_encode = data.copy()

        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

        to_encode.update({
            "jti": token_id,
            "iat": issued_at,
            "exp": issued_at + expires_delta,
        })

        if "user_id" not in to_encode or "role" not in to_encode:
            raise ValueError("user_id and role are required in the token")

        return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Decode a token; None when the signature or expiry is invalid"""
        try:
            return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            return None
