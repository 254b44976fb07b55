# hrms/core/auth/session_store.py
"""
Credential & session store.

A bearer token is a signed JWT whose `jti` must be registered in a store;
destroying the record revokes the token even before it expires. Two
backends are available:

- DatabaseSessionStore: rows in `auth_sessions`, shared by every worker.
- InMemorySessionStore: a process-local dict, for single-process deployments.
"""
import logging
import threading
from datetime import datetime, timedelta
from typing import Dict, Optional

from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from hrms.config.settings import settings
from hrms.core.auth.schemas import SessionContext
from hrms.core.auth.service import AuthService
from hrms.core.enums import UserRole
from hrms.shared.database.models import AuthSession

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request) -> Optional[str]:
    """Token from `Authorization: Bearer <token>`, parsed the way HTTPBearer does"""
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() != "bearer" or not token:
        return None
    return token


class SessionStore:
    """Base store: token encoding lives here, persistence in subclasses"""

    def __init__(self, ttl: Optional[timedelta] = None):
        self.ttl = ttl or timedelta(minutes=settings.access_token_expire_minutes)

    # ---- persistence hooks ----

    def _save(self, context: SessionContext) -> None:
        raise NotImplementedError

    def _load(self, token_id: str) -> Optional[SessionContext]:
        raise NotImplementedError

    def _delete(self, token_id: str) -> None:
        raise NotImplementedError

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        raise NotImplementedError

    # ---- contract ----

    def create_session(self, user_id: str, role: UserRole, company_id: Optional[str]) -> str:
        issued_at = datetime.utcnow().replace(microsecond=0)
        context = SessionContext(
            token_id=AuthService.new_token_id(),
            user_id=user_id,
            role=UserRole(role),
            company_id=company_id,
            issued_at=issued_at,
            expires_at=issued_at + self.ttl,
        )
        self._save(context)

        return AuthService.create_access_token(
            data={
                "user_id": user_id,
                "role": context.role.value,
                "company_id": company_id,
            },
            token_id=context.token_id,
            issued_at=issued_at,
            expires_delta=self.ttl,
        )

    def resolve(self, token: str) -> Optional[SessionContext]:
        payload = AuthService.verify_token(token)
        if not payload or not payload.get("jti"):
            return None

        context = self._load(payload["jti"])
        if context is None:
            return None
        if context.expires_at <= datetime.utcnow():
            self._delete(context.token_id)
            return None
        if context.user_id != payload.get("user_id"):
            logger.warning(f"Token {context.token_id} does not match its session record")
            return None
        return context

    def get_session(self, request: Request) -> Optional[SessionContext]:
        token = extract_bearer_token(request)
        if token is None:
            return None
        return self.resolve(token)

    def destroy_session(self, token: str) -> None:
        # Expired tokens still carry a jti worth revoking
        try:
            token_id = jwt.get_unverified_claims(token).get("jti")
        except JWTError:
            return
        if token_id:
            self._delete(token_id)


class DatabaseSessionStore(SessionStore):
    def __init__(self, db: Session, ttl: Optional[timedelta] = None):
        super().__init__(ttl)
        self.db = db

    def _save(self, context: SessionContext) -> None:
        self.db.add(AuthSession(
            token_id=context.token_id,
            user_id=context.user_id,
            role=context.role.value,
            company_id=context.company_id,
            issued_at=context.issued_at,
            expires_at=context.expires_at,
        ))
        self.db.commit()

    def _load(self, token_id: str) -> Optional[SessionContext]:
        row = self.db.query(AuthSession).filter(AuthSession.token_id == token_id).first()
        if row is None:
            return None
        return SessionContext(
            token_id=row.token_id,
            user_id=row.user_id,
            role=UserRole(row.role),
            company_id=row.company_id,
            issued_at=row.issued_at,
            expires_at=row.expires_at,
        )

    def _delete(self, token_id: str) -> None:
        self.db.query(AuthSession).filter(AuthSession.token_id == token_id).delete(
            synchronize_session=False
        )
        self.db.commit()

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        removed = self.db.query(AuthSession).filter(AuthSession.expires_at <= now).delete(
            synchronize_session=False
        )
        self.db.commit()
        return removed


class InMemorySessionStore(SessionStore):
    """Sessions shared by every instance in this process"""

    _sessions: Dict[str, SessionContext] = {}
    _lock = threading.Lock()

    def _save(self, context: SessionContext) -> None:
        with self._lock:
            self._sessions[context.token_id] = context

    def _load(self, token_id: str) -> Optional[SessionContext]:
        with self._lock:
            return self._sessions.get(token_id)

    def _delete(self, token_id: str) -> None:
        with self._lock:
            self._sessions.pop(token_id, None)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.utcnow()
        with self._lock:
            expired = [key for key, ctx in self._sessions.items() if ctx.expires_at <= now]
            for key in expired:
                del self._sessions[key]
        return len(expired)

    @classmethod
    def clear(cls) -> None:
        with cls._lock:
            cls._sessions.clear()


def build_session_store(db: Session) -> SessionStore:
    """Backend chosen by SESSION_BACKEND"""
    if settings.session_backend == "memory":
        return InMemorySessionStore()
    return DatabaseSessionStore(db)
