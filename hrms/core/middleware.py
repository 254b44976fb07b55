# hrms/core/middleware.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import time
import uuid
import logging

from hrms.config.settings import settings
from hrms.core.auth.service import AuthService
from hrms.core.auth.session_store import extract_bearer_token

logger = logging.getLogger(__name__)


def describe_caller(request: Request) -> str:
    """
    Tenant tag for the request log: `ROLE@company_id`, `ROLE@platform` for
    super-admins, `anonymous` without a token. Reads the signed claims only;
    whether the session is still live is decided by the auth dependencies.
    """
    token = extract_bearer_token(request)
    if token is None:
        return "anonymous"
    payload = AuthService.verify_token(token)
    if not payload:
        return "invalid-token"
    return f"{payload.get('role')}@{payload.get('company_id') or 'platform'}"


def setup_middleware(app: FastAPI):
    """Configure all middleware for the application"""

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        caller = describe_caller(request)
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        logger.info(
            f"[{request_id}] {request.method} {request.url.path} - "
            f"Caller: {caller} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.4f}s"
        )

        return response
