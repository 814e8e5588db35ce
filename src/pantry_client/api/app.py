"""FastAPI application factory for the local sign-in surface."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from pydantic import BaseModel

from pantry_client.app_logging import configure_logging
from pantry_client.containers import AppContainer
from pantry_client.domain.errors import (
    TRANSPORT_STATUS,
    AuthRequestError,
    IdentityBootstrapError,
    ValidationError,
)

_CALLBACK_COPY = {
    400: "Provider mismatch detected.",
    401: "Authentication failed.",
    409: "Account already exists.",
}

_CALLBACK_VALIDATION_COPY = {
    "code": "Authentication failed. Please try again.",
    "provider": "Missing provider information. Please try again.",
}

_LOGIN_COPY = {
    401: "Incorrect email or password. Please check your credentials and try again.",
    404: "Account not found. Please check your email or sign up for a new account.",
    429: "Too many login attempts. Please wait a moment and try again.",
    500: "Our servers are experiencing issues. Please try again in a few moments.",
    TRANSPORT_STATUS: (
        "Unable to connect to the server. "
        "Please check your internet connection and try again."
    ),
}


class PasswordLogin(BaseModel):
    """Email and password sign-in request."""

    email: str
    password: str


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/auth/callback")
    async def oauth_callback(
        request: Request, code: str | None = None, error: str | None = None
    ) -> dict[str, str]:
        """Complete an OAuth redirect by bootstrapping an application session."""
        state_container: AppContainer = request.app.state.container
        throttle = state_container.login_throttle
        if error:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Authentication failed. Please try again.",
            )
        _ensure_not_cooling_down(state_container)
        try:
            session = await state_container.identity_service.bootstrap_from_callback(
                code
            )
        except ValidationError as exc:
            logger.info("OAuth callback rejected: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=_CALLBACK_VALIDATION_COPY.get(
                    exc.field, "Missing authentication token. Please try again."
                ),
            ) from exc
        except IdentityBootstrapError as exc:
            logger.info("OAuth bootstrap failed at %s: %s", exc.stage, exc.status)
            throttle.record_failure(exc.status)
            copy = _CALLBACK_COPY.get(exc.status, "Please try again.")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Unable to complete authentication. {copy}",
            ) from exc
        throttle.record_success()
        return {"status": "ok", "provider": session.provider.value}

    @app.post("/auth/login")
    async def password_login(
        credentials: PasswordLogin, request: Request
    ) -> dict[str, str]:
        """Sign in with email and password."""
        state_container: AppContainer = request.app.state.container
        throttle = state_container.login_throttle
        _ensure_not_cooling_down(state_container)
        try:
            session = await state_container.identity_service.sign_in_with_password(
                credentials.email, credentials.password
            )
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Please provide your {exc.field}.",
            ) from exc
        except AuthRequestError as exc:
            throttle.record_failure(exc.status)
            copy = _LOGIN_COPY.get(
                exc.status,
                exc.message or "Login failed. Please check your credentials.",
            )
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED, detail=copy
            ) from exc
        throttle.record_success()
        return {"status": "ok", "provider": session.provider.value}

    @app.post("/auth/sign-out")
    async def sign_out(request: Request) -> dict[str, str]:
        """Destroy the current session."""
        state_container: AppContainer = request.app.state.container
        state_container.identity_service.sign_out()
        return {"status": "ok"}

    @app.get("/auth/session")
    async def session_status(request: Request) -> dict[str, object]:
        """Report whether a session is held, without exposing tokens."""
        state_container: AppContainer = request.app.state.container
        session = state_container.session_manager.current()
        return {
            "authenticated": session is not None,
            "provider": session.provider.value if session else None,
        }

    return app


def _ensure_not_cooling_down(container: AppContainer) -> None:
    remaining = container.login_throttle.remaining_seconds()
    if remaining > 0:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Please wait {remaining} seconds before trying again.",
            headers={"Retry-After": str(remaining)},
        )
