"""Backend auth endpoints."""

from dataclasses import dataclass

from pydantic import ValidationError as SchemaError

from pantry_client.adapters.backend_client import HttpxBackendClient
from pantry_client.adapters.backend_models import TokenResponse
from pantry_client.domain.errors import (
    ApiFailure,
    ApiOk,
    ApiResult,
    BackendError,
    ErrorKind,
)
from pantry_client.domain.sessions import IdentityAssertion, TokenGrant
from pantry_client.services.identity import AuthApi


@dataclass
class HttpxAuthApiClient(AuthApi):
    """Auth API client on top of the shared backend transport."""

    backend: HttpxBackendClient

    async def signup_oauth(
        self, assertion: IdentityAssertion
    ) -> ApiResult[TokenGrant]:
        """Provision an account from an identity assertion."""
        return await self._token_request(
            "/auth/signup/oauth",
            json={"provider": assertion.provider.value},
            bearer=assertion.token,
        )

    async def login_oauth(self, assertion: IdentityAssertion) -> ApiResult[TokenGrant]:
        """Log an existing account in with an identity assertion."""
        return await self._token_request(
            "/auth/login/oauth",
            json={"provider": assertion.provider.value},
            bearer=assertion.token,
        )

    async def login(self, email: str, password: str) -> ApiResult[TokenGrant]:
        """Log in with email and password."""
        return await self._token_request(
            "/auth/login", json={"email": email, "password": password}
        )

    async def register(
        self, payload: dict[str, object]
    ) -> ApiResult[dict[str, object]]:
        """Register a password-based account."""
        return _as_mapping(
            await self.backend.request("POST", "/auth/register", json=payload)
        )

    async def get_current_user(self) -> ApiResult[dict[str, object]]:
        """Return the signed-in user's profile."""
        return _as_mapping(
            await self.backend.request("GET", "/auth/me", authenticated=True)
        )

    async def send_verification_code(self, email: str) -> ApiResult[dict[str, object]]:
        """Ask the backend to email a verification code."""
        return _as_mapping(
            await self.backend.request("POST", "/auth/send-code", json={"email": email})
        )

    async def verify_code(self, email: str, code: str) -> ApiResult[dict[str, object]]:
        """Confirm an emailed verification code."""
        return _as_mapping(
            await self.backend.request(
                "POST", "/auth/verify-code", json={"email": email, "code": code}
            )
        )

    async def request_password_reset(self, email: str) -> ApiResult[dict[str, object]]:
        """Start the forgot-password flow."""
        return _as_mapping(
            await self.backend.request(
                "POST", "/auth/forgot-password", json={"email": email}
            )
        )

    async def verify_password_reset_code(
        self, email: str, code: str
    ) -> ApiResult[dict[str, object]]:
        """Exchange a reset code for a reset token."""
        return _as_mapping(
            await self.backend.request(
                "POST",
                "/auth/forgot-password/verify",
                json={"email": email, "code": code},
            )
        )

    async def reset_password(
        self, reset_token: str, new_password: str
    ) -> ApiResult[dict[str, object]]:
        """Set a new password using a reset token."""
        return _as_mapping(
            await self.backend.request(
                "POST",
                "/auth/reset-password",
                json={"reset_token": reset_token, "new_password": new_password},
            )
        )

    async def _token_request(
        self,
        path: str,
        json: dict[str, object],
        bearer: str | None = None,
    ) -> ApiResult[TokenGrant]:
        result = await self.backend.request("POST", path, json=json, bearer=bearer)
        if isinstance(result, ApiFailure):
            return result
        try:
            token = TokenResponse.model_validate(result.data)
        except SchemaError:
            return ApiFailure(
                BackendError(
                    status=200,
                    message="Malformed token response",
                    kind=ErrorKind.OTHER,
                )
            )
        return ApiOk(token.to_grant())


def _as_mapping(result: ApiResult[object]) -> ApiResult[dict[str, object]]:
    if isinstance(result, ApiFailure):
        return result
    data = result.data if isinstance(result.data, dict) else {}
    return ApiOk(data)
