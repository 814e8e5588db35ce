"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from pantry_client.adapters.auth_api_client import HttpxAuthApiClient
from pantry_client.adapters.backend_client import HttpxBackendClient
from pantry_client.adapters.file_session_store import FileSessionStore
from pantry_client.adapters.pantry_api_client import HttpxPantryApiClient
from pantry_client.adapters.supabase_identity_source import SupabaseIdentitySource
from pantry_client.config import Settings
from pantry_client.services.identity import IdentityService
from pantry_client.services.pantry import PantryService
from pantry_client.services.session_manager import SessionManager
from pantry_client.services.throttle import AttemptThrottle, CooldownPolicy


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    session_manager: SessionManager
    identity_service: IdentityService
    pantry_service: PantryService
    login_throttle: AttemptThrottle
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_manager = SessionManager(FileSessionStore(resolved_settings.session_file))
    backend = HttpxBackendClient.create(
        base_url=resolved_settings.normalized_base_url,
        timeout=resolved_settings.request_timeout_seconds,
        token_provider=session_manager.access_token,
        on_unauthorized=session_manager.clear,
    )
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_anon_key
    )
    identity_service = IdentityService(
        auth_api=HttpxAuthApiClient(backend),
        session_manager=session_manager,
        identity_source=SupabaseIdentitySource(supabase_client),
    )
    pantry_service = PantryService(HttpxPantryApiClient(backend))
    login_throttle = AttemptThrottle(CooldownPolicy())

    async def close_resources() -> None:
        await backend.close()

    return AppContainer(
        settings=resolved_settings,
        session_manager=session_manager,
        identity_service=identity_service,
        pantry_service=pantry_service,
        login_throttle=login_throttle,
        close_resources=close_resources,
    )
