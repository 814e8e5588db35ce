"""Backend pantry endpoints."""

from dataclasses import dataclass

from pydantic import ValidationError as SchemaError

from pantry_client.adapters.backend_client import HttpxBackendClient
from pantry_client.adapters.backend_models import PantryItemOut
from pantry_client.domain.errors import (
    ApiFailure,
    BackendError,
    ErrorKind,
    UpstreamError,
)
from pantry_client.domain.pantry import InventoryItem, InventoryScope
from pantry_client.services.pantry import PantryApi


@dataclass
class HttpxPantryApiClient(PantryApi):
    """Pantry API client on top of the shared backend transport."""

    backend: HttpxBackendClient

    async def list_items(self, scope: InventoryScope) -> list[InventoryItem]:
        """List items in the personal pantry or a family pantry."""
        path = (
            f"/pantry-items/family/{scope.family_id}"
            if scope.is_family
            else "/pantry-items/me"
        )
        data = await self._call("GET", path)
        rows = data.get("items") if isinstance(data, dict) else data
        if not isinstance(rows, list):
            return []
        return [_parse_item(row, scope) for row in rows]

    async def create_item(
        self, payload: dict[str, object], scope: InventoryScope
    ) -> InventoryItem:
        """Create an item in the requested scope."""
        body: dict[str, object] = {**payload}
        if scope.is_family:
            body["scope"] = "family"
            body["family_id"] = scope.family_id
            path = "/pantry-items"
        else:
            body["scope"] = "personal"
            path = "/pantry-items/me"
        data = await self._call("POST", path, json=body)
        return _parse_item(data, scope)

    async def update_item(
        self, item_id: int, payload: dict[str, object], scope: InventoryScope
    ) -> InventoryItem:
        """Patch an item by id."""
        data = await self._call("PATCH", f"/pantry-items/{item_id}", json=payload)
        return _parse_item(data, scope)

    async def delete_item(self, item_id: int) -> None:
        """Delete an item by id."""
        await self._call("DELETE", f"/pantry-items/{item_id}")

    async def _call(
        self, method: str, path: str, json: dict[str, object] | None = None
    ) -> object:
        result = await self.backend.request(method, path, json=json, authenticated=True)
        if isinstance(result, ApiFailure):
            raise UpstreamError(result.error)
        return result.data


def _parse_item(row: object, scope: InventoryScope) -> InventoryItem:
    try:
        return PantryItemOut.model_validate(row).to_item(scope)
    except SchemaError as exc:
        raise UpstreamError(
            BackendError(
                status=200,
                message=f"Malformed pantry item: {exc.error_count()} invalid fields",
                kind=ErrorKind.OTHER,
            )
        ) from exc
