"""Pantry inventory operations and the merge-by-name upsert."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import date
from typing import Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from pantry_client.domain.errors import ValidationError
from pantry_client.domain.pantry import (
    BatchUpsertResult,
    InventoryItem,
    InventoryScope,
    MergeStrategy,
    UpsertResult,
    normalize_item_name,
)
from pantry_client.services.expiry import default_expiration

_logger = logging.getLogger(__name__)

_OPTIONAL_FIELDS = ("quantity", "unit", "category", "expires_at")


class PantryApi(Protocol):
    """Backend pantry endpoints."""

    async def list_items(self, scope: InventoryScope) -> list[InventoryItem]:
        """Return every item in a scope."""

    async def create_item(
        self, payload: dict[str, object], scope: InventoryScope
    ) -> InventoryItem:
        """Create an item in a scope and return it."""

    async def update_item(
        self, item_id: int, payload: dict[str, object], scope: InventoryScope
    ) -> InventoryItem:
        """Update an item and return its persisted state."""

    async def delete_item(self, item_id: int) -> None:
        """Delete an item."""


class PantryItemDraft(BaseModel):
    """User-entered item fields awaiting an upsert."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(validation_alias=AliasChoices("name", "ingredient_name"))
    quantity: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    unit: str | None = None
    category: str | None = None
    expires_at: date | None = None

    @field_validator("name")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    def supplied(self, field_name: str) -> bool:
        """Return True when the caller explicitly provided a field."""
        return field_name in self.model_fields_set


@dataclass
class PantryService:
    """Application service for pantry inventory."""

    api: PantryApi

    async def list_items(self, scope: InventoryScope) -> list[InventoryItem]:
        """Fetch the current inventory snapshot for a scope."""
        return await self.api.list_items(scope)

    async def delete_item(self, item_id: int) -> None:
        """Delete an item by id."""
        await self.api.delete_item(item_id)

    async def upsert_by_name(
        self,
        payload: Mapping[str, object],
        *,
        snapshot: list[InventoryItem] | None,
        scope: InventoryScope,
        strategy: MergeStrategy = MergeStrategy.INCREMENT,
    ) -> UpsertResult:
        """Merge into the item with the same normalized name, or create one.

        The snapshot is never mutated. The returned snapshot reflects this
        write so that the next upsert in a batch can use it directly.
        """
        if snapshot is None:
            raise ValueError("upsert_by_name requires an inventory snapshot")
        draft = parse_draft(payload)
        match_index = _find_match(snapshot, draft.name, scope)

        if match_index is None:
            created = await self.api.create_item(_create_payload(draft), scope)
            _logger.debug("Created pantry item %s", created.id)
            return UpsertResult(
                item=created, merged=False, snapshot=[*snapshot, created]
            )

        match = snapshot[match_index]
        update = _update_payload(draft, match, strategy)
        updated = await self.api.update_item(match.id, update, scope)
        merged_item = replace(updated, scope=match.scope)
        if merged_item.quantity is None and "quantity" in update:
            merged_item = replace(merged_item, quantity=update["quantity"])
        _logger.debug("Merged into pantry item %s", match.id)
        next_snapshot = list(snapshot)
        next_snapshot[match_index] = merged_item
        return UpsertResult(item=merged_item, merged=True, snapshot=next_snapshot)

    async def add_item(
        self,
        payload: Mapping[str, object],
        *,
        scope: InventoryScope,
        snapshot: list[InventoryItem] | None = None,
        today: date | None = None,
    ) -> UpsertResult:
        """Upsert one item, defaulting its expiry from the category."""
        data = dict(payload)
        category = data.get("category")
        if "expires_at" not in data and isinstance(category, str):
            fallback = default_expiration(category, today or date.today())
            if fallback is not None:
                data["expires_at"] = fallback
        if snapshot is None:
            snapshot = await self.api.list_items(scope)
        return await self.upsert_by_name(data, snapshot=snapshot, scope=scope)

    async def add_all(
        self,
        payloads: Iterable[Mapping[str, object]],
        *,
        scope: InventoryScope,
        snapshot: list[InventoryItem] | None = None,
    ) -> BatchUpsertResult:
        """Upsert items one after another, chaining the snapshot between calls."""
        current = snapshot if snapshot is not None else await self.api.list_items(scope)
        results: list[UpsertResult] = []
        for payload in payloads:
            result = await self.upsert_by_name(payload, snapshot=current, scope=scope)
            results.append(result)
            current = result.snapshot
        _logger.info(
            "Added %s pantry items (%s merged)",
            len(results),
            sum(1 for result in results if result.merged),
        )
        return BatchUpsertResult(results=results, snapshot=current)


def parse_draft(payload: Mapping[str, object]) -> PantryItemDraft:
    """Validate raw item input, raising ``ValidationError`` on bad fields."""
    try:
        return PantryItemDraft.model_validate(dict(payload))
    except SchemaError as exc:
        first = exc.errors()[0]
        location = first.get("loc") or ("payload",)
        field_name = str(location[0])
        if field_name == "ingredient_name":
            field_name = "name"
        raise ValidationError(field_name, first.get("msg", "invalid value")) from None


def _find_match(
    snapshot: list[InventoryItem], name: str, scope: InventoryScope
) -> int | None:
    key = normalize_item_name(name)
    matches = [
        index
        for index, item in enumerate(snapshot)
        if item.id is not None
        and scope.contains(item.scope)
        and normalize_item_name(item.name) == key
    ]
    if len(matches) > 1:
        _logger.warning(
            "Found %s pantry items named %r in one scope; merging into the first",
            len(matches),
            key,
        )
    return matches[0] if matches else None


def _update_payload(
    draft: PantryItemDraft, match: InventoryItem, strategy: MergeStrategy
) -> dict[str, object]:
    payload: dict[str, object] = {"ingredient_name": match.name}
    if draft.quantity is not None:
        if strategy is MergeStrategy.REPLACE:
            payload["quantity"] = draft.quantity
        else:
            payload["quantity"] = (match.quantity or 0.0) + draft.quantity
    for field_name in ("unit", "category"):
        if draft.supplied(field_name):
            payload[field_name] = getattr(draft, field_name)
    if draft.supplied("expires_at"):
        payload["expires_at"] = _iso_date(draft.expires_at)
    return payload


def _create_payload(draft: PantryItemDraft) -> dict[str, object]:
    payload: dict[str, object] = {"ingredient_name": draft.name}
    for field_name in _OPTIONAL_FIELDS:
        if draft.supplied(field_name):
            value = getattr(draft, field_name)
            payload[field_name] = (
                _iso_date(value) if field_name == "expires_at" else value
            )
    return payload


def _iso_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None
