"""Pydantic models for backend payloads."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pantry_client.domain.pantry import InventoryItem, InventoryScope
from pantry_client.domain.sessions import TokenGrant


class TokenResponse(BaseModel):
    """Body of a successful login or OAuth exchange."""

    model_config = ConfigDict(extra="ignore")

    access_token: str = Field(min_length=1)
    refresh_token: str | None = None
    token_type: str = "bearer"
    user: dict[str, object] | None = None

    def to_grant(self) -> TokenGrant:
        return TokenGrant(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            user=self.user,
        )


class PantryItemOut(BaseModel):
    """Pantry item as returned by the backend."""

    model_config = ConfigDict(extra="ignore")

    id: int
    family_id: int | None = None
    owner_user_id: int | None = None
    ingredient_name: str | None = None
    name: str | None = None
    quantity: float | None = None
    unit: str | None = None
    category: str | None = None
    expires_at: date | None = None

    @field_validator("quantity", mode="before")
    @classmethod
    def _lenient_quantity(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                return None
        return value

    @field_validator("expires_at", mode="before")
    @classmethod
    def _date_part(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped[:10] or None
        return value

    def to_item(self, default_scope: InventoryScope) -> InventoryItem:
        if self.family_id is not None:
            scope = InventoryScope.family(self.family_id)
        elif default_scope.is_family:
            scope = default_scope
        else:
            scope = InventoryScope.personal(
                self.owner_user_id or default_scope.owner_user_id
            )
        return InventoryItem(
            id=self.id,
            name=self.ingredient_name or self.name or "",
            quantity=self.quantity,
            unit=self.unit,
            category=self.category,
            expires_at=self.expires_at,
            scope=scope,
        )
