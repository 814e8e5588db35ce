"""Domain models for pantry inventory."""

from dataclasses import dataclass
from datetime import date
from enum import StrEnum


@dataclass(frozen=True)
class InventoryScope:
    """Ownership boundary within which item names are de-duplicated."""

    family_id: int | None = None
    owner_user_id: int | None = None

    def __post_init__(self) -> None:
        if self.family_id is not None and self.owner_user_id is not None:
            raise ValueError("A scope is either personal or family, not both")

    @classmethod
    def personal(cls, owner_user_id: int | None = None) -> "InventoryScope":
        """Return the individual scope, optionally pinned to an owner id."""
        return cls(owner_user_id=owner_user_id)

    @classmethod
    def family(cls, family_id: int) -> "InventoryScope":
        """Return the scope of a family group."""
        return cls(family_id=family_id)

    @property
    def is_family(self) -> bool:
        return self.family_id is not None

    def contains(self, other: "InventoryScope") -> bool:
        """Return True when an item scoped to ``other`` belongs to this scope."""
        if self.is_family:
            return other.family_id == self.family_id
        if other.is_family:
            return False
        if self.owner_user_id is None or other.owner_user_id is None:
            return True
        return self.owner_user_id == other.owner_user_id


@dataclass(frozen=True)
class InventoryItem:
    """One line of a pantry inventory."""

    id: int | None
    name: str
    quantity: float | None
    unit: str | None
    category: str | None
    expires_at: date | None
    scope: InventoryScope


class MergeStrategy(StrEnum):
    """How quantities combine when an upsert matches an existing item."""

    INCREMENT = "increment"
    REPLACE = "replace"


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of a single upsert by name."""

    item: InventoryItem
    merged: bool
    snapshot: list[InventoryItem]


@dataclass(frozen=True)
class BatchUpsertResult:
    """Outcome of a sequential batch of upserts."""

    results: list[UpsertResult]
    snapshot: list[InventoryItem]

    @property
    def merged_count(self) -> int:
        return sum(1 for result in self.results if result.merged)

    @property
    def created_count(self) -> int:
        return sum(1 for result in self.results if not result.merged)


def normalize_item_name(name: str | None) -> str:
    """Return the de-duplication key for an item name."""
    return (name or "").strip().casefold()
