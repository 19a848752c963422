"""Domain models for food log entries."""

from dataclasses import dataclass, replace
from datetime import datetime

MACRO_FIELDS = ("calories", "protein", "carbs", "sugar", "fat")
PATCHABLE_FIELDS = ("name", *MACRO_FIELDS)


def _check_macros(values: dict[str, float | None]) -> None:
    for field_name, value in values.items():
        if value is not None and value < 0:
            raise ValueError(f"{field_name} must be non-negative")


@dataclass(frozen=True)
class MacroTotals:
    """Element-wise macro-nutrient amounts."""

    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    sugar: float = 0.0
    fat: float = 0.0

    def __add__(self, other: "MacroTotals") -> "MacroTotals":
        return MacroTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            sugar=self.sugar + other.sugar,
            fat=self.fat + other.fat,
        )


@dataclass(frozen=True)
class EntryFields:
    """User-supplied fields for a new food entry."""

    name: str
    calories: float
    protein: float
    carbs: float
    sugar: float
    fat: float

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("name must not be blank")
        _check_macros({name: getattr(self, name) for name in MACRO_FIELDS})

    def to_patch(self) -> "EntryPatch":
        """Return a patch that overwrites every patchable field."""
        return EntryPatch(
            name=self.name,
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            sugar=self.sugar,
            fat=self.fat,
        )


@dataclass(frozen=True)
class EntryPatch:
    """Partial update of an entry; None means leave the field unchanged."""

    name: str | None = None
    calories: float | None = None
    protein: float | None = None
    carbs: float | None = None
    sugar: float | None = None
    fat: float | None = None

    def __post_init__(self) -> None:
        if self.name is not None and not self.name.strip():
            raise ValueError("name must not be blank")
        _check_macros({name: getattr(self, name) for name in MACRO_FIELDS})

    def changes(self) -> dict[str, object]:
        """Return only the fields that are set."""
        values = {name: getattr(self, name) for name in PATCHABLE_FIELDS}
        return {name: value for name, value in values.items() if value is not None}


@dataclass(frozen=True)
class NewEntry:
    """Entry payload sent to the backing store before it has an id."""

    owner_id: str | None
    fields: EntryFields
    logged_at: datetime


@dataclass(frozen=True)
class FoodEntry:
    """A logged food item as confirmed by the backing store."""

    id: str
    owner_id: str | None
    name: str
    calories: float
    protein: float
    carbs: float
    sugar: float
    fat: float
    logged_at: datetime

    @property
    def macros(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            sugar=self.sugar,
            fat=self.fat,
        )


def apply_patch(entry: FoodEntry, patch: EntryPatch) -> FoodEntry:
    """Return the entry with patchable fields replaced.

    ``id``, ``owner_id`` and ``logged_at`` are never touched.
    """
    return replace(entry, **patch.changes())


def entry_from_new(entry_id: str, new_entry: NewEntry) -> FoodEntry:
    """Build a stored entry from a draft and its assigned id."""
    fields = new_entry.fields
    return FoodEntry(
        id=entry_id,
        owner_id=new_entry.owner_id,
        name=fields.name,
        calories=fields.calories,
        protein=fields.protein,
        carbs=fields.carbs,
        sugar=fields.sugar,
        fat=fields.fat,
        logged_at=new_entry.logged_at,
    )
