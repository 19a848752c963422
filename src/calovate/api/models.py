"""Request models for the local API."""

from pydantic import BaseModel, Field

from calovate.domain.entries import EntryFields, EntryPatch
from calovate.domain.profiles import NutritionGoals


class LoginRequest(BaseModel):
    """Credentials for sign-in."""

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignupRequest(LoginRequest):
    """Credentials and display name for sign-up."""

    name: str = Field(min_length=1)


class GoalsRequest(BaseModel):
    """Daily nutrition targets."""

    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    sugar: float = Field(ge=0)
    fat: float = Field(ge=0)

    def to_goals(self) -> NutritionGoals:
        return NutritionGoals(**self.model_dump())


class EntryRequest(BaseModel):
    """A new food entry."""

    name: str = Field(min_length=1, pattern=r"\S")
    calories: float = Field(default=0, ge=0)
    protein: float = Field(default=0, ge=0)
    carbs: float = Field(default=0, ge=0)
    sugar: float = Field(default=0, ge=0)
    fat: float = Field(default=0, ge=0)

    def to_fields(self) -> EntryFields:
        return EntryFields(**self.model_dump())


class EntryPatchRequest(BaseModel):
    """Partial update of a food entry."""

    name: str | None = Field(default=None, min_length=1, pattern=r"\S")
    calories: float | None = Field(default=None, ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    fat: float | None = Field(default=None, ge=0)

    def to_patch(self) -> EntryPatch:
        return EntryPatch(**self.model_dump())
