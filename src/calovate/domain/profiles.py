"""Domain models for user profiles and goals."""

from dataclasses import dataclass


@dataclass(frozen=True)
class NutritionGoals:
    """Daily macro-nutrient targets."""

    calories: float
    protein: float
    carbs: float
    sugar: float
    fat: float

    def __post_init__(self) -> None:
        for field_name, value in self.as_dict().items():
            if value < 0:
                raise ValueError(f"{field_name} goal must be non-negative")

    def as_dict(self) -> dict[str, float]:
        return {
            "calories": self.calories,
            "protein": self.protein,
            "carbs": self.carbs,
            "sugar": self.sugar,
            "fat": self.fat,
        }


DEFAULT_GOALS = NutritionGoals(calories=2000, protein=120, carbs=250, sugar=50, fat=70)


@dataclass(frozen=True)
class UserProfile:
    """Profile of an authenticated user."""

    id: str
    email: str
    name: str
    goals: NutritionGoals = DEFAULT_GOALS


@dataclass(frozen=True)
class AuthUser:
    """Identity returned by the authentication provider."""

    id: str
    email: str


@dataclass(frozen=True)
class SessionEvent:
    """Session transition reported by the authentication provider."""

    kind: str
    user_id: str | None = None


SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
