"""Food estimate schemas.

An estimate is a list of items returned by the AI estimation service. The
confirmation flow lets the user edit or drop items and recalculates totals
from whatever remains.
"""

from typing import Literal

from pydantic import BaseModel, Field


class FoodItem(BaseModel):
    name: str = Field(..., min_length=1)
    quantity: str | None = None
    calories: int = Field(..., ge=0)
    protein_g: float = Field(default=0, ge=0)
    carbs_g: float = Field(default=0, ge=0)
    fat_g: float = Field(default=0, ge=0)
    confidence: Literal["low", "medium", "high"] = "medium"


class NutritionTotals(BaseModel):
    calories: int = 0
    protein_g: float = 0
    carbs_g: float = 0
    fat_g: float = 0


class FoodEstimate(BaseModel):
    items: list[FoodItem] = Field(default_factory=list)
    notes: str | None = None

    @property
    def totals(self) -> NutritionTotals:
        return recalculate_totals(self.items)

    def replace_item(self, index: int, item: FoodItem) -> "FoodEstimate":
        items = list(self.items)
        items[index] = item
        return self.model_copy(update={"items": items})

    def remove_item(self, index: int) -> "FoodEstimate":
        items = [item for i, item in enumerate(self.items) if i != index]
        return self.model_copy(update={"items": items})


def recalculate_totals(items: list[FoodItem]) -> NutritionTotals:
    return NutritionTotals(
        calories=sum(item.calories for item in items),
        protein_g=round(sum(item.protein_g for item in items), 1),
        carbs_g=round(sum(item.carbs_g for item in items), 1),
        fat_g=round(sum(item.fat_g for item in items), 1),
    )
