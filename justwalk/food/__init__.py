"""Food logging helpers: AI estimate client and estimate schemas."""

from justwalk.food.estimation import (
    EstimateNeedsManualEntry,
    EstimateResult,
    EstimateRetryableError,
    EstimateSuccess,
    FoodEstimationClient,
)
from justwalk.food.models import FoodEstimate, FoodItem, NutritionTotals, recalculate_totals

__all__ = [
    "EstimateNeedsManualEntry",
    "EstimateResult",
    "EstimateRetryableError",
    "EstimateSuccess",
    "FoodEstimate",
    "FoodEstimationClient",
    "FoodItem",
    "NutritionTotals",
    "recalculate_totals",
]
