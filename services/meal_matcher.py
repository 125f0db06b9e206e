"""Meal swap finder.

Finds an alternative for one meal of the user's plan among the other meals
served at the same slot during the week. Candidates must have a different
name and calories within a threshold of the current meal; they are ranked
by cosine similarity of their (calories, protein, carbs, fats) vectors, so
the result is deterministic for a given plan.
"""

import os
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from core.logger import get_logger
from schemas.meal_schema import SubstitutedMeal

logger = get_logger("services.meal_matcher")

DEFAULT_CALORIE_THRESHOLD = int(os.getenv("MEAL_SWAP_CALORIE_THRESHOLD", "100"))

MEAL_TIME_CATEGORIES = {1: "breakfast", 2: "snack", 3: "lunch", 4: "snack", 5: "dinner"}


def get_meal_time_category(meal_number: int) -> str:
    """Time-of-day group of a meal slot ("breakfast", "snack", ...)."""
    return MEAL_TIME_CATEGORIES.get(meal_number, "other")


class MealMatcher:
    """Ranks same-slot meals by nutritional similarity.

    Methods
    -------
    _vectorize(meals)
        Convert meals into a macro feature matrix scaled per column.
    find_substitute(current, plan, threshold)
        Return the best (meal, score) alternative or None.
    """

    def __init__(self, calorie_threshold: int = DEFAULT_CALORIE_THRESHOLD):
        self.calorie_threshold = calorie_threshold
        self.logger = logger

    def _vectorize(self, meals: Sequence[SubstitutedMeal]) -> np.ndarray:
        """Build an (n_meals, 4) matrix of calories, protein, carbs and fats.

        Columns are divided by their maximum so calories do not dominate.
        """
        X = np.array(
            [[m.calories or 0.0, m.protein or 0.0, m.carbs or 0.0, m.fats or 0.0] for m in meals],
            dtype=float,
        )
        if X.shape[0] > 0:
            col_max = X.max(axis=0)
            col_max[col_max == 0] = 1.0
            X = X / col_max
        return X

    def candidates(
        self, current: SubstitutedMeal, plan: Dict[int, List[SubstitutedMeal]], threshold: int
    ) -> List[SubstitutedMeal]:
        """Distinct same-slot meals with a different name and close calories."""
        seen = set()
        out = []
        for day in sorted(plan):
            for meal in plan[day]:
                if meal.meal_number != current.meal_number or meal.name == current.name:
                    continue
                if abs(meal.calories - current.calories) > threshold or meal.name in seen:
                    continue
                seen.add(meal.name)
                out.append(meal)
        return out

    def find_substitute(
        self,
        current: SubstitutedMeal,
        plan: Dict[int, List[SubstitutedMeal]],
        threshold: Optional[int] = None,
    ) -> Optional[Tuple[SubstitutedMeal, float]]:
        """Return the most similar alternative and its similarity score.

        Args:
            current: The meal the user wants to replace.
            plan: The week of (already substituted) meals, keyed by weekday.
            threshold: Allowed calorie difference; defaults to the configured one.

        Returns:
            A (meal, score) tuple, or None when no meal qualifies.
        """
        threshold = self.calorie_threshold if threshold is None else threshold
        pool = self.candidates(current, plan, threshold)
        if not pool:
            self.logger.info("No swap candidates for %r (slot %s)", current.name, current.meal_number)
            return None
        X = self._vectorize([current, *pool])
        sims = cosine_similarity(X[:1], X[1:])[0]
        ranked = sorted(
            ((float(sims[i]), meal) for i, meal in enumerate(pool)),
            key=lambda pair: (-round(pair[0], 9), abs(pair[1].calories - current.calories), pair[1].name),
        )
        score, best = ranked[0]
        self.logger.debug("Swap for %r -> %r (score=%.4f)", current.name, best.name, score)
        return best.model_copy(deep=True), score


meal_matcher = MealMatcher()


def find_meal_substitute(
    current: SubstitutedMeal,
    plan: Dict[int, List[SubstitutedMeal]],
    threshold: Optional[int] = None,
) -> Optional[SubstitutedMeal]:
    """Best alternative meal from the plan, or None."""
    match = meal_matcher.find_substitute(current, plan, threshold)
    return match[0] if match else None
