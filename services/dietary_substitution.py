"""Dietary substitution service.

Rewrites a day's static meals for a dietary preference: disallowed
ingredients are swapped for the table's substitute, the substitute's
calories and macros are scaled to the ingredient's weight, meal totals are
recomputed and the meal name is updated when it names a swapped ingredient.

The pass is pure and total. Unknown ingredients pass through unflagged, and
running it again on its own output (even under a stricter preference) only
ever adds substitutions.
"""

import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel

from core.logger import get_logger
from data.dietary_substitutions import SubstitutionRule, find_substitution, normalize_name
from schemas.choices import DIETARY_PREFERENCES, ensure_choice
from schemas.meal_schema import Ingredient, Meal, SubstitutedIngredient, SubstitutedMeal, SubstitutionSummary

logger = get_logger("services.dietary_substitution")

MACROS = ("protein", "carbs", "fats")

_QUANTITY_RE = re.compile(
    r"^\s*(\d+(?:[.,]\d+)?)\s*(g|gr|г|ml|мл|pcs|pc|pieces|piece|бр)?\.?\s*$",
    re.IGNORECASE,
)
MASS_UNITS = {"g", "gr", "г", "ml", "мл"}
PIECE_UNITS = {"pcs", "pc", "pieces", "piece", "бр"}

MealLike = Union[Meal, SubstitutedMeal, dict]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_quantity(quantity: str) -> Tuple[Optional[float], Optional[str]]:
    """Split a free-text quantity into (amount, unit).

    ``"150g"`` -> ``(150.0, "g")``, ``"3 pcs"`` -> ``(3.0, "pcs")``. Returns
    ``(None, None)`` for anything else ("to taste", "1 handful").
    """
    match = _QUANTITY_RE.match(quantity or "")
    if not match:
        return None, None
    amount = float(match.group(1).replace(",", "."))
    unit = (match.group(2) or "").lower() or None
    return amount, unit


def ingredient_grams(ingredient: Ingredient, rule: SubstitutionRule) -> Optional[float]:
    """Best estimate of the ingredient's weight in grams, or None."""
    amount, unit = parse_quantity(ingredient.quantity)
    if amount is not None and unit in MASS_UNITS:
        return amount
    if amount is not None and unit in PIECE_UNITS and rule.unit_grams:
        return amount * rule.unit_grams
    if rule.kcal_per_100g and ingredient.calories:
        return ingredient.calories * 100 / rule.kcal_per_100g
    return None


def _original_macro(ingredient: Ingredient, rule: SubstitutionRule, macro: str, grams: float) -> float:
    value = getattr(ingredient, macro)
    if value is not None:
        return value
    per_100g = getattr(rule, f"{macro}_per_100g")
    return per_100g * grams / 100 if per_100g is not None else 0


def _substitute(
    ingredient: SubstitutedIngredient, preference: str
) -> Tuple[SubstitutedIngredient, Optional[SubstitutionRule], Dict[str, float]]:
    """Swap one ingredient. Returns (ingredient, rule or None, macro deltas)."""
    no_change = {m: 0.0 for m in MACROS}
    rule = find_substitution(ingredient.name, preference)
    if rule is None or normalize_name(rule.substitute.name) == normalize_name(ingredient.name):
        return ingredient.model_copy(), None, no_change

    sub = rule.substitute
    grams = ingredient_grams(ingredient, rule)
    quantity = ingredient.quantity
    if grams is None:
        calories = ingredient.calories
        macros = {m: getattr(ingredient, m) for m in MACROS}
        deltas = no_change
    else:
        calories = _round_half_up(sub.kcal_per_100g * grams / 100)
        macros = {m: round(getattr(sub, f"{m}_per_100g") * grams / 100, 1) for m in MACROS}
        deltas = {m: macros[m] - _original_macro(ingredient, rule, m, grams) for m in MACROS}
        _, unit = parse_quantity(quantity)
        if unit not in MASS_UNITS:
            quantity = f"{_round_half_up(grams)}g"

    swapped = SubstitutedIngredient(
        name=sub.name,
        quantity=quantity,
        calories=calories,
        substituted=True,
        original_name=ingredient.original_name or ingredient.name,
        substitution_note=sub.note or f"Replaces {ingredient.name.lower()}",
        **macros,
    )
    logger.debug("%s -> %s (%s, %s kcal)", ingredient.name, sub.name, preference, calories)
    return swapped, rule, deltas


def apply_ingredient_substitution(ingredient: Union[Ingredient, dict], preference: str) -> SubstitutedIngredient:
    """Return the ingredient as it should appear for the given preference.

    Raises:
        InvalidChoiceError: If `preference` is not a known dietary preference.
    """
    ensure_choice("dietary_preference", preference, DIETARY_PREFERENCES)
    source = _as_substituted_ingredient(ingredient)
    if preference == "omnivor":
        return source
    swapped, _, _ = _substitute(source, preference)
    return swapped


def _number(value: Any, default: float = 0.0) -> float:
    """A loose numeric field as float; None, bools, NaN and junk give `default`."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip().replace(",", "."))
        except ValueError:
            return default
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        return default
    return float(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_dict(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return dict(value) if isinstance(value, dict) else {}


def _clean_ingredient(raw: Dict[str, Any]) -> Dict[str, Any]:
    data = {
        "name": _text(raw.get("name")),
        "quantity": _text(raw.get("quantity")),
        "calories": max(0, _round_half_up(_number(raw.get("calories")))),
        "substituted": bool(raw.get("substituted", False)),
        "original_name": _text(raw.get("original_name")) or None,
        "substitution_note": _text(raw.get("substitution_note")) or None,
    }
    for m in MACROS:
        value = raw.get(m)
        data[m] = None if value is None else _number(value)
    return data


def _clean_meal(raw: Dict[str, Any]) -> Dict[str, Any]:
    ingredients = raw.get("ingredients")
    data = {
        "meal_number": int(_number(raw.get("meal_number"), 1)),
        "time": _text(raw.get("time")),
        "name": _text(raw.get("name")),
        "ingredients": [
            _clean_ingredient(_as_dict(i))
            for i in (ingredients if isinstance(ingredients, list) else [])
            if isinstance(i, (dict, BaseModel))
        ],
        "substitution_count": max(0, int(_number(raw.get("substitution_count")))),
        "name_updated": bool(raw.get("name_updated", False)),
    }
    for field in ("calories",) + MACROS:
        data[field] = max(0, _round_half_up(_number(raw.get(field))))
    return data


def _as_substituted_ingredient(ingredient: Union[Ingredient, dict]) -> SubstitutedIngredient:
    return SubstitutedIngredient.model_validate(_clean_ingredient(_as_dict(ingredient)))


def _as_substituted_meal(meal: MealLike) -> SubstitutedMeal:
    """Coerce any meal-like value; missing or malformed fields fall back to empty values."""
    return SubstitutedMeal.model_validate(_clean_meal(_as_dict(meal)))


def _match_case(replacement: str, replaced: str) -> str:
    if not replacement or not replaced:
        return replacement
    if replaced[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement[0].lower() + replacement[1:]


def rename_meal(name: str, rules: Iterable[SubstitutionRule]) -> str:
    """Replace, per swapped ingredient, its longest whole-word term found in `name`."""
    for rule in rules:
        for term in rule.terms:
            pattern = re.compile(r"(?<!\w)" + re.escape(term) + r"(?!\w)", re.IGNORECASE)
            match = pattern.search(name)
            if match:
                replacement = _match_case(rule.substitute.short_name, match.group(0))
                name = name[:match.start()] + replacement + name[match.end():]
                break
    return name


def apply_meal_substitutions(meal: MealLike, preference: str) -> SubstitutedMeal:
    """Apply the dietary preference to one meal.

    Args:
        meal: A static meal, a previously substituted meal or its dict form.
        preference: Target dietary preference.

    Returns:
        A new `SubstitutedMeal`; the input is never mutated.

    Raises:
        InvalidChoiceError: If `preference` is not a known dietary preference.
    """
    ensure_choice("dietary_preference", preference, DIETARY_PREFERENCES)
    source = _as_substituted_meal(meal)
    if preference == "omnivor":
        return source

    ingredients: List[SubstitutedIngredient] = []
    rules: List[SubstitutionRule] = []
    totals = {m: 0.0 for m in MACROS}
    for ingredient in source.ingredients:
        swapped, rule, deltas = _substitute(ingredient, preference)
        ingredients.append(swapped)
        if rule is not None:
            rules.append(rule)
            for m in MACROS:
                totals[m] += deltas[m]

    if not rules:
        return source

    name = rename_meal(source.name, rules)
    result = source.model_copy(update={
        "name": name,
        "ingredients": ingredients,
        "calories": sum(i.calories for i in ingredients),
        "protein": max(0, _round_half_up(source.protein + totals["protein"])),
        "carbs": max(0, _round_half_up(source.carbs + totals["carbs"])),
        "fats": max(0, _round_half_up(source.fats + totals["fats"])),
        "substitution_count": source.substitution_count + len(rules),
        "name_updated": source.name_updated or name != source.name,
    })
    logger.debug("Meal %s %r -> %r: %s substitutions", source.meal_number, source.name, name, len(rules))
    return result


def apply_day_substitutions(meals: Iterable[MealLike], preference: str) -> List[SubstitutedMeal]:
    """Apply the dietary preference to every meal of a day."""
    ensure_choice("dietary_preference", preference, DIETARY_PREFERENCES)
    result = [apply_meal_substitutions(meal, preference) for meal in meals]
    if preference != "omnivor":
        logger.info(
            "Applied %s substitutions: %s swaps across %s meals",
            preference, sum(m.substitution_count for m in result), len(result),
        )
    return result


def get_substitution_summary(meals: Iterable[SubstitutedMeal]) -> SubstitutionSummary:
    """Summarise the swaps of a substituted day for display."""
    total = 0
    affected = 0
    lines = []
    for meal in meals:
        meal = _as_substituted_meal(meal)
        total += meal.substitution_count
        if meal.substitution_count > 0:
            affected += 1
        for ingredient in meal.ingredients:
            if ingredient.substituted and ingredient.original_name:
                lines.append(f"{ingredient.original_name} -> {ingredient.name}")
    return SubstitutionSummary(total_substitutions=total, meals_affected=affected, substitutions=lines)


def requires_substitutions(preference: str) -> bool:
    """Whether meals must go through the substitution pass for this preference."""
    ensure_choice("dietary_preference", preference, DIETARY_PREFERENCES)
    return preference != "omnivor"
