"""Dietary substitution table.

Maps animal-based ingredients to preference-compliant alternatives with
similar macros. Every entry belongs to one ingredient category; a category
is either allowed or disallowed under a preference, and the preferences are
ordered by restrictiveness (omnivor < pescatarian < vegetarian < vegan).

Lookup order in `find_substitution`:

1. exact (case-insensitive) match on an entry's original name or aliases;
2. category keyword detection on the ingredient's words, answered with the
   category's default substitute.

Ingredients whose category is allowed, or which match nothing, return None.
All nutrition values are per 100 g.
"""

import re
from functools import lru_cache
from typing import Dict, List, Optional, Set

from pydantic import BaseModel

from core.logger import get_logger
from schemas.choices import DIETARY_PREFERENCES, ensure_choice

logger = get_logger("data.dietary_substitutions")


class SubstituteFood(BaseModel):
    name: str
    short_name: str
    kcal_per_100g: float
    protein_per_100g: float = 0
    carbs_per_100g: float = 0
    fats_per_100g: float = 0
    note: str = ""


class FoodEntry(BaseModel):
    """An animal-based ingredient and its substitutes per stricter preference."""

    original: str
    aliases: List[str] = []
    category: str
    kcal_per_100g: float
    protein_per_100g: float = 0
    carbs_per_100g: float = 0
    fats_per_100g: float = 0
    unit_grams: Optional[float] = None
    substitutes: Dict[str, SubstituteFood] = {}


class SubstitutionRule(BaseModel):
    """Resolved answer of `find_substitution` for one ingredient."""

    original: str
    category: str
    terms: List[str]
    substitute: SubstituteFood
    kcal_per_100g: Optional[float] = None
    protein_per_100g: Optional[float] = None
    carbs_per_100g: Optional[float] = None
    fats_per_100g: Optional[float] = None
    unit_grams: Optional[float] = None


# categories each preference may not eat
DISALLOWED_CATEGORIES: Dict[str, Set[str]] = {
    "omnivor": set(),
    "pescatarian": {"poultry", "red_meat"},
    "vegetarian": {"poultry", "red_meat", "fish", "seafood"},
    "vegan": {"poultry", "red_meat", "fish", "seafood", "egg", "dairy", "honey"},
}

CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "poultry": ["chicken", "turkey", "duck"],
    "red_meat": ["beef", "pork", "lamb", "veal", "steak", "bacon", "ham", "sausage", "meat"],
    "fish": ["salmon", "cod", "tuna", "trout", "mackerel", "sardine", "sardines", "fish"],
    "seafood": ["shrimp", "shrimps", "prawn", "prawns", "squid", "mussels", "crab"],
    "egg": ["egg", "eggs", "omelette"],
    "dairy": ["milk", "yogurt", "yoghurt", "cheese", "cottage", "cream", "whey", "butter", "kefir"],
    "honey": ["honey"],
}

# words that mark a plant-based product named after an animal one
PLANT_MARKERS = {"soy", "almond", "oat", "coconut", "vegan", "plant", "peanut", "cashew", "tofu"}

_SALMON = SubstituteFood(
    name="Salmon fillet", short_name="Salmon",
    kcal_per_100g=206, protein_per_100g=22, fats_per_100g=13,
    note="High in protein and omega-3",
)
_WHITE_FISH = SubstituteFood(
    name="White fish fillet", short_name="White fish",
    kcal_per_100g=82, protein_per_100g=18, fats_per_100g=0.7,
    note="Lean protein",
)
_TUNA = SubstituteFood(
    name="Tuna fillet", short_name="Tuna",
    kcal_per_100g=144, protein_per_100g=30, fats_per_100g=2,
    note="Very high in protein",
)
_SHRIMP = SubstituteFood(
    name="Shrimp", short_name="Shrimp",
    kcal_per_100g=99, protein_per_100g=24, carbs_per_100g=0.2, fats_per_100g=0.3,
)
_TOFU = SubstituteFood(
    name="Tofu (extra firm)", short_name="Tofu",
    kcal_per_100g=145, protein_per_100g=15, carbs_per_100g=3, fats_per_100g=9,
    note="Complete plant protein",
)
_TOFU_FLAX = SubstituteFood(
    name="Tofu with flaxseed", short_name="Tofu",
    kcal_per_100g=170, protein_per_100g=15, carbs_per_100g=4, fats_per_100g=11,
    note="Flaxseed adds plant omega-3",
)
_TOFU_LIGHT = SubstituteFood(
    name="Silken tofu", short_name="Tofu",
    kcal_per_100g=62, protein_per_100g=7, carbs_per_100g=2, fats_per_100g=3,
    note="Low-calorie plant protein",
)
_TOFU_SOY_SAUCE = SubstituteFood(
    name="Tofu with soy sauce", short_name="Tofu",
    kcal_per_100g=150, protein_per_100g=15, carbs_per_100g=5, fats_per_100g=8,
)
_TEMPEH = SubstituteFood(
    name="Tempeh", short_name="Tempeh",
    kcal_per_100g=193, protein_per_100g=19, carbs_per_100g=9, fats_per_100g=11,
    note="Fermented soy, easy to digest",
)
_TEMPEH_MUSHROOMS = SubstituteFood(
    name="Tempeh with mushrooms", short_name="Tempeh",
    kcal_per_100g=170, protein_per_100g=17, carbs_per_100g=8, fats_per_100g=9,
)
_SEITAN = SubstituteFood(
    name="Seitan (wheat gluten)", short_name="Seitan",
    kcal_per_100g=370, protein_per_100g=75, carbs_per_100g=14, fats_per_100g=2,
    note="Closest to a meat texture",
)
_SEITAN_MUSHROOMS = SubstituteFood(
    name="Portobello and seitan (50/50)", short_name="Seitan",
    kcal_per_100g=180, protein_per_100g=15, carbs_per_100g=10, fats_per_100g=2,
    note="Mushrooms for texture and flavour",
)
_LENTIL_QUINOA = SubstituteFood(
    name="Lentils with quinoa", short_name="Lentils",
    kcal_per_100g=118, protein_per_100g=7, carbs_per_100g=21, fats_per_100g=1,
)
_CHICKPEAS = SubstituteFood(
    name="Chickpeas", short_name="Chickpea",
    kcal_per_100g=164, protein_per_100g=9, carbs_per_100g=27, fats_per_100g=2.6,
)
_TOFU_SCRAMBLE = SubstituteFood(
    name="Tofu scramble", short_name="Tofu",
    kcal_per_100g=150, protein_per_100g=14, carbs_per_100g=3, fats_per_100g=9,
    note="Season with turmeric and black salt",
)
_SOY_YOGURT = SubstituteFood(
    name="Soy yogurt", short_name="Soy yogurt",
    kcal_per_100g=66, protein_per_100g=6, carbs_per_100g=4, fats_per_100g=3,
)
_CASHEW_CREAM = SubstituteFood(
    name="Cashew cream", short_name="Cashew cream",
    kcal_per_100g=220, protein_per_100g=7, carbs_per_100g=12, fats_per_100g=16,
)
_SOY_MILK = SubstituteFood(
    name="Soy milk", short_name="Soy milk",
    kcal_per_100g=33, protein_per_100g=2.8, carbs_per_100g=1.8, fats_per_100g=1.6,
)
_VEGAN_CHEESE = SubstituteFood(
    name="Vegan cheese (cashew based)", short_name="Vegan cheese",
    kcal_per_100g=280, protein_per_100g=8, carbs_per_100g=10, fats_per_100g=23,
)
_PEA_PROTEIN = SubstituteFood(
    name="Pea protein", short_name="Pea protein",
    kcal_per_100g=380, protein_per_100g=80, carbs_per_100g=4, fats_per_100g=6,
)
_MAPLE_SYRUP = SubstituteFood(
    name="Maple syrup", short_name="Maple syrup",
    kcal_per_100g=260, carbs_per_100g=67, fats_per_100g=0.1,
)
_PLANT_BUTTER = SubstituteFood(
    name="Plant butter", short_name="Plant butter",
    kcal_per_100g=717, protein_per_100g=0.2, carbs_per_100g=0.7, fats_per_100g=80,
)

# fallback substitute per category, keyed by preference
CATEGORY_DEFAULTS: Dict[str, Dict[str, SubstituteFood]] = {
    "poultry": {"pescatarian": _SALMON, "vegetarian": _TOFU, "vegan": _TOFU},
    "red_meat": {"pescatarian": _WHITE_FISH, "vegetarian": _TEMPEH, "vegan": _TEMPEH},
    "fish": {"vegetarian": _TOFU, "vegan": _TOFU},
    "seafood": {"vegetarian": _TOFU_SOY_SAUCE, "vegan": _TOFU_SOY_SAUCE},
    "egg": {"vegan": _TOFU_SCRAMBLE},
    "dairy": {"vegan": _SOY_YOGURT},
    "honey": {"vegan": _MAPLE_SYRUP},
}


def _meat(original, aliases, category, macros, pescatarian, plant):
    kcal, protein, carbs, fats = macros
    return FoodEntry(
        original=original, aliases=aliases, category=category,
        kcal_per_100g=kcal, protein_per_100g=protein, carbs_per_100g=carbs, fats_per_100g=fats,
        substitutes={"pescatarian": pescatarian, "vegetarian": plant, "vegan": plant},
    )


def _fish(original, aliases, category, macros, plant):
    kcal, protein, carbs, fats = macros
    return FoodEntry(
        original=original, aliases=aliases, category=category,
        kcal_per_100g=kcal, protein_per_100g=protein, carbs_per_100g=carbs, fats_per_100g=fats,
        substitutes={"vegetarian": plant, "vegan": plant},
    )


def _vegan_only(original, aliases, category, macros, plant, unit_grams=None):
    kcal, protein, carbs, fats = macros
    return FoodEntry(
        original=original, aliases=aliases, category=category,
        kcal_per_100g=kcal, protein_per_100g=protein, carbs_per_100g=carbs, fats_per_100g=fats,
        unit_grams=unit_grams, substitutes={"vegan": plant},
    )


DIETARY_SUBSTITUTIONS: List[FoodEntry] = [
    # poultry
    _meat("Chicken breast", ["chicken fillet", "chicken"], "poultry", (165, 31, 0, 3.6), _SALMON, _TOFU),
    _meat("Turkey fillet", ["turkey breast", "turkey"], "poultry", (135, 30, 0, 1), _TUNA, _SEITAN),
    # red meat
    _meat("Lean beef", ["beef", "ground beef", "beef steak"], "red_meat", (250, 26, 0, 15),
          _SALMON, _SEITAN_MUSHROOMS),
    _meat("Pork loin", ["pork"], "red_meat", (242, 27, 0, 14), _SHRIMP, _TEMPEH_MUSHROOMS),
    _meat("Lamb", ["lamb meat"], "red_meat", (294, 25, 0, 21), _WHITE_FISH, _LENTIL_QUINOA),
    # fish and seafood
    _fish("Salmon", ["salmon fillet"], "fish", (206, 22, 0, 13), _TOFU_FLAX),
    _fish("Cod", ["cod fillet", "white fish", "white fish fillet"], "fish", (82, 18, 0, 0.7), _TOFU_LIGHT),
    _fish("Tuna", ["tuna fillet", "canned tuna"], "fish", (116, 26, 0, 1), _CHICKPEAS),
    _fish("Shrimp", ["shrimps", "prawns"], "seafood", (99, 24, 0.2, 0.3), _TOFU_SOY_SAUCE),
    # eggs
    _vegan_only("Eggs", ["egg"], "egg", (155, 13, 1.1, 11), _TOFU_SCRAMBLE, unit_grams=50),
    _vegan_only("Egg whites", ["egg white"], "egg", (52, 11, 0.7, 0.2), _TOFU_SCRAMBLE, unit_grams=33),
    # dairy
    _vegan_only("Greek yogurt", [], "dairy", (97, 9, 4, 5), _SOY_YOGURT),
    _vegan_only("Yogurt", ["yoghurt", "natural yogurt"], "dairy", (61, 3.5, 4.7, 3.3), _SOY_YOGURT),
    _vegan_only("Cottage cheese", [], "dairy", (98, 11, 3.4, 4.3), _CASHEW_CREAM),
    _vegan_only("Milk", ["cow's milk"], "dairy", (42, 3.4, 5, 1), _SOY_MILK),
    _vegan_only("Feta cheese", ["feta", "cheese", "white cheese"], "dairy", (264, 14, 4, 21), _VEGAN_CHEESE),
    _vegan_only("Whey protein", ["protein powder", "protein shake"], "dairy", (400, 80, 8, 6), _PEA_PROTEIN),
    _vegan_only("Butter", [], "dairy", (717, 0.9, 0.1, 81), _PLANT_BUTTER),
    # other animal products
    _vegan_only("Honey", [], "honey", (304, 0.3, 82, 0), _MAPLE_SYRUP),
]


def normalize_name(name: str) -> str:
    return " ".join((name or "").lower().split())


def _words(name: str) -> Set[str]:
    return set(re.findall(r"[^\W\d_]+", normalize_name(name)))


@lru_cache(maxsize=None)
def _index() -> Dict[str, FoodEntry]:
    index = {}
    for entry in DIETARY_SUBSTITUTIONS:
        for key in [entry.original, *entry.aliases]:
            index[normalize_name(key)] = entry
    return index


def detect_categories(name: str) -> List[str]:
    """Every ingredient category named by the words of `name`, in table order.

    Composite names ("Ham and cheese") yield several categories. Plant-based
    products named after animal ones ("Almond milk", "Peanut butter") and
    names with no keyword yield none.
    """
    words = _words(name)
    if not words or words & PLANT_MARKERS:
        return []
    return [c for c, keywords in CATEGORY_KEYWORDS.items() if words & set(keywords)]


def detect_category(name: str) -> Optional[str]:
    """The first category of `detect_categories`, or None."""
    categories = detect_categories(name)
    return categories[0] if categories else None


def _name_terms(names: List[str], category: str) -> List[str]:
    """Terms that may refer to the ingredient inside a meal name, longest first."""
    terms = {normalize_name(n) for n in names if n}
    for name in names:
        terms.update(_words(name) & set(CATEGORY_KEYWORDS.get(category, [])))
    return sorted(terms, key=lambda t: (-len(t), t))


def find_substitution(ingredient_name: str, preference: str) -> Optional[SubstitutionRule]:
    """Return the substitution rule for an ingredient under a preference.

    Args:
        ingredient_name: Ingredient name as written in the meal plan.
        preference: Target dietary preference.

    Returns:
        A `SubstitutionRule`, or None if the ingredient is allowed under the
        preference or is not recognised.

    Raises:
        InvalidChoiceError: If `preference` is not a known dietary preference.
    """
    ensure_choice("dietary_preference", preference, DIETARY_PREFERENCES)
    disallowed = DISALLOWED_CATEGORIES[preference]
    if not disallowed:
        return None

    entry = _index().get(normalize_name(ingredient_name))
    if entry is not None:
        if entry.category not in disallowed:
            return None
        substitute = entry.substitutes.get(preference) or CATEGORY_DEFAULTS[entry.category][preference]
        return SubstitutionRule(
            original=entry.original,
            category=entry.category,
            terms=_name_terms([entry.original, *entry.aliases, ingredient_name], entry.category),
            substitute=substitute,
            kcal_per_100g=entry.kcal_per_100g,
            protein_per_100g=entry.protein_per_100g,
            carbs_per_100g=entry.carbs_per_100g,
            fats_per_100g=entry.fats_per_100g,
            unit_grams=entry.unit_grams,
        )

    category = next((c for c in detect_categories(ingredient_name) if c in disallowed), None)
    if category is None:
        return None
    logger.debug("No table entry for %r, using %s default", ingredient_name, category)
    return SubstitutionRule(
        original=ingredient_name,
        category=category,
        terms=_name_terms([ingredient_name], category),
        substitute=CATEGORY_DEFAULTS[category][preference],
    )


def get_all_substitutable_ingredients() -> List[str]:
    """Original names of every ingredient in the substitution table."""
    return [entry.original for entry in DIETARY_SUBSTITUTIONS]
