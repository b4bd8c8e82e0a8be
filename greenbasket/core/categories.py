import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List

from greenbasket.models.product import Product

LOCALE_PREFIX = re.compile(r"^[a-z]{2,3}:")
WORD_SPLIT = re.compile(r"[\s,-]+")

# Labels too broad to say two products serve the same purpose
GENERIC_CATEGORIES = (
    "alimentos y bebidas de origen vegetal",
    "alimentos de origen vegetal",
    "alimentos",
    "bebidas",
    "desayunos",
    "plant-based foods and beverages",
    "plant-based foods",
    "beverages",
    "breakfasts",
    "specific products",
    "products for specific diets",
)

MIN_CATEGORY_LENGTH = 3
MIN_KEYWORD_LENGTH = 4
PREFIX_LENGTH = 4

# Mutually exclusive groups: a product in ``categories`` must never be
# replaced by one in ``incompatible_with`` (no butter for milk).
INCOMPATIBLE_CATEGORY_GROUPS: List[Dict[str, List[str]]] = [
    {
        "name": "milk",
        "categories": [
            "leche", "leches", "milk", "milks", "leche semidesnatada", "leche semidescremada",
            "leche entera", "leche desnatada", "leche descremada", "whole-milks",
            "semi-skimmed milk", "skimmed milk", "leche-uht", "leche-de-vaca", "leche sin lactosa",
        ],
        "incompatible_with": [
            "nata", "crema", "cream", "queso", "cheese", "mantequilla", "butter",
            "dairy-spread", "grasas de la leche", "grasas animales",
        ],
    },
    {
        "name": "cream",
        "categories": ["nata", "crema", "cream"],
        "incompatible_with": ["leche", "leches", "milk", "milks", "queso", "cheese", "mantequilla", "butter"],
    },
    {
        "name": "cheese",
        "categories": ["queso", "cheese", "queso rallado"],
        "incompatible_with": ["leche", "leches", "milk", "nata", "crema", "cream", "mantequilla", "butter"],
    },
    {
        "name": "butter",
        "categories": ["mantequilla", "butter", "dairy-spread", "grasas de la leche"],
        "incompatible_with": ["leche", "leches", "milk", "nata", "crema", "cream", "queso", "cheese"],
    },
]

MAX_SHARED_BONUS = 0.15
SHARED_BONUS_STEP = 0.05
MOST_SPECIFIC_BONUS = 0.1

class CategoryMatch(str, Enum):
    NO_MATCH = "no_match"
    WEAK_MATCH = "weak_match"
    STRONG_MATCH = "strong_match"

@dataclass
class CategoryRelevance:
    basic: bool = False
    keyword: bool = False
    significant: bool = False
    name: bool = False
    similar: bool = False
    shared_significant: List[str] = field(default_factory=list)
    category_bonus: float = 0.0

    @property
    def match(self) -> CategoryMatch:
        if self.basic or self.keyword or self.significant:
            return CategoryMatch.STRONG_MATCH
        if self.name or self.similar:
            return CategoryMatch.WEAK_MATCH
        return CategoryMatch.NO_MATCH

    @property
    def has_signal(self) -> bool:
        """True when any of the four same-category signals fired."""
        return self.basic or self.keyword or self.significant or self.name

def _dedupe(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))

def _overlaps(left: Iterable[str], right: Iterable[str]) -> bool:
    right = list(right)
    return any(a in b or b in a for a in left for b in right)

def extract_categories(product: Product) -> List[str]:
    categories: List[str] = []
    if product.category:
        categories.extend(c.strip() for c in product.category.lower().split(","))
    for tag in product.metadata.categories_tags or []:
        categories.append(LOCALE_PREFIX.sub("", str(tag).strip().lower()))
    return _dedupe(c for c in categories if c)

def significant_categories(categories: Iterable[str]) -> List[str]:
    return [
        c for c in categories
        if len(c) > MIN_CATEGORY_LENGTH and not any(g in c for g in GENERIC_CATEGORIES)
    ]

def category_keywords(categories: Iterable[str]) -> List[str]:
    words: List[str] = []
    for category in categories:
        words.extend(w for w in WORD_SPLIT.split(category) if len(w) >= MIN_KEYWORD_LENGTH)
    return _dedupe(words)

def name_words(product: Product) -> List[str]:
    return [w for w in (product.name or "").lower().split() if len(w) >= MIN_KEYWORD_LENGTH]

def _names_share_prefix(left: List[str], right: List[str]) -> bool:
    prefixes = {w[:PREFIX_LENGTH] for w in right}
    return any(w[:PREFIX_LENGTH] in prefixes for w in left)

def _similar_categories(left: List[str], right: List[str]) -> bool:
    return any(a[:PREFIX_LENGTH] in b or b[:PREFIX_LENGTH] in a for a in left for b in right)

def category_bonus(product_significant: List[str], candidate_significant: List[str]) -> float:
    """Score bonus (0 to 0.25) for shared significant categories."""
    if not product_significant or not candidate_significant:
        return 0.0
    shared = [c for c in product_significant if _overlaps([c], candidate_significant)]
    if not shared:
        return 0.0

    bonus = min(MAX_SHARED_BONUS, len(shared) * SHARED_BONUS_STEP)
    most_specific = product_significant[-1]
    candidate_specific = candidate_significant[-1]
    if candidate_specific in most_specific or most_specific in candidate_specific:
        bonus += MOST_SPECIFIC_BONUS
    return bonus

def assess_relevance(product: Product, candidate: Product) -> CategoryRelevance:
    product_cats = extract_categories(product)
    candidate_cats = extract_categories(candidate)

    product_basic = [c for c in product_cats if len(c) >= MIN_CATEGORY_LENGTH]
    candidate_basic = [c for c in candidate_cats if len(c) >= MIN_CATEGORY_LENGTH]
    product_significant = significant_categories(product_cats)
    candidate_significant = significant_categories(candidate_cats)

    return CategoryRelevance(
        basic=_overlaps(product_basic, candidate_basic),
        keyword=_overlaps(category_keywords(product_cats), category_keywords(candidate_cats)),
        significant=_overlaps(product_significant, candidate_significant),
        name=_names_share_prefix(name_words(product), name_words(candidate)),
        similar=_similar_categories(product_cats, candidate_cats),
        shared_significant=[c for c in product_significant if _overlaps([c], candidate_significant)],
        category_bonus=category_bonus(product_significant, candidate_significant),
    )

def are_incompatible(product: Product, candidate: Product) -> bool:
    product_significant = significant_categories(extract_categories(product))
    candidate_significant = significant_categories(extract_categories(candidate))
    for group in INCOMPATIBLE_CATEGORY_GROUPS:
        if _overlaps(group["categories"], product_significant) and _overlaps(
            group["incompatible_with"], candidate_significant
        ):
            return True
    return False
