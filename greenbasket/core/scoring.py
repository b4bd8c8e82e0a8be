from typing import Iterable, List, Optional

from greenbasket.models.product import (
    Product,
    ScoreBreakdown,
    ScoreWeights,
    SustainabilityScore,
    with_score,
)
from greenbasket.utils.numbers import round_half_up

NEUTRAL_SCORE = 0.5

# Price at which the economic score bottoms out
PRICE_CEILING = 50.0
# kg CO2 at which the carbon component bottoms out
CARBON_CEILING = 5.0

ECO_SCORE_MAP = {"A": 1.0, "B": 0.8, "C": 0.6, "D": 0.4, "E": 0.2}
GOOD_NUTRITION_GRADES = {"A", "B"}

RECYCLABLE_MARKERS = ("recyclable", "reciclable", "biodegradable")
IMPORT_MARKER = "import"

FAIR_TRADE_MARKERS = ("fair trade", "fair-trade", "comercio justo")
ORGANIC_MARKERS = ("organic", "bio", "orgánico")
RAINFOREST_MARKERS = ("rainforest",)

MAX_ADDITIVES = 5

def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))

def _grade(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return str(value).strip().upper()[:1] or None

def _contains_any(text: str, markers: Iterable[str]) -> bool:
    return any(m in text for m in markers)

def calculate_economic_score(product: Product) -> float:
    # No price means an average price: neutral score, no nutrition bonus
    if not product.price:
        return NEUTRAL_SCORE

    score = 1 - min(product.price / PRICE_CEILING, 1)
    if _grade(product.nutrition_grade) in GOOD_NUTRITION_GRADES:
        score += 0.1
    return _clamp(score)

def calculate_environmental_score(product: Product) -> float:
    score = NEUTRAL_SCORE

    eco = _grade(product.eco_score)
    if eco:
        score = ECO_SCORE_MAP.get(eco, NEUTRAL_SCORE)

    if product.carbon_footprint is not None:
        carbon_score = max(0.0, 1 - product.carbon_footprint / CARBON_CEILING)
        score = score * 0.7 + carbon_score * 0.3

    packaging = (product.metadata.packaging or "").lower()
    if _contains_any(packaging, RECYCLABLE_MARKERS):
        score += 0.1

    origins = product.metadata.origins or ""
    if origins and IMPORT_MARKER not in origins.lower():
        score += 0.05

    return _clamp(score)

def calculate_social_score(product: Product) -> float:
    score = NEUTRAL_SCORE

    label_text = " ".join(product.metadata.labels_tags or []).lower()
    if _contains_any(label_text, FAIR_TRADE_MARKERS):
        score += 0.3
    if _contains_any(label_text, ORGANIC_MARKERS):
        score += 0.2
    if _contains_any(label_text, RAINFOREST_MARKERS):
        score += 0.1

    # Traceable origin
    if product.metadata.origins:
        score += 0.1

    if len(product.metadata.additives or []) > MAX_ADDITIVES:
        score -= 0.1

    return _clamp(score)

def calculate_sustainability_score(
    product: Product,
    weights: Optional[ScoreWeights] = None,
) -> SustainabilityScore:
    """Score one product.

    The weights are used as given and echoed back in the result; callers are
    responsible for making them sum to 1.0.
    """
    if weights is None:
        weights = ScoreWeights()

    economic = calculate_economic_score(product)
    environmental = calculate_environmental_score(product)
    social = calculate_social_score(product)

    total = (
        economic * weights.economic
        + environmental * weights.environmental
        + social * weights.social
    )

    return SustainabilityScore(
        total=round_half_up(total),
        breakdown=ScoreBreakdown(
            economic=round_half_up(economic),
            environmental=round_half_up(environmental),
            social=round_half_up(social),
        ),
        weights=weights,
    )

def calculate_scores_for_products(
    products: Iterable[Product],
    weights: Optional[ScoreWeights] = None,
) -> List[Product]:
    """Return copies of ``products`` carrying a fresh sustainability score."""
    return [with_score(p, calculate_sustainability_score(p, weights)) for p in products]
