from collections import Counter
from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from greenbasket.config.settings import DEFAULT_CURRENCY
from greenbasket.core.categories import (
    CategoryMatch,
    CategoryRelevance,
    are_incompatible,
    assess_relevance,
    extract_categories,
)
from greenbasket.models.product import (
    RECOMMENDATION_LABELS,
    Product,
    RecommendationType,
    SubstituteCandidate,
    carbon_or_zero,
    identity_key,
    price_or_zero,
    score_or_default,
    score_total,
)
from greenbasket.utils.logger import logger

# Regression tolerated when the candidate shares a category signal
SHARED_CATEGORY_TOLERANCE = 0.05
# Regression tolerated when categories or names are only loosely similar
SIMILAR_CATEGORY_TOLERANCE = 0.03
# Regression tolerated for balanced backfill picks
BALANCED_TOLERANCE = 0.02
# Per-axis scores closer than this are compared on price instead
DIMENSION_TIE_MARGIN = 0.05

ANIMAL_INGREDIENTS = ("leche", "huevo", "miel", "carne", "milk", "egg", "honey", "meat")
GLUTEN_INGREDIENTS = ("trigo", "cebada", "centeno", "wheat", "barley", "rye")
VEGAN_LABELS = ("vegan",)
GLUTEN_FREE_LABELS = ("gluten-free", "sin gluten", "no-gluten")

# Filter rejection reasons
SAME_PRODUCT = "same_product"
NO_CATEGORY_MATCH = "no_category_match"
INCOMPATIBLE_CATEGORIES = "incompatible_categories"
SCORE_TOO_LOW_SHARED = "score_too_low_shared"
SCORE_TOO_LOW = "score_too_low"
PRICE_TOO_HIGH = "price_too_high"
NOT_VEGAN = "not_vegan"
HAS_GLUTEN = "has_gluten"

@dataclass
class DietaryRestrictions:
    vegan: bool = False
    gluten_free: bool = False

@dataclass
class SubstitutionCriteria:
    min_score_improvement: float = 0.1
    same_category: bool = True
    max_results: int = 5
    # 0.2 means at most 20% more expensive
    max_price_increase: float = 0.2
    dietary_restrictions: Optional[DietaryRestrictions] = None

@dataclass
class CompositeWeights:
    score: float = 0.5
    price: float = 0.3
    carbon: float = 0.2

@dataclass
class SubstitutionSearch:
    original: Product
    substitutes: List[SubstituteCandidate] = field(default_factory=list)
    message: str = ""
    rejections: Dict[str, int] = field(default_factory=dict)

def is_same_product(product: Product, candidate: Product) -> bool:
    if product.product_id is not None and candidate.product_id == product.product_id:
        return True
    if product.barcode and candidate.barcode == product.barcode:
        return True
    name = (product.name or "").strip().lower()
    return bool(name) and (candidate.name or "").strip().lower() == name

def _score_rejection(
    product: Product,
    candidate: Product,
    relevance: CategoryRelevance,
    criteria: SubstitutionCriteria,
) -> Optional[str]:
    current = score_total(product)
    candidate_score = score_total(candidate)

    adjusted = candidate_score + relevance.category_bonus
    match = relevance.match

    if match is CategoryMatch.STRONG_MATCH:
        if adjusted < current - SHARED_CATEGORY_TOLERANCE:
            return SCORE_TOO_LOW_SHARED
    elif match is CategoryMatch.WEAK_MATCH:
        if adjusted < current - SIMILAR_CATEGORY_TOLERANCE:
            return SCORE_TOO_LOW
    elif adjusted < current + criteria.min_score_improvement:
        return SCORE_TOO_LOW

    # The category bonus never lifts a candidate past the loosest tolerance
    if candidate_score < current - SHARED_CATEGORY_TOLERANCE:
        return SCORE_TOO_LOW_SHARED if match is CategoryMatch.STRONG_MATCH else SCORE_TOO_LOW
    return None

def _dietary_rejection(candidate: Product, restrictions: DietaryRestrictions) -> Optional[str]:
    labels = " ".join(candidate.metadata.labels_tags or []).lower()
    ingredients = (candidate.metadata.ingredients_text or "").lower()

    if restrictions.vegan:
        vegan_label = any(m in labels for m in VEGAN_LABELS)
        if not vegan_label and any(i in ingredients for i in ANIMAL_INGREDIENTS):
            return NOT_VEGAN

    if restrictions.gluten_free:
        gluten_free_label = any(m in labels for m in GLUTEN_FREE_LABELS)
        if not gluten_free_label and any(i in ingredients for i in GLUTEN_INGREDIENTS):
            return HAS_GLUTEN
    return None

def _filter_reason(
    product: Product,
    candidate: Product,
    relevance: CategoryRelevance,
    criteria: SubstitutionCriteria,
) -> Optional[str]:
    if criteria.same_category and not relevance.has_signal:
        return NO_CATEGORY_MATCH

    if are_incompatible(product, candidate):
        return INCOMPATIBLE_CATEGORIES

    reason = _score_rejection(product, candidate, relevance, criteria)
    if reason:
        return reason

    if product.price is not None:
        product_currency = product.currency or DEFAULT_CURRENCY
        candidate_currency = candidate.currency or product_currency
        if candidate_currency == product_currency:
            ceiling = product.price * (1 + criteria.max_price_increase)
            if price_or_zero(candidate) > ceiling:
                return PRICE_TOO_HIGH
        else:
            logger.warning(
                f"Currency mismatch: product={product_currency}, candidate={candidate_currency} "
                f"for '{candidate.name}', skipping price check"
            )

    if criteria.dietary_restrictions:
        return _dietary_rejection(candidate, criteria.dietary_restrictions)
    return None

def _screen(
    product: Product,
    candidate: Product,
    criteria: SubstitutionCriteria,
) -> Tuple[Optional[str], Optional[CategoryRelevance]]:
    if is_same_product(product, candidate):
        return SAME_PRODUCT, None

    relevance = assess_relevance(product, candidate)
    return _filter_reason(product, candidate, relevance, criteria), relevance

def rejection_reason(
    product: Product,
    candidate: Product,
    criteria: SubstitutionCriteria,
) -> Optional[str]:
    """Run the filter pipeline on one candidate; None means it passes."""
    return _screen(product, candidate, criteria)[0]

def annotate(
    product: Product,
    candidate: Product,
    relevance: Optional[CategoryRelevance] = None,
) -> SubstituteCandidate:
    if relevance is None:
        relevance = assess_relevance(product, candidate)
    original = score_or_default(product).breakdown
    breakdown = score_or_default(candidate).breakdown
    return SubstituteCandidate(
        product=candidate,
        economic_improvement=breakdown.economic - original.economic,
        environmental_improvement=breakdown.environmental - original.environmental,
        social_improvement=breakdown.social - original.social,
        price_difference=price_or_zero(candidate) - price_or_zero(product),
        category_bonus=relevance.category_bonus,
    )

def _labelled(candidate: SubstituteCandidate, kind: RecommendationType) -> SubstituteCandidate:
    return replace(candidate, recommendation_type=kind, recommendation_label=RECOMMENDATION_LABELS[kind])

def _total(candidate: SubstituteCandidate) -> float:
    return score_total(candidate.product)

def _dimension(kind: RecommendationType) -> Callable[[Product], float]:
    attr = kind.value
    return lambda p: getattr(score_or_default(p).breakdown, attr)

def _best_for(
    candidates: List[SubstituteCandidate],
    product: Product,
    kind: RecommendationType,
) -> Optional[SubstituteCandidate]:
    if not candidates:
        return None
    current = score_total(product)
    dimension = _dimension(kind)
    baseline = dimension(product)

    def improves(c: SubstituteCandidate) -> bool:
        if kind is RecommendationType.ECONOMIC and c.price_difference < 0:
            return True
        return dimension(c.product) >= baseline

    def compare(a: SubstituteCandidate, b: SubstituteCandidate) -> int:
        a_total, b_total = _total(a) >= current, _total(b) >= current
        if a_total != b_total:
            return -1 if a_total else 1
        a_better, b_better = improves(a), improves(b)
        if a_better != b_better:
            return -1 if a_better else 1
        a_dim, b_dim = dimension(a.product), dimension(b.product)
        if abs(a_dim - b_dim) < DIMENSION_TIE_MARGIN:
            diff = a.price_difference - b.price_difference
        else:
            diff = b_dim - a_dim
        return (diff > 0) - (diff < 0)

    return sorted(candidates, key=cmp_to_key(compare))[0]

def _best_dimension(candidate: SubstituteCandidate) -> RecommendationType:
    breakdown = score_or_default(candidate.product).breakdown
    if breakdown.economic >= breakdown.environmental and breakdown.economic >= breakdown.social:
        return RecommendationType.ECONOMIC
    if breakdown.environmental >= breakdown.social:
        return RecommendationType.ENVIRONMENTAL
    return RecommendationType.SOCIAL

def _rank(product: Product, candidates: List[SubstituteCandidate], max_results: int) -> List[SubstituteCandidate]:
    if len(candidates) == 1:
        only = candidates[0]
        return [_labelled(only, _best_dimension(only))]

    result: List[SubstituteCandidate] = []
    added = set()
    for kind in (RecommendationType.ECONOMIC, RecommendationType.ENVIRONMENTAL, RecommendationType.SOCIAL):
        best = _best_for(candidates, product, kind)
        if best is not None and identity_key(best.product) not in added:
            result.append(_labelled(best, kind))
            added.add(identity_key(best.product))

    if len(result) < max_results:
        current = score_total(product)
        backfill = [
            c for c in candidates
            if identity_key(c.product) not in added and _total(c) >= current - BALANCED_TOLERANCE
        ]
        backfill.sort(key=lambda c: (_total(c) >= current, _total(c)), reverse=True)
        for candidate in backfill[: max_results - len(result)]:
            result.append(_labelled(candidate, RecommendationType.BALANCED))
            added.add(identity_key(candidate.product))

    return result[:max_results]

def search_substitutes(
    product: Product,
    available_products: Sequence[Product],
    criteria: Optional[SubstitutionCriteria] = None,
) -> SubstitutionSearch:
    if criteria is None:
        criteria = SubstitutionCriteria()

    logger.info(
        f"Finding substitutes for '{product.name}' "
        f"(score {score_total(product):.2f}, price {price_or_zero(product):.2f})"
    )
    logger.debug(f"Original categories: {', '.join(extract_categories(product))}")

    rejections: Counter = Counter()
    survivors: List[SubstituteCandidate] = []
    seen = set()
    for candidate in available_products:
        reason, relevance = _screen(product, candidate, criteria)
        if reason:
            rejections[reason] += 1
            logger.debug(f"Rejected '{candidate.name}': {reason}")
            continue
        key = identity_key(candidate)
        if key in seen:
            continue
        seen.add(key)
        survivors.append(annotate(product, candidate, relevance))

    logger.info(f"Filtered {len(survivors)} valid candidates from {len(available_products)} total")

    search = SubstitutionSearch(original=product, rejections=dict(rejections))
    if criteria.max_results <= 0 or not survivors:
        if rejections:
            top = ", ".join(f"{r}: {n}" for r, n in rejections.most_common(5))
            logger.info(f"All candidates were rejected. Top rejection reasons: {top}")
        search.message = "No substitutes found matching constraints."
        return search

    search.substitutes = _rank(product, survivors, criteria.max_results)
    search.message = f"Found {len(search.substitutes)} substitutes."
    return search

def find_smart_substitutes(
    product: Product,
    available_products: Sequence[Product],
    criteria: Optional[SubstitutionCriteria] = None,
) -> List[SubstituteCandidate]:
    return search_substitutes(product, available_products, criteria).substitutes

def suggest_substitutes_for_list(
    products: Sequence[Product],
    available_products: Sequence[Product],
    criteria: Optional[SubstitutionCriteria] = None,
) -> List[Tuple[Product, List[SubstituteCandidate]]]:
    return [(p, find_smart_substitutes(p, available_products, criteria)) for p in products]

def composite_score(product: Product, substitute: SubstituteCandidate, weights: CompositeWeights) -> float:
    score_improvement = _total(substitute) - score_total(product)
    original_price = price_or_zero(product)
    price_ratio = price_or_zero(substitute.product) / original_price if original_price > 0 else 1.0

    original_carbon = carbon_or_zero(product)
    carbon_improvement = (original_carbon - carbon_or_zero(substitute.product)) / max(original_carbon or 1.0, 1.0)

    normalized_score = min(score_improvement / 0.5, 1.0)
    normalized_price = 1 / price_ratio if price_ratio > 0 else 1.0
    normalized_carbon = max(0.0, min(1.0, carbon_improvement + 0.5))

    return (
        normalized_score * weights.score
        + normalized_price * weights.price
        + normalized_carbon * weights.carbon
    )

def find_best_substitute(
    product: Product,
    available_products: Sequence[Product],
    weights: Optional[CompositeWeights] = None,
) -> Optional[SubstituteCandidate]:
    """Single best alternative across categories by score, price and carbon."""
    if weights is None:
        weights = CompositeWeights()

    substitutes = find_smart_substitutes(
        product,
        available_products,
        SubstitutionCriteria(min_score_improvement=0.05, same_category=False, max_results=10),
    )
    if not substitutes:
        return None

    scored = [replace(s, composite_score=composite_score(product, s, weights)) for s in substitutes]
    # max() keeps the first of equal composites
    return max(scored, key=lambda s: s.composite_score)
