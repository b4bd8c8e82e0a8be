from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Callable, List, Optional, Sequence

from greenbasket.config.settings import MAX_SEARCH_WORKERS
from greenbasket.core.knapsack import line_cost, validate_budget
from greenbasket.core.scoring import calculate_sustainability_score
from greenbasket.core.substitution import (
    BALANCED_TOLERANCE,
    SubstitutionCriteria,
    SubstitutionSearch,
    is_same_product,
    search_substitutes,
)
from greenbasket.models.product import (
    Product,
    Savings,
    SubstituteCandidate,
    carbon_or_zero,
    price_or_zero,
    quantity_or_one,
    score_total,
    with_quantity,
    with_score,
)
from greenbasket.utils.logger import logger
from greenbasket.utils.numbers import round_half_up

# Totals closer than this are ranked by price
TOTAL_TIE_MARGIN = 0.01

KEEP_NO_SUBSTITUTE = "no_substitute"
KEEP_SAME_PRODUCT = "same_product"
KEEP_NO_IMPROVEMENT = "no_improvement"
KEEP_OVER_BUDGET = "over_budget"
SWAP_CHEAPER = "cheaper_and_better"
SWAP_WITHIN_BUDGET = "better_within_budget"

PoolProvider = Callable[[Product], Sequence[Product]]

@dataclass
class ItemDecision:
    original: Product
    chosen: Product
    swapped: bool
    reason: str
    improvement: float = 0.0
    substitute: Optional[SubstituteCandidate] = None

@dataclass
class ListSummary:
    items: List[Product] = field(default_factory=list)
    total_cost: float = 0.0
    total_score: float = 0.0
    total_carbon: float = 0.0

@dataclass
class ListOptimizationResult:
    original: ListSummary = field(default_factory=ListSummary)
    optimized: ListSummary = field(default_factory=ListSummary)
    decisions: List[ItemDecision] = field(default_factory=list)
    savings: Savings = field(default_factory=Savings)
    budget_used: float = 0.0
    message: str = ""

    @property
    def swaps(self) -> List[ItemDecision]:
        return [d for d in self.decisions if d.swapped]

def _summary(items: List[Product]) -> ListSummary:
    units = sum(quantity_or_one(p) for p in items)
    score = sum(score_total(p) * quantity_or_one(p) for p in items)
    return ListSummary(
        items=items,
        total_cost=round_half_up(sum(line_cost(p) for p in items)),
        # Average score per unit bought
        total_score=round_half_up(score / units) if units else 0.0,
        total_carbon=round_half_up(sum(carbon_or_zero(p) * quantity_or_one(p) for p in items)),
    )

def _ensure_scored(item: Product) -> Product:
    if item.sustainability_score is not None:
        return item
    return with_score(item, calculate_sustainability_score(item))

def best_swap_candidate(item: Product, substitutes: Sequence[SubstituteCandidate]) -> Optional[SubstituteCandidate]:
    """Highest total within tolerance of the item; near-equal totals by price."""
    floor = score_total(item) - BALANCED_TOLERANCE
    eligible = [s for s in substitutes if s.total >= floor]
    if not eligible:
        return None

    def compare(a: SubstituteCandidate, b: SubstituteCandidate) -> int:
        if abs(a.total - b.total) > TOTAL_TIE_MARGIN:
            diff = b.total - a.total
        else:
            diff = price_or_zero(a.product) - price_or_zero(b.product)
        return (diff > 0) - (diff < 0)

    return sorted(eligible, key=cmp_to_key(compare))[0]

def _search_all(
    items: List[Product],
    pool_for: PoolProvider,
    criteria: Optional[SubstitutionCriteria],
    max_workers: int,
) -> List[List[SubstituteCandidate]]:
    def run(item: Product) -> List[SubstituteCandidate]:
        try:
            search: SubstitutionSearch = search_substitutes(item, pool_for(item), criteria)
        except Exception:
            logger.exception(f"Error finding substitutes for '{item.name}'")
            return []
        return search.substitutes

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map() yields in submission order
        return list(executor.map(run, items))

def decide(
    item: Product,
    substitutes: Sequence[SubstituteCandidate],
    current_cost: float,
    max_budget: float,
) -> ItemDecision:
    best = best_swap_candidate(item, substitutes)
    if best is None:
        return ItemDecision(original=item, chosen=item, swapped=False, reason=KEEP_NO_SUBSTITUTE)

    if is_same_product(item, best.product):
        logger.info(f"Keeping '{item.name}': substitute is the same product")
        return ItemDecision(original=item, chosen=item, swapped=False, reason=KEEP_SAME_PRODUCT)

    improvement = best.total - score_total(item)
    if improvement <= 0:
        logger.info(f"Keeping '{item.name}': substitute does not improve the score")
        return ItemDecision(original=item, chosen=item, swapped=False, reason=KEEP_NO_IMPROVEMENT)

    quantity = quantity_or_one(item)
    cost_diff = price_or_zero(best.product) * quantity - line_cost(item)
    chosen = with_quantity(best.product, item.quantity)

    if cost_diff <= 0:
        logger.info(f"Swapping '{item.name}' for '{best.product.name}' (cheaper and better)")
        return ItemDecision(item, chosen, True, SWAP_CHEAPER, improvement, best)
    if current_cost + cost_diff <= max_budget:
        logger.info(f"Swapping '{item.name}' for '{best.product.name}' (better, within budget)")
        return ItemDecision(item, chosen, True, SWAP_WITHIN_BUDGET, improvement, best)

    logger.info(f"Keeping '{item.name}': substitute would exceed the budget")
    return ItemDecision(original=item, chosen=item, swapped=False, reason=KEEP_OVER_BUDGET)

def optimize_list(
    items: Sequence[Product],
    pool_for: PoolProvider,
    max_budget: float,
    criteria: Optional[SubstitutionCriteria] = None,
    max_workers: Optional[int] = None,
) -> ListOptimizationResult:
    """Swap list items for better-scoring substitutes while the budget allows.

    ``pool_for`` returns the candidate products for one item; it is called
    from worker threads and must be safe to call concurrently.
    """
    budget = validate_budget(max_budget)
    if not items:
        return ListOptimizationResult(message="No products in the list to optimize")

    scored = [_ensure_scored(item) for item in items]
    substitutes = _search_all(scored, pool_for, criteria, max_workers or MAX_SEARCH_WORKERS)

    current_cost = sum(line_cost(p) for p in scored)
    decisions: List[ItemDecision] = []
    for item, found in zip(scored, substitutes):
        decision = decide(item, found, current_cost, budget)
        if decision.swapped:
            current_cost += line_cost(decision.chosen) - line_cost(item)
        decisions.append(decision)

    original = _summary(scored)
    optimized = _summary([d.chosen for d in decisions])

    original_cost = sum(line_cost(p) for p in scored)
    optimized_cost = sum(line_cost(d.chosen) for d in decisions)
    original_carbon = sum(carbon_or_zero(p) * quantity_or_one(p) for p in scored)
    optimized_carbon = sum(carbon_or_zero(d.chosen) * quantity_or_one(d.chosen) for d in decisions)

    percentage = 0
    if original_cost > 0:
        percentage = int(round_half_up((original_cost - optimized_cost) / original_cost * 100, 0))

    swapped = sum(1 for d in decisions if d.swapped)
    logger.info(f"List optimized: {swapped}/{len(decisions)} items swapped, cost {optimized.total_cost}")

    return ListOptimizationResult(
        original=original,
        optimized=optimized,
        decisions=decisions,
        savings=Savings(
            economic=max(0.0, round_half_up(original_cost - optimized_cost)),
            carbon=max(0.0, round_half_up(original_carbon - optimized_carbon)),
            percentage=percentage,
        ),
        budget_used=round_half_up(optimized_cost / budget) if budget > 0 else 0.0,
        message=f"List optimized with smart substitutions ({swapped} swapped)",
    )
