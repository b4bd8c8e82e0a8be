import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from greenbasket.config.settings import HYBRID_DP_THRESHOLD
from greenbasket.models.product import (
    OptimizationResult,
    Product,
    Savings,
    SelectedItem,
    carbon_or_zero,
    price_or_zero,
    quantity_or_one,
)
from greenbasket.utils.exceptions import InvalidBudgetError
from greenbasket.utils.logger import logger
from greenbasket.utils.numbers import round_half_up

GREEDY = "greedy"
DYNAMIC_PROGRAMMING = "dynamic_programming"

NO_VALID_PRODUCTS_MESSAGE = "No valid products to optimize"

@dataclass
class OptimizationOptions:
    min_score: float = 0.0
    prioritize_sustainability: bool = True
    # Reserved: neither strategy splits quantities yet
    allow_partial: bool = False

@dataclass
class Selection:
    items: List[Product] = field(default_factory=list)
    message: str = ""
    strategy: Optional[str] = None

def validate_budget(max_budget: float) -> float:
    try:
        budget = float(max_budget)
    except (TypeError, ValueError) as e:
        raise InvalidBudgetError(f"Budget must be a number, got {max_budget!r}") from e
    if not math.isfinite(budget) or budget < 0:
        raise InvalidBudgetError(f"Budget must be a finite non-negative number, got {max_budget!r}")
    return budget

def is_eligible(product: Product) -> bool:
    """Positive price and a computed score."""
    price = product.price
    return (
        price is not None
        and math.isfinite(price)
        and price > 0
        and product.sustainability_score is not None
        and product.sustainability_score.total is not None
    )

def line_cost(product: Product) -> float:
    return price_or_zero(product) * quantity_or_one(product)

def to_cents(amount: float) -> int:
    # round() first so 1.15 * 100 = 114.99999999999999 lands in the 115 bucket
    return math.floor(round(amount * 100, 6))

def greedy_optimization(products: Sequence[Product], max_budget: float, min_score: float = 0.0) -> Selection:
    # sorted() is stable, so equal ratios keep their input order
    ranked = sorted(
        products,
        key=lambda p: p.sustainability_score.total / p.price,
        reverse=True,
    )

    selected: List[Product] = []
    remaining = max_budget
    for product in ranked:
        cost = line_cost(product)
        if cost <= remaining and product.sustainability_score.total >= min_score:
            selected.append(product)
            remaining -= cost

    return Selection(
        items=selected,
        message=f"Selected {len(selected)} products using the greedy strategy",
        strategy=GREEDY,
    )

# Exact 0/1 knapsack over integer cents: O(n * budget_cents) time and memory
def dynamic_programming_optimization(
    products: Sequence[Product], max_budget: float, min_score: float = 0.0
) -> Selection:
    candidates = [p for p in products if p.sustainability_score.total >= min_score]
    if not candidates:
        return Selection(
            message="No product meets the minimum score required",
            strategy=DYNAMIC_PROGRAMMING,
        )

    budget_cents = to_cents(max_budget)
    costs = [to_cents(line_cost(p)) for p in candidates]

    # best[w]: best score so far within w cents; take[i][w]: item i taken at w
    best = [0.0] * (budget_cents + 1)
    take: List[bytearray] = []
    for product, cost in zip(candidates, costs):
        score = product.sustainability_score.total
        row = bytearray(budget_cents + 1)
        current = best[:]
        for w in range(cost, budget_cents + 1):
            with_item = best[w - cost] + score
            if with_item > current[w]:
                current[w] = with_item
                row[w] = 1
        best = current
        take.append(row)

    chosen: List[Product] = []
    w = budget_cents
    for i in range(len(candidates) - 1, -1, -1):
        if take[i][w]:
            chosen.append(candidates[i])
            w -= costs[i]
    chosen.reverse()

    return Selection(
        items=chosen,
        message=f"Selected {len(chosen)} products using dynamic programming",
        strategy=DYNAMIC_PROGRAMMING,
    )

def _empty_result(message: str) -> OptimizationResult:
    return OptimizationResult(message=message)

def _build_result(
    selection: Selection,
    original: Sequence[Product],
    max_budget: float,
) -> OptimizationResult:
    chosen = selection.items
    total_cost = sum(line_cost(p) for p in chosen)
    total_score = sum(p.sustainability_score.total * quantity_or_one(p) for p in chosen)
    total_carbon = sum(carbon_or_zero(p) * quantity_or_one(p) for p in chosen)

    original_cost = sum(line_cost(p) for p in original)
    original_carbon = sum(carbon_or_zero(p) * quantity_or_one(p) for p in original)

    percentage = 0
    if original_cost > 0:
        percentage = int(round_half_up((original_cost - total_cost) / original_cost * 100, 0))

    return OptimizationResult(
        selected=[SelectedItem(product=p, quantity=quantity_or_one(p)) for p in chosen],
        total_cost=round_half_up(total_cost),
        total_score=round_half_up(total_score),
        total_carbon=round_half_up(total_carbon),
        savings=Savings(
            economic=max(0.0, round_half_up(original_cost - total_cost)),
            carbon=max(0.0, round_half_up(original_carbon - total_carbon)),
            percentage=percentage,
        ),
        budget_used=round_half_up(total_cost / max_budget) if max_budget > 0 else 0.0,
        message=selection.message or "List optimized successfully",
        strategy=selection.strategy,
    )

def optimize_shopping_list(
    products: Sequence[Product],
    max_budget: float,
    options: Optional[OptimizationOptions] = None,
) -> OptimizationResult:
    """Select the subset of ``products`` with the best total score within budget.

    Products without a positive price or without a score are ignored. Savings
    are measured against the full, unfiltered input list.
    """
    budget = validate_budget(max_budget)
    if options is None:
        options = OptimizationOptions()

    eligible = [p for p in products if is_eligible(p)]
    if not eligible:
        logger.info(f"Optimization skipped: none of {len(products)} products is priced and scored")
        return _empty_result(NO_VALID_PRODUCTS_MESSAGE)

    if options.prioritize_sustainability:
        selection = greedy_optimization(eligible, budget, options.min_score)
    else:
        selection = dynamic_programming_optimization(eligible, budget, options.min_score)

    result = _build_result(selection, products, budget)
    logger.info(
        f"Optimized {len(eligible)}/{len(products)} eligible products with {selection.strategy}: "
        f"{len(result.selected)} selected, cost {result.total_cost} of {budget}"
    )
    return result

def hybrid_optimization(
    products: Sequence[Product],
    max_budget: float,
    min_score: float = 0.0,
) -> OptimizationResult:
    """Exact DP for small inputs, greedy above ``HYBRID_DP_THRESHOLD`` items."""
    budget = validate_budget(max_budget)
    eligible = [p for p in products if is_eligible(p)]
    if not eligible:
        return _empty_result(NO_VALID_PRODUCTS_MESSAGE)

    if len(eligible) <= HYBRID_DP_THRESHOLD:
        selection = dynamic_programming_optimization(eligible, budget, min_score)
    else:
        selection = greedy_optimization(eligible, budget, min_score)
    return _build_result(selection, products, budget)
