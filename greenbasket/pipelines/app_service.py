from typing import List, Dict, Optional
import networkx as nx

from greenbasket.core.candidates import candidate_pool
from greenbasket.core.kg_builder import build_kg, index_products
from greenbasket.core.knapsack import OptimizationOptions, hybrid_optimization, optimize_shopping_list
from greenbasket.core.scoring import calculate_scores_for_products
from greenbasket.core.substitution import (
    SubstitutionCriteria,
    SubstitutionSearch,
    find_best_substitute,
    search_substitutes,
)
from greenbasket.core.visualize import plot_score_breakdown, visualize_search_path
from greenbasket.data_access.loader import load_products
from greenbasket.models.product import OptimizationResult, Product, ScoreWeights, SubstituteCandidate, with_quantity
from greenbasket.pipelines.list_optimizer import ListOptimizationResult, optimize_list

class AppService:
    """High-level service used by the Streamlit app."""

    def __init__(
        self,
        products: Optional[List[Product]] = None,
        weights: Optional[ScoreWeights] = None,
    ) -> None:
        raw = products if products is not None else load_products()
        self.products: List[Product] = calculate_scores_for_products(raw, weights)
        self.KG: nx.Graph = build_kg(self.products)
        self.node_to_product: Dict[str, Product] = index_products(self.products)
        self.by_name: Dict[str, Product] = {p.name: p for p in self.products if p.name}

    def list_categories(self) -> List[str]:
        return sorted({c.strip() for p in self.products for c in (p.category or "").split(",") if c.strip()})

    def list_products_in_category(self, category: str) -> List[str]:
        return sorted(
            p.name for p in self.products
            if p.name and category in [c.strip() for c in (p.category or "").split(",")]
        )

    def get_product(self, name: str) -> Optional[Product]:
        return self.by_name.get(name)

    def pool_for(self, product: Product, criteria: Optional[SubstitutionCriteria] = None) -> List[Product]:
        # Graph neighbours share a category, label or brand; cross-category searches need the whole catalog
        if criteria is not None and not criteria.same_category:
            return self.products
        return candidate_pool(self.KG, product, self.node_to_product)

    def get_substitutes(
        self,
        product_name: str,
        criteria: Optional[SubstitutionCriteria] = None,
    ) -> Optional[SubstitutionSearch]:
        product = self.get_product(product_name)
        if product is None:
            return None
        return search_substitutes(product, self.pool_for(product, criteria), criteria)

    def get_best_substitute(self, product_name: str) -> Optional[SubstituteCandidate]:
        product = self.get_product(product_name)
        if product is None:
            return None
        # Any category qualifies, so the whole catalog is the pool
        return find_best_substitute(product, self.products)

    def _basket(self, quantities: Dict[str, int]) -> List[Product]:
        return [
            with_quantity(self.by_name[name], qty)
            for name, qty in quantities.items()
            if name in self.by_name and qty > 0
        ]

    def optimize_budget(
        self,
        quantities: Dict[str, int],
        max_budget: float,
        min_score: float = 0.0,
        exact: Optional[bool] = None,
    ) -> OptimizationResult:
        """Knapsack over the basket; ``exact`` None lets the hybrid choose."""
        basket = self._basket(quantities)
        if exact is None:
            return hybrid_optimization(basket, max_budget, min_score)
        options = OptimizationOptions(min_score=min_score, prioritize_sustainability=not exact)
        return optimize_shopping_list(basket, max_budget, options)

    def optimize_list(
        self,
        quantities: Dict[str, int],
        max_budget: float,
        criteria: Optional[SubstitutionCriteria] = None,
    ) -> ListOptimizationResult:
        return optimize_list(
            self._basket(quantities),
            lambda item: self.pool_for(item, criteria),
            max_budget,
            criteria,
        )

    def build_visualization(self, root_product: Product, substitutes: List[SubstituteCandidate]):
        return visualize_search_path(self.KG, root_product, substitutes)

    def build_breakdown_chart(self, products: List[Product]):
        return plot_score_breakdown(products)
