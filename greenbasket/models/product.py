from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Any

@dataclass
class ProductMetadata:
    """Free-form catalog data (Open Food Facts style)."""
    packaging: Optional[str] = None
    origins: Optional[str] = None
    labels_tags: List[str] = field(default_factory=list)
    ingredients_text: Optional[str] = None
    additives: List[str] = field(default_factory=list)
    categories_tags: List[str] = field(default_factory=list)

@dataclass
class ScoreWeights:
    economic: float = 0.4
    environmental: float = 0.4
    social: float = 0.2

@dataclass
class ScoreBreakdown:
    economic: float = 0.5
    environmental: float = 0.5
    social: float = 0.5

@dataclass
class SustainabilityScore:
    total: float
    breakdown: ScoreBreakdown
    weights: ScoreWeights

@dataclass
class Product:
    product_id: Optional[Any] = None
    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    barcode: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    carbon_footprint: Optional[float] = None
    eco_score: Optional[str] = None
    nutrition_grade: Optional[str] = None
    quantity: Optional[int] = None
    metadata: ProductMetadata = field(default_factory=ProductMetadata)
    sustainability_score: Optional[SustainabilityScore] = None

@dataclass
class SelectedItem:
    product: Product
    quantity: int

@dataclass
class Savings:
    economic: float = 0.0
    carbon: float = 0.0
    percentage: int = 0

@dataclass
class OptimizationResult:
    selected: List[SelectedItem] = field(default_factory=list)
    total_cost: float = 0.0
    total_score: float = 0.0
    total_carbon: float = 0.0
    savings: Savings = field(default_factory=Savings)
    budget_used: float = 0.0
    message: str = ""
    strategy: Optional[str] = None

class RecommendationType(str, Enum):
    ECONOMIC = "economic"
    ENVIRONMENTAL = "environmental"
    SOCIAL = "social"
    BALANCED = "balanced"

RECOMMENDATION_LABELS = {
    RecommendationType.ECONOMIC: "Best economic option",
    RecommendationType.ENVIRONMENTAL: "Best environmental option",
    RecommendationType.SOCIAL: "Best social option",
    RecommendationType.BALANCED: "Best balanced option",
}

@dataclass
class SubstituteCandidate:
    product: Product
    economic_improvement: float
    environmental_improvement: float
    social_improvement: float
    price_difference: float
    recommendation_type: Optional[RecommendationType] = None
    recommendation_label: str = ""
    category_bonus: float = 0.0
    composite_score: Optional[float] = None

    @property
    def total(self) -> float:
        return score_total(self.product)


# Accessors: every fallback for a missing field lives here.

def price_or_zero(product: Product) -> float:
    return product.price if product.price is not None else 0.0

def quantity_or_one(product: Product) -> int:
    return product.quantity if product.quantity else 1

def carbon_or_zero(product: Product) -> float:
    return product.carbon_footprint if product.carbon_footprint is not None else 0.0

def score_or_default(product: Product) -> SustainabilityScore:
    if product.sustainability_score is not None:
        return product.sustainability_score
    return SustainabilityScore(total=0.0, breakdown=ScoreBreakdown(0.0, 0.0, 0.0), weights=ScoreWeights())

def score_total(product: Product) -> float:
    return score_or_default(product).total

def identity_key(product: Product) -> Any:
    """Key used to deduplicate products: id, then barcode, then name."""
    if product.product_id is not None:
        return ("id", product.product_id)
    if product.barcode:
        return ("barcode", product.barcode)
    return ("name", (product.name or "").strip().lower())

def with_score(product: Product, score: SustainabilityScore) -> Product:
    return replace(product, sustainability_score=score)

def with_quantity(product: Product, quantity: Optional[int]) -> Product:
    return replace(product, quantity=quantity)
