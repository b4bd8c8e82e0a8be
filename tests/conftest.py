import matplotlib

matplotlib.use("Agg")

from greenbasket.models.product import (  # noqa: E402
    Product,
    ProductMetadata,
    ScoreBreakdown,
    ScoreWeights,
    SustainabilityScore,
)


def make_score(total: float, breakdown=None) -> SustainabilityScore:
    if breakdown is None:
        breakdown = (total * 0.4, total * 0.4, total * 0.2)
    return SustainabilityScore(
        total=total,
        breakdown=ScoreBreakdown(*breakdown),
        weights=ScoreWeights(),
    )


def make_product(
    product_id,
    price=1.0,
    score=0.5,
    category="Leches",
    carbon=None,
    name=None,
    quantity=None,
    currency="EUR",
    breakdown=None,
    **metadata,
) -> Product:
    return Product(
        product_id=product_id,
        name=name if name is not None else f"Product {product_id}",
        category=category,
        price=price,
        currency=currency,
        carbon_footprint=carbon,
        quantity=quantity,
        metadata=ProductMetadata(**metadata),
        sustainability_score=make_score(score, breakdown) if score is not None else None,
    )
