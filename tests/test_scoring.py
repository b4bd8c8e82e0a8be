import pytest

from greenbasket.core.scoring import (
    calculate_economic_score,
    calculate_environmental_score,
    calculate_scores_for_products,
    calculate_social_score,
    calculate_sustainability_score,
)
from greenbasket.models.product import Product, ProductMetadata, ScoreWeights


def test_economic_score_decreases_with_price():
    assert calculate_economic_score(Product(price=10)) == pytest.approx(0.8)
    assert calculate_economic_score(Product(price=100)) == 0.0


def test_economic_score_nutrition_bonus():
    assert calculate_economic_score(Product(price=10, nutrition_grade="a")) == pytest.approx(0.9)
    assert calculate_economic_score(Product(price=10, nutrition_grade="C")) == pytest.approx(0.8)


def test_economic_score_without_price_is_neutral():
    assert calculate_economic_score(Product()) == 0.5
    assert calculate_economic_score(Product(price=0, nutrition_grade="A")) == 0.5


def test_environmental_score_from_eco_grade():
    assert calculate_environmental_score(Product(eco_score="A")) == 1.0
    assert calculate_environmental_score(Product(eco_score="e")) == pytest.approx(0.2)
    assert calculate_environmental_score(Product()) == 0.5


def test_environmental_score_blends_carbon():
    assert calculate_environmental_score(Product(carbon_footprint=0)) == pytest.approx(0.65)
    assert calculate_environmental_score(Product(carbon_footprint=10)) == pytest.approx(0.35)


def test_environmental_score_packaging_and_origin_bonus():
    product = Product(
        eco_score="C",
        metadata=ProductMetadata(packaging="Brick reciclable", origins="España"),
    )
    assert calculate_environmental_score(product) == pytest.approx(0.75)

    imported = Product(eco_score="C", metadata=ProductMetadata(origins="Ecuador (import)"))
    assert calculate_environmental_score(imported) == pytest.approx(0.6)


def test_environmental_score_is_clamped():
    product = Product(eco_score="A", metadata=ProductMetadata(packaging="recyclable", origins="Spain"))
    assert calculate_environmental_score(product) == 1.0


def test_social_score_labels_and_origin():
    assert calculate_social_score(Product()) == 0.5
    assert calculate_social_score(Product(metadata=ProductMetadata(origins="Perú"))) == pytest.approx(0.6)
    labelled = Product(metadata=ProductMetadata(labels_tags=["en:fair-trade", "en:organic"]))
    assert calculate_social_score(labelled) == 1.0


def test_social_score_additive_penalty():
    product = Product(metadata=ProductMetadata(additives=["e1", "e2", "e3", "e4", "e5", "e6"]))
    assert calculate_social_score(product) == pytest.approx(0.4)


def test_sustainability_score_weighted_total():
    score = calculate_sustainability_score(Product(price=10, eco_score="A"))
    assert score.total == pytest.approx(0.82)
    assert score.breakdown.economic == pytest.approx(0.8)
    assert score.breakdown.environmental == 1.0
    assert score.breakdown.social == 0.5
    assert score.weights == ScoreWeights()


def test_better_eco_grade_never_scores_lower():
    good = calculate_sustainability_score(Product(price=10, eco_score="A"))
    bad = calculate_sustainability_score(Product(price=10, eco_score="E"))
    assert good.total > bad.total
    assert bad.total == pytest.approx(0.5)


def test_custom_weights_are_used_and_echoed():
    weights = ScoreWeights(economic=1.0, environmental=0.0, social=0.0)
    score = calculate_sustainability_score(Product(price=25), weights)
    assert score.total == pytest.approx(0.5)
    assert score.weights is weights


@pytest.mark.parametrize(
    "product",
    [
        Product(),
        Product(price=0.01, eco_score="A", nutrition_grade="A", carbon_footprint=0),
        Product(price=1000, eco_score="E", carbon_footprint=100),
        Product(metadata=ProductMetadata(labels_tags=["fair trade", "organic", "rainforest"], origins="x")),
    ],
)
def test_scores_stay_in_unit_interval(product):
    score = calculate_sustainability_score(product)
    for value in (score.total, score.breakdown.economic, score.breakdown.environmental, score.breakdown.social):
        assert 0.0 <= value <= 1.0


def test_calculate_scores_for_products_does_not_mutate():
    products = [Product(product_id=1, price=5), Product(product_id=2, eco_score="B")]
    scored = calculate_scores_for_products(products)
    assert all(p.sustainability_score is None for p in products)
    assert [p.product_id for p in scored] == [1, 2]
    assert all(p.sustainability_score is not None for p in scored)
