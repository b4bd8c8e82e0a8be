import pytest

from greenbasket.core.categories import are_incompatible
from greenbasket.core.knapsack import DYNAMIC_PROGRAMMING, GREEDY
from greenbasket.core.substitution import SubstitutionCriteria
from greenbasket.models.product import Product
from greenbasket.pipelines.app_service import AppService


@pytest.fixture(scope="module")
def service():
    return AppService()


def test_catalog_is_scored_and_indexed(service):
    assert len(service.products) == 20
    assert all(p.sustainability_score is not None for p in service.products)
    assert service.KG.number_of_nodes() > len(service.products)


def test_categories_and_products(service):
    categories = service.list_categories()
    assert "Leches" in categories
    assert "Leche entera Pascual" in service.list_products_in_category("Leches")


def test_milk_is_never_replaced_by_other_dairy(service):
    for name in service.list_products_in_category("Leches"):
        search = service.get_substitutes(name)
        original = service.get_product(name)
        for sub in search.substitutes:
            assert not are_incompatible(original, sub.product)
            assert sub.product.name != name


def test_unknown_product(service):
    assert service.get_substitutes("Nope") is None
    assert service.get_best_substitute("Nope") is None


def test_optimize_budget_strategies(service):
    basket = {"Leche entera Pascual": 2, "Café molido Marcilla": 1, "Plátano de Canarias": 1}
    auto = service.optimize_budget(basket, 8)
    assert auto.strategy == DYNAMIC_PROGRAMMING
    assert auto.total_cost <= 8
    assert service.optimize_budget(basket, 8, exact=False).strategy == GREEDY


def test_optimize_list_keeps_budget(service):
    basket = {"Leche entera Pascual": 1, "Café molido Marcilla": 1, "Arroz redondo La Fallera": 2}
    result = service.optimize_list(basket, 30)
    assert len(result.decisions) == 3
    assert result.optimized.total_cost <= 30
    assert result.optimized.total_score >= result.original.total_score


def test_charts(service):
    search = service.get_substitutes("Leche entera Pascual")
    assert service.build_breakdown_chart([search.original]) is not None


def test_cross_category_search_uses_the_whole_catalog():
    coffee = Product(product_id=1, name="Café", category="Cafés", price=4.0, currency="EUR", eco_score="D")
    apple = Product(product_id=2, name="Manzana", category="Frutas", price=2.0, currency="EUR", eco_score="A")
    small = AppService([coffee, apple])
    criteria = SubstitutionCriteria(same_category=False, min_score_improvement=0.05, max_price_increase=1.0)

    search = small.get_substitutes("Café", criteria)
    assert [s.product.name for s in search.substitutes] == ["Manzana"]
    # Same-category searches stay on graph neighbours
    assert small.get_substitutes("Café").substitutes == []


def test_cross_category_list_optimization_uses_the_whole_catalog():
    coffee = Product(product_id=1, name="Café", category="Cafés", price=4.0, currency="EUR", eco_score="D")
    apple = Product(product_id=2, name="Manzana", category="Frutas", price=2.0, currency="EUR", eco_score="A")
    small = AppService([coffee, apple])
    criteria = SubstitutionCriteria(same_category=False, min_score_improvement=0.05)

    result = small.optimize_list({"Café": 1}, 10, criteria)
    assert [d.chosen.name for d in result.decisions] == ["Manzana"]
