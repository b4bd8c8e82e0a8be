import json

import pytest

from greenbasket.data_access.loader import load_products, metadata_from_dict, product_from_dict
from greenbasket.utils.exceptions import DataLoadError
from greenbasket.utils.numbers import round_half_up, to_float


def write(tmp_path, payload, name="products.json"):
    path = tmp_path / name
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
    return str(path)


def test_load_products_parses_records(tmp_path):
    path = write(tmp_path, [
        {
            "id": 7,
            "name": " Leche entera ",
            "category": "Leches",
            "price": "1,15",
            "currency": "EUR",
            "carbon_footprint": 1.3,
            "eco_score": "c",
            "nutrition_grade": "B",
            "metadata": {"labels_tags": ["en:organic"], "categories_tags": ["en:milks"], "origins": "España"},
        }
    ])
    [product] = load_products(path)
    assert product.product_id == 7
    assert product.name == "Leche entera"
    assert product.price == pytest.approx(1.15)
    assert product.eco_score == "C"
    assert product.nutrition_grade == "B"
    assert product.metadata.labels_tags == ["en:organic"]
    assert product.metadata.origins == "España"
    assert product.sustainability_score is None


def test_open_food_facts_aliases():
    product = product_from_dict({
        "product_name": "Café",
        "categories": "Cafés",
        "brands": "Marcilla",
        "ecoscore_grade": "b",
        "nutriscore_grade": "a",
        "openfoodfacts_data": json.dumps({"additives_tags": "e300, e330"}),
    })
    assert product.name == "Café"
    assert product.category == "Cafés"
    assert product.brand == "Marcilla"
    assert product.eco_score == "B"
    assert product.nutrition_grade == "A"
    assert product.metadata.additives == ["e300", "e330"]


def test_missing_and_junk_fields_become_none():
    product = product_from_dict({"price": "n/a", "carbon_footprint": "", "quantity": 0, "eco_score": " "})
    assert product.price is None
    assert product.carbon_footprint is None
    assert product.quantity is None
    assert product.eco_score is None


def test_invalid_metadata_string_is_ignored():
    assert metadata_from_dict("{not json").labels_tags == []
    assert metadata_from_dict(None).packaging is None


def test_missing_file_raises(tmp_path):
    with pytest.raises(DataLoadError):
        load_products(str(tmp_path / "missing.json"))


def test_invalid_json_raises(tmp_path):
    with pytest.raises(DataLoadError):
        load_products(write(tmp_path, "[{"))


def test_non_list_payload_raises(tmp_path):
    with pytest.raises(DataLoadError):
        load_products(write(tmp_path, {"products": []}))


def test_bundled_catalog_loads():
    products = load_products()
    assert len(products) == 20
    assert all(p.product_id is not None and p.price and p.price > 0 for p in products)


@pytest.mark.parametrize("value, expected", [(0.125, 0.13), (0.5, 0.5), (1.005 * 100, 100.5), (0.0, 0.0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == pytest.approx(expected)


@pytest.mark.parametrize("value, expected", [("2,5", 2.5), (" 3 ", 3.0), (4, 4.0), (True, None), ("nan", None), ("", None)])
def test_to_float(value, expected):
    assert to_float(value) == expected
