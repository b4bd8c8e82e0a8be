import json
from typing import List, Dict, Any, Optional
from greenbasket.config.paths import PRODUCTS_PATH
from greenbasket.models.product import Product, ProductMetadata
from greenbasket.utils.exceptions import DataLoadError
from greenbasket.utils.logger import logger
from greenbasket.utils.numbers import to_float

def _load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        logger.error(f"File not found: {path}")
        raise DataLoadError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}")
        raise DataLoadError(f"Invalid JSON in {path}") from e

def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None

def _text_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v).strip() for v in value if str(v).strip()]

def _grade(value: Any) -> Optional[str]:
    text = _text(value)
    return text[0].upper() if text else None

def metadata_from_dict(raw: Any) -> ProductMetadata:
    """Parse the metadata bag, which catalogs sometimes store as a JSON string."""
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring metadata that is not valid JSON")
            raw = {}
    if not isinstance(raw, dict):
        return ProductMetadata()
    return ProductMetadata(
        packaging=_text(raw.get("packaging")),
        origins=_text(raw.get("origins")),
        labels_tags=_text_list(raw.get("labels_tags")),
        ingredients_text=_text(raw.get("ingredients_text")),
        additives=_text_list(raw.get("additives") or raw.get("additives_tags")),
        categories_tags=_text_list(raw.get("categories_tags")),
    )

def product_from_dict(item: Dict[str, Any]) -> Product:
    quantity = to_float(item.get("quantity"))
    return Product(
        product_id=item.get("product_id", item.get("id")),
        name=_text(item.get("name") or item.get("product_name")),
        category=_text(item.get("category") or item.get("categories")),
        brand=_text(item.get("brand") or item.get("brands")),
        barcode=_text(item.get("barcode")),
        price=to_float(item.get("price")),
        currency=_text(item.get("currency")),
        carbon_footprint=to_float(item.get("carbon_footprint")),
        eco_score=_grade(item.get("eco_score") or item.get("ecoscore_grade")),
        nutrition_grade=_grade(item.get("nutrition_grade") or item.get("nutriscore_grade")),
        quantity=int(quantity) if quantity and quantity > 0 else None,
        metadata=metadata_from_dict(item.get("metadata", item.get("openfoodfacts_data"))),
    )

def load_products(path: Optional[str] = None) -> List[Product]:
    path = path or PRODUCTS_PATH
    raw = _load_json(path)
    if not isinstance(raw, list):
        logger.error(f"Expected a list of products in {path}")
        raise DataLoadError(f"Expected a list of products in {path}")
    products = [product_from_dict(item) for item in raw]
    logger.info(f"Loaded {len(products)} products from {path}")
    return products
