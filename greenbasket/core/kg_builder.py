from typing import Dict, Iterable, List
import networkx as nx

from greenbasket.core.categories import extract_categories, significant_categories
from greenbasket.models.product import Product
from greenbasket.utils.logger import logger

def product_node(product_id) -> str:
    return f"product:{product_id}"

def category_node(category: str) -> str:
    return f"category:{category}"

def label_node(label: str) -> str:
    return f"label:{label}"

def brand_node(brand: str) -> str:
    return f"brand:{brand}"

def graph_categories(product: Product) -> List[str]:
    """Categories that become graph nodes; generic ones would link everything."""
    return significant_categories(extract_categories(product))

def _labels(product: Product) -> Iterable[str]:
    return sorted({str(t).strip().lower() for t in product.metadata.labels_tags or [] if str(t).strip()})

def build_kg(products: List[Product]) -> nx.Graph:
    KG = nx.Graph()

    # Categories, labels and brands
    categories = sorted({c for p in products for c in graph_categories(p)})
    labels = sorted({t for p in products for t in _labels(p)})
    brands = sorted({p.brand for p in products if p.brand})

    for cat in categories:
        KG.add_node(category_node(cat), node_type="category", name=cat)

    for label in labels:
        KG.add_node(label_node(label), node_type="label", name=label)

    for brand in brands:
        KG.add_node(brand_node(brand), node_type="brand", name=brand)

    # Products
    for p in products:
        if p.product_id is None:
            logger.warning(f"Skipping product without id: {p.name!r}")
            continue
        pid = product_node(p.product_id)
        KG.add_node(
            pid,
            node_type="product",
            name=p.name,
            product_id=p.product_id,
            price=p.price,
            eco_score=p.eco_score,
        )
        for cat in graph_categories(p):
            KG.add_edge(pid, category_node(cat), edge_type="IN_CATEGORY")
        for label in _labels(p):
            KG.add_edge(pid, label_node(label), edge_type="HAS_LABEL")
        if p.brand:
            KG.add_edge(pid, brand_node(p.brand), edge_type="HAS_BRAND")

    logger.info(f"KG built: {KG.number_of_nodes()} nodes, {KG.number_of_edges()} edges")
    return KG

def index_products(products: List[Product]) -> Dict[str, Product]:
    return {product_node(p.product_id): p for p in products if p.product_id is not None}
