from conftest import make_product
from greenbasket.core.candidates import bfs_candidates_with_depth, candidate_pool, start_nodes
from greenbasket.core.kg_builder import build_kg, category_node, index_products, product_node
from greenbasket.models.product import Product, ProductMetadata


def catalog():
    return [
        make_product(1, name="Leche entera", category="Leches,Leche entera"),
        make_product(2, name="Leche semi", category="Leches,Leche semi", labels_tags=["en:organic"]),
        make_product(3, name="Arroz integral", category="Arroces", labels_tags=["en:organic"]),
        make_product(4, name="Café", category="Cafés"),
        make_product(None, name="Sin id", category="Leches"),
    ]


def test_build_kg_nodes_and_edges():
    KG = build_kg(catalog())
    assert KG.nodes[product_node(1)]["node_type"] == "product"
    assert KG.nodes[category_node("leches")]["node_type"] == "category"
    assert KG.has_edge(product_node(1), category_node("leches"))
    assert KG.edges[product_node(2), "label:en:organic"]["edge_type"] == "HAS_LABEL"
    # products without an id are left out
    assert not any(d.get("name") == "Sin id" for _, d in KG.nodes(data=True))


def test_generic_categories_are_not_graph_nodes():
    p = make_product(1, category="Alimentos,Leches")
    KG = build_kg([p])
    assert category_node("alimentos") not in KG
    assert category_node("leches") in KG


def test_candidate_pool_follows_shared_nodes():
    products = catalog()
    KG = build_kg(products)
    pool = candidate_pool(KG, products[0], index_products(products))
    assert [p.product_id for p in pool] == [2]


def test_candidate_pool_reaches_through_labels():
    products = catalog()
    KG = build_kg(products)
    pool = candidate_pool(KG, products[1], index_products(products))
    assert [p.product_id for p in pool] == [1, 3]


def test_depth_is_recorded_and_bounded():
    products = catalog()
    KG = build_kg(products)
    found, traversed = bfs_candidates_with_depth(KG, products[0], index_products(products), max_depth=4)
    depths = {node: depth for node, (_, depth) in found.items()}
    assert depths[product_node(2)] == 2
    assert depths[product_node(3)] == 4
    assert product_node(4) not in depths
    assert traversed > 0


def test_off_catalog_product_starts_from_its_categories():
    products = catalog()
    KG = build_kg(products)
    outsider = Product(name="Leche de cabra", category="Leches", metadata=ProductMetadata())
    assert start_nodes(KG, outsider) == [category_node("leches")]
    pool = candidate_pool(KG, outsider, index_products(products))
    assert [p.product_id for p in pool] == [1, 2]


def test_unknown_product_has_no_pool():
    products = catalog()
    KG = build_kg(products)
    assert candidate_pool(KG, Product(name="Nada"), index_products(products)) == []
