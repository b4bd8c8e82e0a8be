from typing import Dict, List, Optional, Tuple
from collections import deque
import networkx as nx

from greenbasket.config.settings import CANDIDATE_SEARCH_DEPTH
from greenbasket.core.kg_builder import category_node, graph_categories, product_node
from greenbasket.models.product import Product
from greenbasket.utils.logger import logger

def start_nodes(KG: nx.Graph, product: Product) -> List[str]:
    """The product's own node, or its category nodes for an off-catalog product."""
    if product.product_id is not None:
        node = product_node(product.product_id)
        if node in KG:
            return [node]
    return [n for n in (category_node(c) for c in graph_categories(product)) if n in KG]

def bfs_candidates_with_depth(
    KG: nx.Graph,
    requested: Product,
    node_to_product: Dict[str, Product],
    max_depth: int = CANDIDATE_SEARCH_DEPTH,
) -> Tuple[Dict[str, Tuple[Product, int]], int]:
    starts = start_nodes(KG, requested)
    # Category nodes are one hop closer than the product node would be
    offset = 0 if starts and KG.nodes[starts[0]].get("node_type") == "product" else 1

    visited = set(starts)
    queue = deque((s, offset) for s in starts)
    traversed = 0
    candidates: Dict[str, Tuple[Product, int]] = {}

    while queue:
        node, depth = queue.popleft()
        traversed += 1
        if depth >= max_depth:
            continue
        for nb in KG.neighbors(node):
            if nb in visited:
                continue
            visited.add(nb)
            queue.append((nb, depth + 1))
            p = node_to_product.get(nb)
            if p is not None:
                prev = candidates.get(nb)
                if prev is None or depth + 1 < prev[1]:
                    candidates[nb] = (p, depth + 1)

    logger.info(f"BFS traversed {traversed} nodes, found {len(candidates)} candidate products")
    return candidates, traversed

def candidate_pool(
    KG: nx.Graph,
    product: Product,
    node_to_product: Dict[str, Product],
    max_depth: Optional[int] = None,
) -> List[Product]:
    """Catalog products reachable from ``product``, closest first."""
    if max_depth is None:
        max_depth = CANDIDATE_SEARCH_DEPTH
    found, _ = bfs_candidates_with_depth(KG, product, node_to_product, max_depth)
    ranked = sorted(found.items(), key=lambda item: (item[1][1], item[0]))
    return [p for _, (p, _) in ranked]
