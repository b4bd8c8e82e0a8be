from typing import List, Optional, Sequence
import matplotlib.pyplot as plt
import networkx as nx

from greenbasket.core.candidates import start_nodes
from greenbasket.core.kg_builder import product_node
from greenbasket.models.product import Product, SubstituteCandidate, score_or_default

NODE_COLORS = {
    "category": "#cfe2ff",
    "label": "#ffccd5",
    "brand": "#ffd6a5",
}

def visualize_search_path(
    KG: nx.Graph,
    root_product: Product,
    substitutes: Sequence[SubstituteCandidate],
) -> Optional[plt.Figure]:
    if not substitutes:
        return None

    roots = start_nodes(KG, root_product)
    if not roots:
        return None
    root_id = roots[0]
    target_ids = [
        product_node(s.product.product_id)
        for s in substitutes
        if s.product.product_id is not None and product_node(s.product.product_id) in KG
    ]

    nodes = {root_id}
    edges = set()

    for tid in target_ids:
        try:
            path = nx.shortest_path(KG, source=root_id, target=tid)
        except nx.NetworkXNoPath:
            continue
        for a, b in zip(path, path[1:]):
            nodes.add(a); nodes.add(b)
            edges.add((a, b))

    if not edges:
        return None

    sub = KG.edge_subgraph(list(edges)).copy()

    fig = plt.figure(figsize=(10, 6))
    shells = [
        [root_id],
        [n for n in sub.nodes() if n != root_id and n not in target_ids],
        [n for n in target_ids if n in sub],
    ]
    pos = nx.shell_layout(sub, nlist=[s for s in shells if s])

    colors = []
    for n in sub.nodes():
        if n == root_id:
            colors.append("#ffe680")   # original
        elif n in target_ids:
            colors.append("#b3ffb3")   # substitutes
        else:
            colors.append(NODE_COLORS.get(sub.nodes[n].get("node_type"), "#f0f0f0"))

    nx.draw_networkx_nodes(sub, pos, node_size=650, node_color=colors, edgecolors="#000000")
    nx.draw_networkx_edges(sub, pos, alpha=0.7, width=1.5, edge_color="#bbbbbb")

    labels = {n: sub.nodes[n].get("name", n) for n in sub.nodes()}
    nx.draw_networkx_labels(sub, pos, labels=labels, font_size=8, font_color="#000000")

    ax = plt.gca()
    ax.set_facecolor("#06120b")
    plt.title(f"Paths from '{root_product.name}' to suggested substitutes", fontsize=10)
    plt.axis("off")
    return fig

def plot_score_breakdown(products: List[Product]) -> Optional[plt.Figure]:
    """Grouped bars of the economic / environmental / social sub-scores."""
    scored = [p for p in products if p.sustainability_score is not None]
    if not scored:
        return None

    names = [p.name or str(p.product_id) for p in scored]
    series = {
        "economic": [score_or_default(p).breakdown.economic for p in scored],
        "environmental": [score_or_default(p).breakdown.environmental for p in scored],
        "social": [score_or_default(p).breakdown.social for p in scored],
    }

    fig, ax = plt.subplots(figsize=(max(6, len(scored) * 1.2), 4))
    width = 0.25
    for offset, (dimension, values) in enumerate(series.items()):
        xs = [i + (offset - 1) * width for i in range(len(scored))]
        ax.bar(xs, values, width=width, label=dimension)

    ax.set_xticks(range(len(scored)))
    ax.set_xticklabels(names, rotation=30, ha="right", fontsize=8)
    ax.set_ylim(0, 1)
    ax.set_ylabel("score")
    ax.legend(fontsize=8)
    fig.tight_layout()
    return fig
