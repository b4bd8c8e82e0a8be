import streamlit as st

from greenbasket.config.settings import DEFAULT_BUDGET
from greenbasket.core.substitution import DietaryRestrictions, SubstitutionCriteria
from greenbasket.pipelines.app_service import AppService


@st.cache_resource
def get_service() -> AppService:
    return AppService()


st.set_page_config(layout="wide", page_title="GreenBasket")

service = get_service()

# ---------- Global CSS ----------
st.markdown("""
<style>
body, .main, .stApp {
    background-color: #06120b;
    color: #e3f0e7;
}
.block-container {
    padding-top: 2.8rem;
    padding-bottom: 1.5rem;
}

/* Hero area */
.hero-title {
    font-size: 30px;
    font-weight: 800;
    background: linear-gradient(90deg, #5fd68a, #c6e86b);
    -webkit-background-clip: text;
    color: transparent;
}
.hero-subtitle {
    font-size: 14px;
    color: #a3bfae;
}

/* Product cards */
.product-card {
    border: 1px solid #1f3a2a;
    border-radius: 12px;
    padding: 12px 16px;
    margin-bottom: 12px;
    background: radial-gradient(circle at top left, #16301f 0%, #06120b 55%);
    box-shadow: 0 4px 10px rgba(0,0,0,0.7);
    transition: transform 0.15s ease, box-shadow 0.15s ease, border-color 0.15s ease;
}
.product-card:hover {
    transform: translateY(-2px);
    box-shadow: 0 6px 16px rgba(0,0,0,0.9);
    border-color: #3fbf6f;
}
.product-title {
    font-weight: 700;
    font-size: 17px;
    margin-bottom: 4px;
    color: #ffffff;
}
.product-price {
    font-size: 15px;
    font-weight: 600;
    color: #b8f07a;
}
.product-meta {
    font-size: 13px;
    color: #d3e3d8;
}

/* Badges */
.badge {
    display: inline-block;
    padding: 2px 8px;
    border-radius: 999px;
    font-size: 11px;
    font-weight: 600;
    margin-right: 6px;
}
.badge-category {
    background: rgba(120, 190, 255, 0.14);
    color: #8cc4ff;
    border: 1px solid rgba(120, 190, 255, 0.4);
}
.badge-score {
    background: rgba(95, 214, 138, 0.16);
    color: #5fd68a;
    border: 1px solid rgba(95, 214, 138, 0.45);
}
.badge-alt-index {
    background: rgba(255, 200, 97, 0.16);
    color: #ffc861;
    border: 1px solid rgba(255, 200, 97, 0.4);
}

/* Tabs */
.stTabs [data-baseweb="tab-list"] {
    gap: 0.3rem;
}
.stTabs [data-baseweb="tab"] {
    background-color: #0a1a10;
    padding: 0.4rem 0.9rem;
    border-radius: 999px;
    color: #c3dccb;
    font-size: 13px;
    font-weight: 500;
}
.stTabs [aria-selected="true"] {
    background: linear-gradient(90deg, #1d4d33, #2f8a55);
    color: #ffffff !important;
}

/* Buttons */
.stButton button {
    background: linear-gradient(90deg, #1d4d33, #256b43);
    color: #ffffff;
    border-radius: 999px;
    border: 1px solid #3fa468;
    padding: 0.4rem 1.2rem;
}
.stButton button:hover {
    background: linear-gradient(90deg, #256b43, #2f8a55);
    border-color: #3fbf6f;
}

/* Expander */
.stExpander {
    border: 1px solid #1f3a2a;
    border-radius: 8px;
    background-color: #0a1a10;
}
</style>
""", unsafe_allow_html=True)

# ---------- Hero header ----------
st.markdown('<div class="hero-title">GreenBasket: sustainable grocery assistant</div>', unsafe_allow_html=True)
st.markdown(
    '<div class="hero-subtitle">'
    'Score products on economic, environmental and social impact, find better substitutes, '
    'and fit the greenest basket into your budget.</div>',
    unsafe_allow_html=True
)
st.write("")


def product_card(p, badges: str = "", extra: str = "") -> None:
    score = p.sustainability_score.total if p.sustainability_score else 0.0
    price = f"{p.price:.2f} {p.currency or ''}" if p.price is not None else "n/a"
    st.markdown(
        f"""
        <div class="product-card">
            <div class="product-title">{p.name}</div>
            <div class="product-meta">
                {badges}
                <span class="badge badge-category">{p.category or "uncategorized"}</span>
                <span class="badge badge-score">Score {score:.2f}</span>
            </div>
            <div class="product-price">{price}</div>
            <div class="product-meta">Brand: {p.brand or "-"} · Eco-score: {p.eco_score or "-"}
                · CO₂: {p.carbon_footprint if p.carbon_footprint is not None else "-"} kg</div>
            {extra}
        </div>
        """,
        unsafe_allow_html=True,
    )


tab_subs, tab_budget, tab_list = st.tabs(["Substitutes", "Budget optimizer", "Smart list"])

# ---------- Substitutes ----------
with tab_subs:
    left_col, right_col = st.columns([1, 1.5])

    with left_col:
        st.subheader("Choose product")
        categories = service.list_categories()
        cat = st.selectbox("Category", categories, key="category_main")
        product_names = service.list_products_in_category(cat)
        selected_name = st.selectbox("Product", product_names, key="product_main")

        st.write("")
        search_clicked = st.button("✨ Find better substitutes")

        st.markdown("---")
        st.markdown("**Filters (optional)**")
        min_improvement = st.slider("Min score improvement (cross-category)", 0.0, 0.5, 0.1, 0.05)
        max_increase = st.slider("Max price increase (%)", 0, 100, 20, 5)
        same_category = st.checkbox("Same category only", value=True)
        vegan = st.checkbox("Vegan")
        gluten_free = st.checkbox("Gluten free")

    with right_col:
        tab_main, tab_graph = st.tabs(["Product & alternatives", "Catalog graph"])

        if search_clicked and selected_name:
            criteria = SubstitutionCriteria(
                min_score_improvement=min_improvement,
                same_category=same_category,
                max_price_increase=max_increase / 100,
                dietary_restrictions=DietaryRestrictions(vegan=vegan, gluten_free=gluten_free)
                if vegan or gluten_free else None,
            )
            search = service.get_substitutes(selected_name, criteria)
            best = service.get_best_substitute(selected_name)

            with tab_main:
                st.info(search.message)
                product_card(search.original)

                st.markdown("### Recommended alternatives")
                for idx, rec in enumerate(search.substitutes, start=1):
                    p = rec.product
                    product_card(
                        p,
                        badges=f"<span class='badge badge-alt-index'>Alt #{idx}</span>",
                        extra=(
                            f"<div class='product-meta'><b>{rec.recommendation_label}</b> · "
                            f"price {rec.price_difference:+.2f} · "
                            f"economic {rec.economic_improvement:+.2f} · "
                            f"environmental {rec.environmental_improvement:+.2f} · "
                            f"social {rec.social_improvement:+.2f}</div>"
                        ),
                    )
                if not search.substitutes and search.rejections:
                    with st.expander("Why nothing matched"):
                        for reason, count in sorted(search.rejections.items(), key=lambda r: -r[1]):
                            st.write(f"{reason}: {count}")

                if best is not None:
                    st.markdown("### Best overall (any category)")
                    product_card(
                        best.product,
                        extra=f"<div class='product-meta'>Composite score {best.composite_score:.2f}</div>",
                    )

                chart = service.build_breakdown_chart([search.original] + [s.product for s in search.substitutes])
                if chart:
                    st.pyplot(chart)

            with tab_graph:
                st.subheader("Catalog graph paths")
                fig = service.build_visualization(search.original, search.substitutes)
                if fig:
                    st.pyplot(fig)
                else:
                    st.write("No paths to visualize (no alternatives for this query).")
        else:
            with tab_main:
                st.markdown("Start by selecting a product on the left and clicking **“Find better substitutes”**.")
            with tab_graph:
                st.write("The catalog graph will appear here after you run a query.")


def basket_picker(key: str) -> dict:
    names = st.multiselect("Products", sorted(service.by_name), key=f"{key}_names")
    return {name: st.number_input(name, 1, 20, 1, key=f"{key}_{name}") for name in names}


# ---------- Budget optimizer ----------
with tab_budget:
    st.subheader("Best basket within budget")
    quantities = basket_picker("budget")
    budget = st.number_input("Budget", 0.0, 1000.0, DEFAULT_BUDGET, 1.0, key="budget_value")
    min_score = st.slider("Minimum product score", 0.0, 1.0, 0.0, 0.05)
    strategy = st.radio("Strategy", ["Automatic", "Greedy", "Exact"], horizontal=True)

    if st.button("Optimize basket"):
        exact = {"Automatic": None, "Greedy": False, "Exact": True}[strategy]
        result = service.optimize_budget(quantities, budget, min_score, exact)
        st.info(result.message)
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Total cost", f"{result.total_cost:.2f}")
        c2.metric("Total score", f"{result.total_score:.2f}")
        c3.metric("Budget used", f"{result.budget_used:.0%}")
        c4.metric("CO₂ saved", f"{result.savings.carbon:.2f} kg")
        for item in result.selected:
            product_card(item.product, badges=f"<span class='badge badge-alt-index'>x{item.quantity}</span>")

# ---------- Smart list ----------
with tab_list:
    st.subheader("Swap list items for greener ones")
    quantities = basket_picker("list")
    budget = st.number_input("Budget", 0.0, 1000.0, DEFAULT_BUDGET, 1.0, key="list_budget")

    if st.button("Optimize list"):
        result = service.optimize_list(quantities, budget)
        st.info(result.message)
        c1, c2, c3 = st.columns(3)
        c1.metric("Cost", f"{result.optimized.total_cost:.2f}", f"{-result.savings.economic:+.2f}")
        c2.metric("Average score", f"{result.optimized.total_score:.2f}",
                  f"{result.optimized.total_score - result.original.total_score:+.2f}")
        c3.metric("CO₂", f"{result.optimized.total_carbon:.2f} kg")
        for decision in result.decisions:
            if decision.swapped:
                product_card(
                    decision.chosen,
                    badges="<span class='badge badge-alt-index'>Swapped</span>",
                    extra=f"<div class='product-meta'>Replaces {decision.original.name} "
                          f"(score +{decision.improvement:.2f})</div>",
                )
            else:
                product_card(decision.chosen, extra=f"<div class='product-meta'>Kept: {decision.reason}</div>")
