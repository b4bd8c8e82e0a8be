"""Runtime settings, overridable through the environment."""
import os
from typing import Final

# Currency assumed for records that do not state one
DEFAULT_CURRENCY: Final[str] = os.getenv("GREENBASKET_DEFAULT_CURRENCY", "EUR")

# Largest eligible item count the hybrid optimizer still solves exactly
HYBRID_DP_THRESHOLD: Final[int] = int(os.getenv("GREENBASKET_HYBRID_DP_THRESHOLD", "20"))

# Catalog graph traversal used to build substitution candidate pools
CANDIDATE_SEARCH_DEPTH: Final[int] = int(os.getenv("GREENBASKET_CANDIDATE_SEARCH_DEPTH", "2"))

# Worker threads for the per-item substitute searches of a list optimization
MAX_SEARCH_WORKERS: Final[int] = int(os.getenv("GREENBASKET_MAX_SEARCH_WORKERS", "4"))

# Budget pre-filled in the web UI
DEFAULT_BUDGET: Final[float] = float(os.getenv("GREENBASKET_DEFAULT_BUDGET", "30"))
