import os

# greenbasket/config/paths.py

# CONFIG_DIR = .../greenbasket/config  → greenbasket  → project root
CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))      # .../greenbasket/config
PACKAGE_DIR = os.path.dirname(CONFIG_DIR)                    # .../greenbasket
PROJECT_ROOT = os.path.dirname(PACKAGE_DIR)                  # .../repo root

DATA_DIR = os.path.join(PROJECT_ROOT, "data")

PRODUCTS_PATH = os.environ.get(
    "GREENBASKET_PRODUCTS_PATH", os.path.join(DATA_DIR, "products.json")
)
