import logging
import os

LOG_LEVEL = os.environ.get("GREENBASKET_LOG_LEVEL", "INFO").upper()
# Thread name tells the list optimizer's search workers apart
LOG_FORMAT = os.environ.get(
    "GREENBASKET_LOG_FORMAT", "[%(asctime)s] [%(levelname)s] [%(threadName)s] %(message)s"
)

logger = logging.getLogger("greenbasket")
# Streamlit re-executes app.py on every interaction; attach the handler once
if not logger.handlers:
    logger.setLevel(LOG_LEVEL)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
