class GreenBasketError(Exception):
    """Base exception for the project."""

class DataLoadError(GreenBasketError):
    """Raised when the product catalog cannot be loaded."""

class InvalidBudgetError(GreenBasketError, ValueError):
    """Raised when a budget is negative, NaN or infinite."""
