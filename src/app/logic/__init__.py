"""App logic package.

Business logic layer for Streamlit application.
Pure Python/Polars - no Streamlit UI calls.
"""

__all__ = ["session", "valuation"]
