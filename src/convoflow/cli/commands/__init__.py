"""CLI command implementations."""

from .initialize import init
from .order import order
from .search import search
from .stats import stats

__all__ = ["init", "order", "search", "stats"]
