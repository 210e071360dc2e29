"""Analytics subpackage bundling yield math and historical aggregation."""

from . import history, yields

__all__ = [
    "history",
    "yields",
]
