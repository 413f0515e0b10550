from .base import DataProvider
from .in_memory import InMemoryDataProvider
from .retrying import RetryingDataProvider

__all__ = [
    "DataProvider",
    "InMemoryDataProvider",
    "RetryingDataProvider",
]
