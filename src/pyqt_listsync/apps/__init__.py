"""Example applications."""

from .date_list_window import DateListWindow, create_date_store, date_fetch_request
from .static_grid_window import StaticGridWindow

__all__ = [
    "DateListWindow",
    "create_date_store",
    "date_fetch_request",
    "StaticGridWindow",
]
