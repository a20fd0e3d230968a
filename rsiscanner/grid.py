"""Filtering and ordering of symbols for the grid view."""

from typing import Iterable, Literal, Mapping, Optional

from rsiscanner.alerts.status import classify_rsi
from rsiscanner.models import AlertStatus, SymbolData

SortOrder = Literal["default", "rsi-desc", "rsi-asc"]
SORT_ORDERS: tuple[SortOrder, ...] = ("default", "rsi-desc", "rsi-asc")


def latest_rsi(snapshot: Mapping[str, SymbolData], symbol: str) -> Optional[float]:
    data = snapshot.get(symbol)
    return data.latest_rsi if data is not None else None


def displayed_symbols(
    symbols: Iterable[str],
    snapshot: Mapping[str, SymbolData],
    search: str = "",
    favorites_only: bool = False,
    favorites: Iterable[str] = (),
    sort_order: SortOrder = "default",
) -> list[str]:
    """Symbols to show, in display order.

    Args:
        symbols: Tracked symbols in their configured order.
        snapshot: Latest data used for RSI sorting.
        search: Case-insensitive substring filter.
        favorites_only: Keep only favorites.
        favorites: Favorite symbols.
        sort_order: ``default`` keeps the configured order; ``rsi-desc`` and
            ``rsi-asc`` sort by latest RSI with missing values last.

    Returns:
        Filtered and ordered symbols.
    """
    if sort_order not in SORT_ORDERS:
        raise ValueError(f"Invalid sort order: {sort_order}. Must be one of {list(SORT_ORDERS)}")

    term = search.lower()
    result = [s for s in symbols if term in s.lower()]

    if favorites_only:
        favorite_set = set(favorites)
        result = [s for s in result if s in favorite_set]

    if sort_order == "default" or not snapshot:
        return result

    descending = sort_order == "rsi-desc"
    missing = -1.0 if descending else 101.0

    def key(symbol: str) -> float:
        value = latest_rsi(snapshot, symbol)
        return missing if value is None else value

    return sorted(result, key=key, reverse=descending)


def rsi_zone(value: Optional[float]) -> Optional[AlertStatus]:
    """Regime of an RSI value for coloring, None when there is no value."""
    if value is None:
        return None
    return classify_rsi(value)
