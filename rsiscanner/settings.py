"""Persisted user preferences: asset list, selection, favorites, alerts flag."""

from typing import Iterable

from rsiscanner.db.store import SettingsStore

DEFAULT_SYMBOLS = [
    "BTCUSDT", "ETHUSDT", "BNBUSDT", "SOLUSDT", "XRPUSDT", "ADAUSDT",
    "DOGEUSDT", "AVAXUSDT", "DOTUSDT", "LINKUSDT", "TRXUSDT", "LTCUSDT",
    "BCHUSDT", "ATOMUSDT", "NEARUSDT", "UNIUSDT", "APTUSDT", "ARBUSDT",
    "OPUSDT", "FILUSDT", "ETCUSDT", "XLMUSDT", "INJUSDT", "SUIUSDT",
]

ALL_SYMBOLS_KEY = "all_symbols"
USER_SYMBOLS_KEY = "user_symbols"
FAVORITES_KEY = "favorites"
ALERTS_ENABLED_KEY = "alerts_enabled"

SETTINGS_KEYS = (ALL_SYMBOLS_KEY, USER_SYMBOLS_KEY, FAVORITES_KEY, ALERTS_ENABLED_KEY)


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    """Upper-case, strip and de-duplicate symbols, keeping first-seen order."""
    cleaned = (s.strip().upper() for s in symbols)
    return list(dict.fromkeys(s for s in cleaned if s))


class UserSettings:
    """Typed access to user preferences kept in a SettingsStore.

    Every reader falls back to its default when the stored value is missing,
    malformed, or of the wrong shape.
    """

    def __init__(self, store: SettingsStore):
        self.store = store

    def _get_symbol_list(self, key: str, default: list[str]) -> list[str]:
        value = self.store.get_json(key)
        if not isinstance(value, list) or not all(isinstance(s, str) for s in value):
            return list(default)
        return normalize_symbols(value)

    @property
    def all_symbols(self) -> list[str]:
        """Every asset the user knows about."""
        return self._get_symbol_list(ALL_SYMBOLS_KEY, DEFAULT_SYMBOLS)

    @property
    def tracked_symbols(self) -> list[str]:
        """Assets shown and scanned; defaults to the full asset list."""
        return self._get_symbol_list(USER_SYMBOLS_KEY, self.all_symbols)

    @property
    def favorites(self) -> list[str]:
        return self._get_symbol_list(FAVORITES_KEY, [])

    @property
    def alerts_enabled(self) -> bool:
        value = self.store.get_json(ALERTS_ENABLED_KEY, False)
        return value if isinstance(value, bool) else False

    @alerts_enabled.setter
    def alerts_enabled(self, enabled: bool) -> None:
        self.store.set_json(ALERTS_ENABLED_KEY, bool(enabled))

    def set_tracked_symbols(self, symbols: Iterable[str]) -> list[str]:
        """Store the tracked selection.

        Symbols are not required to be in the asset list; unknown ones are
        added to it so the selection always stays a subset.
        """
        selected = normalize_symbols(symbols)
        known = self.all_symbols
        missing = [s for s in selected if s not in known]
        if missing:
            self.store.set_json(ALL_SYMBOLS_KEY, known + missing)
        self.store.set_json(USER_SYMBOLS_KEY, selected)
        return selected

    def save_asset_list(self, all_symbols: Iterable[str], selected: Iterable[str]) -> None:
        """Replace the asset list and selection.

        Selected symbols and favorites that are no longer in the asset list
        are dropped.
        """
        assets = normalize_symbols(all_symbols)
        chosen = [s for s in normalize_symbols(selected) if s in assets]
        self.store.set_json(ALL_SYMBOLS_KEY, assets)
        self.store.set_json(USER_SYMBOLS_KEY, chosen)
        self.store.set_json(FAVORITES_KEY, [f for f in self.favorites if f in assets])

    def toggle_favorite(self, symbol: str) -> bool:
        """Add or remove a favorite.

        Returns:
            True if the symbol is a favorite afterwards.
        """
        symbol = symbol.strip().upper()
        favorites = self.favorites
        if symbol in favorites:
            favorites.remove(symbol)
            is_favorite = False
        else:
            favorites.append(symbol)
            is_favorite = True
        self.store.set_json(FAVORITES_KEY, favorites)
        return is_favorite

    def reset(self) -> None:
        """Forget every preference so the defaults apply again."""
        for key in SETTINGS_KEYS:
            self.store.delete(key)
