"""User settings: fuel prices, inspection fee and vignette tables."""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .store import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "carcare_settings"


@dataclass(frozen=True)
class VignetteBracket:
    """Road-tax cost for one fiscal horsepower range ("4", "5-7", "16+")."""

    range: str
    cost: float


@dataclass(frozen=True)
class AppSettings:
    """Resolved settings. Every default vignette range is always present."""

    price_essence: float
    price_diesel: float
    cost_visite_technique: float
    vignette_essence: Tuple[VignetteBracket, ...] = ()
    vignette_diesel: Tuple[VignetteBracket, ...] = ()


DEFAULT_SETTINGS = AppSettings(
    price_essence=2.5,
    price_diesel=2.2,
    cost_visite_technique=35,
    vignette_essence=(
        VignetteBracket("4", 64),
        VignetteBracket("5-7", 130),
        VignetteBracket("8-9", 220),
        VignetteBracket("10-11", 320),
        VignetteBracket("12-13", 480),
        VignetteBracket("14-15", 750),
        VignetteBracket("16+", 1000),
    ),
    vignette_diesel=(
        VignetteBracket("4", 96),
        VignetteBracket("5-7", 190),
        VignetteBracket("8-9", 300),
        VignetteBracket("10-11", 430),
        VignetteBracket("12-13", 640),
        VignetteBracket("14-15", 1000),
        VignetteBracket("16+", 1300),
    ),
)

# Persisted blob key -> AppSettings attribute
_SCALAR_FIELDS = {
    "priceEssence": "price_essence",
    "priceDiesel": "price_diesel",
    "costVisiteTechnique": "cost_visite_technique",
}
_TABLE_FIELDS = {
    "vignetteEssence": "vignette_essence",
    "vignetteDiesel": "vignette_diesel",
}


def _valid_amount(value: Any) -> bool:
    """True for a real, non-negative number (bool excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value >= 0


def _resolve_table(
    defaults: Tuple[VignetteBracket, ...], persisted: Any
) -> Tuple[VignetteBracket, ...]:
    """Per-range merge: default ranges and order, persisted costs where valid."""
    saved: Dict[str, float] = {}
    if isinstance(persisted, list):
        for entry in persisted:
            if not isinstance(entry, dict):
                continue
            key = entry.get("range")
            cost = entry.get("cost")
            if isinstance(key, str) and _valid_amount(cost) and key not in saved:
                saved[key] = cost
    return tuple(VignetteBracket(b.range, saved.get(b.range, b.cost)) for b in defaults)


def resolve_settings(persisted: Optional[Dict[str, Any]]) -> AppSettings:
    """
    Merge a persisted settings blob over the built-in defaults.

    Scalars override when present and valid. Vignette tables keep the
    default ranges in default order; persisted costs replace matching
    ranges and unknown ranges are dropped. Never raises.
    """
    if persisted is None:
        return DEFAULT_SETTINGS
    if not isinstance(persisted, dict):
        logger.warning("Ignoring malformed settings blob, using defaults")
        return DEFAULT_SETTINGS

    values: Dict[str, Any] = {}
    for blob_key, attr in _SCALAR_FIELDS.items():
        value = persisted.get(blob_key)
        values[attr] = value if _valid_amount(value) else getattr(DEFAULT_SETTINGS, attr)
    for blob_key, attr in _TABLE_FIELDS.items():
        values[attr] = _resolve_table(getattr(DEFAULT_SETTINGS, attr), persisted.get(blob_key))
    return AppSettings(**values)


def settings_to_dict(settings: AppSettings) -> Dict[str, Any]:
    """Serialize settings to the persisted camelCase blob."""
    d: Dict[str, Any] = {}
    for blob_key, attr in _SCALAR_FIELDS.items():
        d[blob_key] = getattr(settings, attr)
    for blob_key, attr in _TABLE_FIELDS.items():
        d[blob_key] = [
            {"range": b.range, "cost": b.cost} for b in getattr(settings, attr)
        ]
    return d


def load_settings(store: Optional[KeyValueStore]) -> AppSettings:
    """Read settings from the store; no store means defaults."""
    if store is None:
        return DEFAULT_SETTINGS
    return resolve_settings(store.get(SETTINGS_KEY))


def save_settings(store: KeyValueStore, settings: AppSettings) -> None:
    """Overwrite the persisted settings blob."""
    store.put(SETTINGS_KEY, settings_to_dict(settings))
    logger.info("Settings saved")


def with_price(settings: AppSettings, which: str, value: float) -> AppSettings:
    """Return a copy with one scalar price changed."""
    attrs = {
        "essence": "price_essence",
        "diesel": "price_diesel",
        "visite": "cost_visite_technique",
    }
    if which not in attrs:
        raise KeyError(f"Unknown price '{which}' (expected one of {', '.join(attrs)})")
    if not _valid_amount(value):
        raise ValueError("Price must be a non-negative number")
    return replace(settings, **{attrs[which]: value})


# =============================================================================
# Lookups
# =============================================================================


def range_contains(range_key: str, power: int) -> bool:
    """Check a fiscal power against a range key like "4", "5-7" or "16+"."""
    key = range_key.strip()
    try:
        if key.endswith("+"):
            return power >= int(key[:-1])
        if "-" in key:
            low, high = key.split("-", 1)
            return int(low) <= power <= int(high)
        return power == int(key)
    except ValueError:
        return False


def vignette_cost(
    settings: AppSettings, fuel_type: str, fiscal_power: Optional[int]
) -> Optional[float]:
    """Road tax for a vehicle, or None when its fiscal power is unknown."""
    if fiscal_power is None or fiscal_power <= 0:
        return None
    table = settings.vignette_diesel if fuel_type == "Diesel" else settings.vignette_essence
    for bracket in table:
        if range_contains(bracket.range, fiscal_power):
            return bracket.cost
    # Below the smallest bracket
    return table[0].cost if table else None


def fuel_price(settings: AppSettings, fuel_type: str) -> float:
    """Default price per liter for a fuel type."""
    if fuel_type == "Diesel":
        return settings.price_diesel
    return settings.price_essence
