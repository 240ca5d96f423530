"""Built-in US state table.

Maps canonical state names to postal codes and carries an approximate
bounding box per state, used to pick which states' ZIP geometry is worth
fetching.  Boxes are rounded outward to two decimals.
"""

from __future__ import annotations

from zipfence.models.region import Region

# name, code, min_lat, max_lat, min_lon, max_lon
_STATE_ROWS: tuple[tuple[str, str, float, float, float, float], ...] = (
    ("Alabama", "AL", 30.14, 35.01, -88.48, -84.88),
    # Aleutian islands west of the antimeridian are clipped to -179.99.
    ("Alaska", "AK", 51.20, 71.44, -179.99, -129.97),
    ("Arizona", "AZ", 31.33, 37.01, -114.82, -109.04),
    ("Arkansas", "AR", 33.00, 36.50, -94.62, -89.64),
    ("California", "CA", 32.53, 42.01, -124.49, -114.13),
    ("Colorado", "CO", 36.99, 41.01, -109.06, -102.04),
    ("Connecticut", "CT", 40.95, 42.06, -73.73, -71.78),
    ("Delaware", "DE", 38.45, 39.84, -75.79, -75.04),
    ("District of Columbia", "DC", 38.79, 39.00, -77.12, -76.90),
    ("Florida", "FL", 24.39, 31.01, -87.64, -79.97),
    ("Georgia", "GA", 30.35, 35.01, -85.61, -80.75),
    ("Hawaii", "HI", 18.86, 22.24, -160.25, -154.75),
    ("Idaho", "ID", 41.98, 49.01, -117.25, -111.04),
    ("Illinois", "IL", 36.97, 42.51, -91.52, -87.49),
    ("Indiana", "IN", 37.77, 41.77, -88.10, -84.78),
    ("Iowa", "IA", 40.37, 43.51, -96.64, -90.14),
    ("Kansas", "KS", 36.99, 40.01, -102.06, -94.58),
    ("Kentucky", "KY", 36.49, 39.15, -89.58, -81.96),
    ("Louisiana", "LA", 28.92, 33.02, -94.05, -88.81),
    ("Maine", "ME", 42.97, 47.46, -71.09, -66.93),
    ("Maryland", "MD", 37.88, 39.73, -79.49, -75.04),
    ("Massachusetts", "MA", 41.23, 42.89, -73.51, -69.92),
    ("Michigan", "MI", 41.69, 48.31, -90.42, -82.12),
    ("Minnesota", "MN", 43.49, 49.39, -97.24, -89.48),
    ("Mississippi", "MS", 30.17, 35.01, -91.66, -88.09),
    ("Missouri", "MO", 35.99, 40.62, -95.78, -89.09),
    ("Montana", "MT", 44.35, 49.01, -116.05, -104.03),
    ("Nebraska", "NE", 39.99, 43.01, -104.06, -95.30),
    ("Nevada", "NV", 35.00, 42.01, -120.01, -114.03),
    ("New Hampshire", "NH", 42.69, 45.31, -72.56, -70.60),
    ("New Jersey", "NJ", 38.92, 41.36, -75.57, -73.88),
    ("New Mexico", "NM", 31.33, 37.01, -109.06, -103.00),
    ("New York", "NY", 40.49, 45.02, -79.77, -71.85),
    ("North Carolina", "NC", 33.84, 36.59, -84.33, -75.45),
    ("North Dakota", "ND", 45.93, 49.01, -104.05, -96.55),
    ("Ohio", "OH", 38.40, 41.98, -84.83, -80.51),
    ("Oklahoma", "OK", 33.61, 37.01, -103.01, -94.43),
    ("Oregon", "OR", 41.99, 46.30, -124.57, -116.46),
    ("Pennsylvania", "PA", 39.71, 42.27, -80.53, -74.68),
    ("Rhode Island", "RI", 41.14, 42.02, -71.91, -71.11),
    ("South Carolina", "SC", 32.03, 35.22, -83.36, -78.53),
    ("South Dakota", "SD", 42.47, 45.95, -104.06, -96.43),
    ("Tennessee", "TN", 34.98, 36.68, -90.32, -81.64),
    ("Texas", "TX", 25.83, 36.51, -106.65, -93.50),
    ("Utah", "UT", 36.99, 42.01, -114.06, -109.04),
    ("Vermont", "VT", 42.72, 45.02, -73.44, -71.46),
    ("Virginia", "VA", 36.54, 39.47, -83.68, -75.16),
    ("Washington", "WA", 45.54, 49.01, -124.85, -116.91),
    ("West Virginia", "WV", 37.20, 40.64, -82.65, -77.71),
    ("Wisconsin", "WI", 42.49, 47.31, -92.89, -86.24),
    ("Wyoming", "WY", 40.99, 45.01, -111.06, -104.05),
)

#: All known regions keyed by postal code, in table order.
REGIONS: dict[str, Region] = {
    code: Region(name=name, code=code, min_lat=s, max_lat=n, min_lon=w, max_lon=e)
    for name, code, s, n, w, e in _STATE_ROWS
}

_BY_NAME: dict[str, Region] = {region.name.lower(): region for region in REGIONS.values()}


def _normalize(value: str) -> str:
    return " ".join(value.replace("_", " ").split()).lower()


def region_by_name(name: str | None) -> Region | None:
    """Look up a region by canonical name (case/whitespace-insensitive)."""
    if not name:
        return None
    return _BY_NAME.get(_normalize(name))


def region_by_code(code: str | None) -> Region | None:
    """Look up a region by postal code, e.g. ``"pa"`` or ``"US-PA"``."""
    if not code:
        return None
    normalized = code.strip().upper()
    if normalized.startswith("US-"):
        normalized = normalized[3:]
    return REGIONS.get(normalized)


def resolve_region(value: str | Region | None) -> Region | None:
    """Resolve a name, code or :class:`Region` against the table.

    Returns ``None`` for anything the table does not know; callers treat
    that as unresolvable and skip it.
    """
    if value is None:
        return None
    if isinstance(value, Region):
        return REGIONS.get(value.code)
    return region_by_name(value) or region_by_code(value)


def region_code_for(value: str | Region | None) -> str | None:
    region = resolve_region(value)
    return region.code if region is not None else None
