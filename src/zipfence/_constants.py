"""Internal constants shared across the library."""

USER_AGENT = "zipfence/0.1 (+https://github.com/zipfence/zipfence)"

# ------------------------------------------------------------------
# External data sources
# ------------------------------------------------------------------

#: OpenDataDE per-state ZCTA GeoJSON files.
GEOMETRY_BASE_URL = "https://raw.githubusercontent.com/OpenDataDE/State-zip-code-GeoJSON/master"
ZIP_LOOKUP_URL = "https://api.zippopotam.us/us"
REVERSE_GEOCODE_URL = "https://nominatim.openstreetmap.org/reverse"

DEFAULT_REQUEST_TIMEOUT: float = 15.0

#: GeoJSON property names that carry the ZIP code, most specific first.
ZIP_PROPERTY_KEYS: tuple[str, ...] = ("ZCTA5CE10", "ZCTA5CE20", "GEOID10", "zip")

# ------------------------------------------------------------------
# Geometry
# ------------------------------------------------------------------

#: Mean Earth radius in statute miles.
EARTH_RADIUS_MILES: float = 3958.8

#: Extra distance added around the radius circle when picking states to fetch.
DEFAULT_CANDIDATE_MARGIN_MILES: float = 10.0

#: Bounding-region padding factor and minimum span (degrees).
BOUNDING_PADDING: float = 1.5
MIN_BOUNDING_SPAN: float = 0.05

#: Span used to frame the home location when no features are visible.
DEFAULT_MAP_SPAN: float = 0.2

# ------------------------------------------------------------------
# Territory
# ------------------------------------------------------------------

MAX_RADIUS_MILES: float = 50.0
MIN_ZIP_LENGTH = 3

# Field names in the persisted driver document.
DOC_LOCATION = "location"
DOC_REGION = "region"
DOC_RADIUS = "milesRadius"
DOC_ZIP_CODES = "zipCodes"
