"""Application constants."""

USER_AGENT = "township-delivery-geo/0.3 (+delivery; contact: configured-email)"

EARTH_RADIUS_KM = 6371.0

# [minLng, minLat, maxLng, maxLat]
MODIMOLLE_BBOX = (28.30, -24.80, 28.55, -24.60)
# [lng, lat]
DEFAULT_CENTER = (28.4206, -24.6958)
DEFAULT_ZOOM = 13
DEFAULT_COUNTRY = "South Africa"

DEFAULT_FEE_TIERS = (
    (2.0, 15.0),
    (5.0, 25.0),
    (10.0, 40.0),
    (15.0, 60.0),
)
DEFAULT_EXTRA_KM_FEE = 5.0

CONTEXT_PREFIX_FIELDS = (
    ("place", "locality"),
    ("region", "region"),
    ("postcode", "postal_code"),
    ("country", "country"),
)

MAPBOX_GEOCODING_URL = "https://api.mapbox.com/geocoding/v5/mapbox.places"
MAPBOX_TOKEN_ENV = "MAPBOX_ACCESS_TOKEN"
CONFIG_FILENAME = "service_area.yml"

EXIT_SUCCESS = 0
EXIT_REJECTED = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "level",
    "request_id",
    "command",
    "provider",
    "event",
    "status",
    "attempt",
    "duration_ms",
    "error_code",
    "message",
)
