"""Application constants."""

API_URL = "https://api.postcodes.io/postcodes"
USER_AGENT = "postcode-enricher/0.3 (+bulk lookup)"
MAX_BATCH = 100
BATCH_PAUSE_MS = 80
RETRY_MAX_ATTEMPTS = 3
RETRY_BACKOFF_MS = 750
PREVIEW_ROW_LIMIT = 500
FILENAME_PREFIX = "postcodes_enriched"

FIELDS = (
    "country",
    "nhs_ha",
    "admin_county",
    "admin_district",
    "admin_ward",
    "parliamentary_constituency",
    "european_electoral_region",
    "primary_care_trust",
    "region",
    "parish",
    "latitude",
    "longitude",
)
HEADER = ("postcode", *FIELDS)

EXIT_SUCCESS = 0
EXIT_NOTHING_TO_DO = 10
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "event",
    "status",
    "attempt",
    "batch_start",
    "batch_end",
    "rows_in",
    "rows_out",
    "duration_ms",
    "error_code",
    "message",
)
