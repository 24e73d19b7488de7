# Stream load endpoint, formatted with database and table names
STREAM_LOAD_PATH = "/api/{database}/{table}/_stream_load"

# Status value the service reports for a committed load
SUCCESS_STATUS = "Success"

# Header sent with every stream load so the server can reject the request
# before the body is transferred.
EXPECT_HEADER = ("Expect", "100-continue")

# Default column separator for the CSV formats
DEFAULT_COLUMN_SEPARATOR = ","

# Retry constants
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY = 1.0  # seconds

# Timing constants (in seconds)
DEFAULT_TIMEOUT = 300
BACKEND_PROBE_TIMEOUT = 1
