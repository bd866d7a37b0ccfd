MONGODB_URI_ENV = "MONGODB_URI"
DATABASE_URL_ENV = "DATABASE_URL"
MONGODB_DB_NAME_ENV = "MONGODB_DB_NAME"
MONGODB_COLLECTION_ENV = "MONGODB_COLLECTION"

ANONYMIZE_PLAYER_NAMES_ENV = "ANONYMIZE_PLAYER_NAMES"
ANONYMIZE_KEEP_NAMES_ENV = "ANONYMIZE_KEEP_NAMES"
RECENT_TOURNAMENTS_LIMIT_ENV = "RECENT_TOURNAMENTS_LIMIT"

DASHBOARD_HOST_ENV = "DASHBOARD_HOST"
DASHBOARD_PORT_ENV = "DASHBOARD_PORT"
PORT_ENV = "PORT"
DASHBOARD_REQUEST_TIMEOUT_SECONDS_ENV = "DASHBOARD_REQUEST_TIMEOUT_SECONDS"

DEFAULT_DB_NAME = "swu_tournaments"
DEFAULT_COLLECTION_NAME = "tournaments"
DEFAULT_RECENT_TOURNAMENTS_LIMIT = 3
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15.0
