"""HTTP constants for the fetch layer."""

# Hacker News Firebase API
DEFAULT_BASE_URL = "https://hacker-news.firebaseio.com/v0"
TOP_STORIES_PATH = "/topstories.json"
ITEM_PATH_TEMPLATE = "/item/{item_id}.json"

# HTTP Status Code Ranges
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300
HTTP_STATUS_BAD_REQUEST = 400
HTTP_STATUS_TOO_MANY_REQUESTS = 429
HTTP_STATUS_SERVER_ERROR_MIN = 500
HTTP_STATUS_SERVER_ERROR_MAX = 600

# The top stories payload is ~500 integers; items are a few KB.
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 2 * 1024 * 1024  # 2 MB

DEFAULT_CHUNK_SIZE = 8192

DEFAULT_TIMEOUT_SECONDS = 10.0

# Maximum retry delay cap for rate limiting (seconds)
MAX_RETRY_AFTER_SECONDS = 60
