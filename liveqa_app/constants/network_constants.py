"""Network configuration constants for the live Q&A application."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 5174
API_PREFIX: str = "/api"
DEFAULT_SERVER_URL: str = f"http://127.0.0.1:{DEFAULT_PORT}"
REQUEST_TIMEOUT_SECONDS: float = 10.0
