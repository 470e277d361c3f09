"""Polling cadence for the host and audience views."""

ADMIN_ACTIVE_QUESTION_INTERVAL_MS: int = 5000
ADMIN_RESPONSES_INTERVAL_MS: int = 3000
AUDIENCE_QUESTIONS_INTERVAL_MS: int = 5000

ROLE_ADMIN: str = "admin"
ROLE_AUDIENCE: str = "audience"

SESSION_NOT_FOUND_MESSAGE: str = "Saved session not found. You may need to create or join again."
SERVER_UNREACHABLE_MESSAGE: str = "Could not contact server. Please check backend and try again."
NO_SAVED_SESSION_MESSAGE: str = "No saved session to resume."
INVALID_ADMIN_CREDENTIALS_MESSAGE: str = "Invalid admin credentials."
