"""Limits and formats shared by the event aggregate and its clients."""

ACCESS_CODE_LENGTH: int = 5
ACCESS_CODE_ATTEMPTS: int = 10

ADMIN_KEY_ALPHABET: str = "ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz23456789"
ADMIN_KEY_LENGTH: int = 20
ADMIN_PIN_LENGTH: int = 6

MAX_EVENT_NAME_LENGTH: int = 200
MAX_QUESTION_LENGTH: int = 1000
MAX_RESPONSE_LENGTH: int = 280

WORD_CLOUD_LIMIT: int = 150
