"""Constants and defaults shared across features."""

from decimal import Decimal

MIN_PROGRESS = 0
MAX_PROGRESS = 100

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

PROJECT_NUMBER_PREFIX = "PRJ"

ZERO = Decimal("0")
