"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200

DEFAULT_DUE_TIME = time(16, 0)

# Prices are stored in cents
MIN_PRODUCT_PRICE = 0
MAX_PRODUCT_PRICE = 100000
MAX_PRODUCT_NAME_LENGTH = 255

MIN_PASSWORD_LENGTH = 4

DASHBOARD_SALES_YEARS = 3
