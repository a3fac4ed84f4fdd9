"""
Environment-driven configuration for the ERP console.

Values are read once at import time. A ``.env`` file in the working
directory is loaded first so local development does not need exported
variables.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


# Remote API
API_BASE_URL = os.getenv("ERP_API_BASE_URL", "https://crm-api-hkiz.onrender.com/api")
API_TIMEOUT = float(os.getenv("ERP_API_TIMEOUT", "20"))

# Service implementation: "impl" talks to the API, "demo" serves fixtures
SERVICE_KIND = os.getenv("ERP_SERVICE", "impl").lower()

# Server
APP_PORT = int(os.getenv("ERP_APP_PORT", "8050"))
APP_TITLE = os.getenv("ERP_APP_TITLE", "Golden Power ERP")
COMPANY_NAME = os.getenv("ERP_COMPANY_NAME", "Golden Power")
COMPANY_GSTIN = os.getenv("ERP_COMPANY_GSTIN", "")
DEBUG = _flag("ERP_DEBUG")

# Caches
CACHE_DIR = os.getenv("ERP_CACHE_DIR") or None
METRICS_TTL = float(os.getenv("ERP_METRICS_TTL", "300"))
REFERENCE_TTL = int(os.getenv("ERP_REFERENCE_TTL", "3600"))

# Updates
AUTO_UPDATE = _flag("ERP_AUTO_UPDATE")
UPDATE_FEED_URL = os.getenv("ERP_UPDATE_FEED_URL") or None
UPDATE_FAILURE_GRACE = float(os.getenv("ERP_UPDATE_FAILURE_GRACE", "3"))
MANUAL_CHECK_DEBOUNCE = float(os.getenv("ERP_MANUAL_CHECK_DEBOUNCE", "0.5"))

# Polling
HEARTBEAT_INTERVAL = float(os.getenv("ERP_HEARTBEAT_INTERVAL", "15"))

# UI
SEARCH_DEBOUNCE_MS = 500
LOW_STOCK_LIMIT = 5
CUSTOMERS_PAGE_SIZE = 10
INVENTORY_PAGE_SIZE = 10
WARRANTY_PAGE_SIZE = 10
BILLS_PAGE_SIZE = 15
TECHNICIAN_PAGE_SIZE = 7
