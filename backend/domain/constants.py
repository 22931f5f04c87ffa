"""
Domain constants used across services/routers.
"""

# Authoritative prices in IDR. "Free Trial" is a non-payable offering.
DEFAULT_PACKAGE_PRICES = {
    "Free Trial": 0,
    "Muqarrar Termin 1": 90000,
    "Bundle Termin 1–2": 150000,
}

# Midtrans Snap hosts
SNAP_SANDBOX_BASE_URL = "https://app.sandbox.midtrans.com"
SNAP_PRODUCTION_BASE_URL = "https://app.midtrans.com"
SNAP_TRANSACTIONS_PATH = "/snap/v1/transactions"
SNAP_JS_SANDBOX_URL = "https://app.sandbox.midtrans.com/snap/snap.js"
SNAP_JS_PRODUCTION_URL = "https://app.midtrans.com/snap/snap.js"

# Notification fields that must be present before signature verification
REQUIRED_NOTIFICATION_FIELDS = ("order_id", "status_code", "gross_amount", "signature_key")

ORDER_ID_PREFIX = "ORDER"
