"""
Send a signed Midtrans-style notification to a running backend.

Stands in for the gateway during local work: signs the notification with
MIDTRANS_SERVER_KEY (from .env / environment) exactly like Midtrans does
and POSTs it to /api/webhook.

Run:
    python scripts/send_notification.py ORDER-1700000000000-42 settlement
    python scripts/send_notification.py ORDER-... capture --fraud challenge
    python scripts/send_notification.py ORDER-... settlement --tamper
Requires: backend running on http://127.0.0.1:4000
"""
import argparse
import os
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from config import settings
from services.signature_service import SignatureVerifier

BASE = f"http://127.0.0.1:{settings.port}"

STATUS_CODES = {
    "capture": "200",
    "settlement": "200",
    "pending": "201",
    "deny": "202",
    "cancel": "202",
    "expire": "407",
}


def build_notification(order_id, transaction_status, gross_amount, fraud_status, tamper=False):
    status_code = STATUS_CODES.get(transaction_status, "200")
    signature = SignatureVerifier(settings.midtrans_server_key).sign(
        order_id, status_code, gross_amount
    )
    if tamper:
        signature = ("0" if signature[0] != "0" else "1") + signature[1:]
    return {
        "order_id": order_id,
        "status_code": status_code,
        "gross_amount": gross_amount,
        "signature_key": signature,
        "transaction_status": transaction_status,
        "fraud_status": fraud_status,
        "payment_type": "bank_transfer",
        "status_message": "local notification",
    }


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("order_id")
    parser.add_argument("transaction_status", help="settlement | capture | pending | deny | expire | cancel")
    parser.add_argument("--amount", default="90000.00", help="gross_amount as Midtrans sends it")
    parser.add_argument("--fraud", default="accept", help="fraud_status (accept | challenge | deny)")
    parser.add_argument("--tamper", action="store_true", help="corrupt the signature")
    parser.add_argument("--base", default=BASE)
    args = parser.parse_args()

    if not settings.midtrans_server_key:
        print("MIDTRANS_SERVER_KEY is not set; cannot sign the notification")
        sys.exit(1)

    notification = build_notification(
        args.order_id, args.transaction_status, args.amount, args.fraud, tamper=args.tamper
    )

    with httpx.Client(base_url=args.base, timeout=15) as client:
        r = client.post("/api/webhook", json=notification)
        print(f"POST /api/webhook → {r.status_code} {r.text}")
        r = client.get(f"/api/order/{args.order_id}")
        print(f"GET /api/order/{args.order_id} → {r.status_code} {r.text}")


if __name__ == "__main__":
    main()
