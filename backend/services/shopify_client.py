import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

import requests

from config import HTTP_TIMEOUT, SHOPIFY_API_VERSION
from models import ShopifyCredentials, ShopifyOrder
from services.errors import VendorError

logger = logging.getLogger(__name__)

# Shopify max page size
MAX_ORDERS = 250


def _get(config: ShopifyCredentials, path: str, params: dict = None) -> dict:
    store = config.store_url.replace("https://", "").replace("http://", "").rstrip("/")
    url = f"https://{store}/admin/api/{SHOPIFY_API_VERSION}/{path}"

    res = requests.get(
        url,
        headers={"X-Shopify-Access-Token": config.access_token, "Content-Type": "application/json"},
        params=params,
        timeout=HTTP_TIMEOUT,
    )
    if not res.ok:
        logger.error("Shopify %s failed: %s %s", path, res.status_code, res.text[:300])
        raise VendorError(
            "Failed to fetch Shopify orders. Check your store URL and access token.",
            detail=res.text,
            status=res.status_code,
        )
    return res.json()


def _customer_name(order: dict) -> str:
    customer = order.get("customer") or {}
    name = f"{customer.get('first_name') or ''} {customer.get('last_name') or ''}".strip()
    return name or "Guest"


def fetch_orders(
    config: ShopifyCredentials,
    limit: int = 10,
    status: str = None,
    day: Optional[date] = None,
) -> List[ShopifyOrder]:
    params = {
        "limit": min(limit, MAX_ORDERS),
        "status": "any",
        "order": "created_at desc",
    }
    # "pending", "paid", "refunded"... filter on payment state
    if status and status not in ("any", "all"):
        params["financial_status"] = status
    if day:
        start = datetime.combine(day, time.min)
        params["created_at_min"] = start.isoformat()
        params["created_at_max"] = (start + timedelta(days=1)).isoformat()

    orders = _get(config, "orders.json", params).get("orders") or []

    return [
        ShopifyOrder(
            id=str(o.get("id", "")),
            order_number=str(o.get("order_number") or o.get("name") or ""),
            financial_status=o.get("financial_status") or "",
            fulfillment_status=o.get("fulfillment_status"),
            total_price=str(o.get("total_price") or "0.00"),
            currency=o.get("currency") or "USD",
            customer_name=_customer_name(o),
            created_at=o.get("created_at") or "",
        )
        for o in orders
    ]
