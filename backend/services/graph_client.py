import logging

import requests

from config import GRAPH_BASE_URL, HTTP_TIMEOUT
from services.errors import VendorError

logger = logging.getLogger(__name__)


class GraphClient:
    """Thin Microsoft Graph wrapper over requests; failures become VendorError("code: message")."""

    def __init__(self, access_token: str):
        if not access_token:
            raise VendorError("Microsoft access token is missing.")
        self.headers = {"Authorization": f"Bearer {access_token}"}

    def request(self, method: str, endpoint: str, json=None, data=None, headers=None, params=None):
        res = requests.request(
            method,
            f"{GRAPH_BASE_URL}{endpoint}",
            json=json,
            data=data,
            headers={**self.headers, **(headers or {})},
            params=params,
            timeout=HTTP_TIMEOUT,
        )

        if res.status_code == 204 or not res.content:
            if not res.ok:
                raise VendorError(f"Microsoft API Error: {res.status_code}", status=res.status_code)
            return {}

        is_json = "application/json" in res.headers.get("content-type", "")
        body = res.json() if is_json else res.text

        if not res.ok:
            if isinstance(body, dict) and "error" in body:
                err = body["error"]
                message = f"{err.get('code', 'Error')}: {err.get('message', '')}"
            else:
                message = f"Microsoft API Error: {res.status_code}"
            logger.error("Graph %s %s failed: %s", method, endpoint, message)
            raise VendorError(message, detail=str(body), status=res.status_code)

        return body

    def get(self, endpoint: str, **kwargs):
        return self.request("GET", endpoint, **kwargs)

    def post(self, endpoint: str, json=None, **kwargs):
        return self.request("POST", endpoint, json=json, **kwargs)
