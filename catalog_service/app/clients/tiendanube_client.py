import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from shared.core.config import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s]: %(message)s"
)

logger = logging.getLogger(__name__)

API_BASE_URL = "https://api.tiendanube.com"
DEFAULT_FIELDS = ("id", "variants")


class RemoteCatalogError(Exception):
    """Non-2xx answer from the remote catalog API."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RemoteCatalogConfigError(RuntimeError):
    pass


class TiendanubeClient:
    """Thin Tiendanube REST client: paginated product listing and variant batch patch."""

    def __init__(
        self,
        store_id: str,
        token: str,
        user_agent: str,
        api_version: str = "2025-03",
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = f"{API_BASE_URL}/{api_version}/{store_id}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                # Tiendanube uses "Authentication", not "Authorization"
                "Authentication": f"bearer {token}",
                "User-Agent": user_agent,
                "Content-Type": "application/json",
            }
        )

    @classmethod
    def from_settings(cls) -> "TiendanubeClient":
        missing = [
            name for name in ("TIENDANUBE_STORE_ID", "TIENDANUBE_TOKEN", "TIENDANUBE_USER_AGENT")
            if not getattr(settings, name)
        ]
        if missing:
            raise RemoteCatalogConfigError(
                f"Tiendanube is not configured, missing: {', '.join(missing)}")
        return cls(
            store_id=settings.TIENDANUBE_STORE_ID,
            token=settings.TIENDANUBE_TOKEN,
            user_agent=settings.TIENDANUBE_USER_AGENT,
            api_version=settings.TIENDANUBE_API_VERSION,
            timeout=settings.TIENDANUBE_TIMEOUT,
        )

    def _check(self, response: requests.Response, context: str) -> Any:
        if not response.ok:
            raise RemoteCatalogError(
                f"Tiendanube {context} -> {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.json()

    def list_products_page(
        self,
        page: int,
        per_page: int,
        fields: Sequence[str] = DEFAULT_FIELDS,
    ) -> List[Dict[str, Any]]:
        response = self.session.get(
            f"{self.base_url}/products",
            params={"page": page, "per_page": per_page, "fields": ",".join(fields)},
            timeout=self.timeout,
        )
        data = self._check(response, f"GET products page {page}")
        return data if isinstance(data, list) else []

    def patch_variants(self, product_id: int, payload: List[Dict[str, Any]]) -> Any:
        response = self.session.patch(
            f"{self.base_url}/products/{product_id}/variants",
            json=payload,
            timeout=self.timeout,
        )
        return self._check(response, f"PATCH {product_id}")
