import asyncio
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

from .pricing_service import to_number

PER_PAGE = 200


@dataclass(frozen=True)
class RemoteVariantRef:
    remote_product_id: int
    remote_variant_id: int


@dataclass
class RemoteCatalogIndex:
    sku_index: Dict[str, RemoteVariantRef] = field(default_factory=dict)
    variant_index: Dict[int, RemoteVariantRef] = field(default_factory=dict)

    def add_product(self, product: Dict[str, Any]) -> None:
        product_id = to_number(product.get("id"))
        if product_id is None:
            return
        for variant in product.get("variants") or []:
            variant_id = to_number(variant.get("id"))
            if variant_id is None:
                continue
            ref = RemoteVariantRef(int(product_id), int(variant_id))
            self.variant_index[ref.remote_variant_id] = ref
            sku = normalize_sku(variant.get("sku"))
            if sku:
                self.sku_index[sku] = ref

    def match(self, sku: str, remote_variant_id: Optional[float]) -> Optional[RemoteVariantRef]:
        """SKU first, then the stored remote variant id. A stale id is just no match."""
        ref = self.sku_index.get(sku) if sku else None
        if ref is None and remote_variant_id is not None:
            ref = self.variant_index.get(int(remote_variant_id))
        return ref


def normalize_sku(value: Any) -> str:
    return str(value if value is not None else "").strip().upper()


async def iter_remote_pages(client, per_page: int = PER_PAGE) -> AsyncIterator[List[Dict[str, Any]]]:
    """
    Yield remote product pages until an empty or short page.

    The client is blocking (requests), so each page is fetched in a worker
    thread. Consumers may stop iterating early.
    """
    page = 1
    while True:
        products = await asyncio.to_thread(client.list_products_page, page, per_page)
        if not products:
            return
        yield products
        if len(products) < per_page:
            return
        page += 1


async def build_remote_index(client, per_page: int = PER_PAGE) -> RemoteCatalogIndex:
    index = RemoteCatalogIndex()
    async for products in iter_remote_pages(client, per_page):
        for product in products:
            index.add_product(product)
    return index
