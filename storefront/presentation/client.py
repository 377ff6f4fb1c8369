from typing import Optional

from storefront.application.identity import TokenStore
from storefront.application.interfaces import KeyValueStorage
from storefront.application.notifications import Notifier
from storefront.application.storefront import Storefront
from storefront.config import settings
from storefront.infrastructure.http_clients import HTTPStorefrontClient
from storefront.infrastructure.storage import JsonFileStorage


def create_storefront(
    base_url: Optional[str] = None,
    storage: Optional[KeyValueStorage] = None,
) -> Storefront:
    """Собирает клиент витрины: хранилище устройства + HTTP API"""
    storage = storage or JsonFileStorage(settings.STORAGE_PATH)
    tokens = TokenStore(storage)
    api = HTTPStorefrontClient(base_url or settings.API_BASE_URL, tokens, timeout=settings.REQUEST_TIMEOUT)
    return Storefront(
        storage=storage,
        tokens=tokens,
        auth=api,
        catalog_service=api,
        orders=api,
        profiles=api,
        products=api,
        notifier=Notifier(ttl=settings.NOTIFICATION_TTL),
    )
