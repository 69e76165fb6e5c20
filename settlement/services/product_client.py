# settlement/services/product_client.py
import requests

from settlement.utils.retry import http_retry
from settlement.utils.settings import PRODUCT_SERVICE_URL
from settlement.utils.logging import get_logger

logger = get_logger(__name__)


class ProductClient:
    """Klient katalogu: cena, nazwa i obrazek produktu w chwili dodania do koszyka."""

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or PRODUCT_SERVICE_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def fetch_product(self, product_id: str) -> dict:
        url = f"{self.base_url}/products/{product_id}"
        logger.info(f"ProductClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()
