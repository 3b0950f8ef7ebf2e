import logging
from typing import Optional

import httpx

from .config import Config


logger = logging.getLogger(__name__)


def create_http_client(config: Config, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Build the async client used for every records API call.

    The bearer credential and timeout live here so the repository client
    never has to know where they come from.
    """
    base_url = config.api_base()
    if not base_url:
        logger.warning("Records API base URL is not configured")
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Authorization": f"Bearer {config.SUPABASE_ANON_KEY}"},
        timeout=config.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )
