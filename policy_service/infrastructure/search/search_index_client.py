"""
HTTP-клиент внешнего поискового индекса.

Повторяет запросы с экспоненциальной задержкой при временных сбоях
(таймауты, ошибки соединения, 429/503/504).
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ...core.errors import SearchIndexError

logger = logging.getLogger("policy-service.infrastructure.search_index")

RETRYABLE_STATUS_CODES = (429, 503, 504)


def is_retryable_http_error(exception: BaseException) -> bool:
    """Определить, стоит ли повторять HTTP-запрос."""
    if isinstance(exception, (httpx.TimeoutException, httpx.ConnectError)):
        return True
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRYABLE_STATUS_CODES
    return False


class SearchIndexClient:
    """
    Клиент индекса: upsert документов политик.

    Пример:
        >>> client = SearchIndexClient("http://search:9200", index="policies")
        >>> await client.index_document("policy-1", {"title": "..."})
    """

    def __init__(
        self,
        base_url: str,
        index: str = "policies",
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        min_wait: float = 0.5,
        max_wait: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.index = index
        self.api_key = api_key
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.min_wait = min_wait
        self.max_wait = max_wait
        self._transport = transport

    async def index_document(self, document_id: str, document: Dict[str, Any]) -> None:
        """
        Upsert документа.

        Raises:
            SearchIndexError: Если запрос не удался после всех попыток
        """
        await self._request("PUT", document_id, json=document)

    async def _request(self, method: str, document_id: str, json: Optional[Dict[str, Any]] = None) -> None:
        url = f"{self.base_url}/indexes/{self.index}/documents/{document_id}"
        headers = {"X-Internal-Auth": self.api_key} if self.api_key else {}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=1, min=self.min_wait, max=self.max_wait),
                retry=retry_if_exception(is_retryable_http_error),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=False,
            ):
                with attempt:
                    async with httpx.AsyncClient(transport=self._transport) as client:
                        response = await client.request(
                            method, url, json=json, headers=headers, timeout=self.timeout
                        )
                    response.raise_for_status()
        except RetryError as e:
            last = e.last_attempt.exception()
            raise SearchIndexError(document_id, f"retries exhausted: {last}") from last
        except httpx.HTTPError as e:
            raise SearchIndexError(document_id, str(e)) from e

        logger.debug(f"[SearchIndexClient] {method} {url} ok")
