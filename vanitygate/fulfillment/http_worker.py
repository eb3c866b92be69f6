"""
Fulfillment worker reached over HTTP.

The worker accepts ``POST {"word": "..."}`` and answers with a JSON object
describing the generated address.
"""
from typing import Any, Dict, Optional

import requests
from loguru import logger

from vanitygate.exceptions import (
    DispatchTimeout,
    DispatchTransportError,
    ResponseUnparseable,
    WorkerRejected,
)

from .base import FulfillmentRequest, FulfillmentResult, FulfillmentWorker


class HttpFulfillmentWorker(FulfillmentWorker):
    """Handler for a vanity generation worker exposed over HTTP."""

    DEFAULT_TIMEOUT_SECONDS = 30.0

    def __init__(self, config: Dict[str, Any], session: Optional[requests.Session] = None):
        super().__init__(config)
        self.url = config.get('url', '')
        self.timeout = float(config.get('timeout_seconds') or self.DEFAULT_TIMEOUT_SECONDS)
        self.session = session or requests.Session()

    @property
    def worker_name(self) -> str:
        return 'http'

    def dispatch(self, job: FulfillmentRequest) -> FulfillmentResult:
        if not self.url:
            raise DispatchTransportError('Fulfillment worker URL not configured')

        logger.debug('dispatching order {} to {}', job.order_id, self.url)
        try:
            response = self.session.post(
                self.url,
                json=job.to_payload(),
                timeout=self.timeout,
            )
        except requests.Timeout as exc:
            raise DispatchTimeout(
                f'Worker did not answer within {self.timeout}s') from exc
        except requests.RequestException as exc:
            raise DispatchTransportError(f'Worker unreachable: {exc}') from exc

        if not 200 <= response.status_code < 300:
            raise WorkerRejected(
                f'Worker answered {response.status_code}: {response.text[:200]}',
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseUnparseable(f'Worker response is not JSON: {exc}') from exc
        if not isinstance(payload, dict):
            raise ResponseUnparseable('Worker response is not a JSON object')

        logger.info(f'Order {job.order_id} fulfilled by worker ({response.status_code})')
        return FulfillmentResult(payload=payload, status_code=response.status_code)
