"""
Fulfillment workers for authorized orders.
"""
from .base import FulfillmentRequest, FulfillmentResult, FulfillmentWorker
from .http_worker import HttpFulfillmentWorker

__all__ = [
    'FulfillmentRequest',
    'FulfillmentResult',
    'FulfillmentWorker',
    'HttpFulfillmentWorker',
]
