"""
Process-wide collaborators, built once at startup and handed to each request.
"""
from dataclasses import dataclass

from django.apps import apps

from vanitygate.authorizer import OrderAuthorizer
from vanitygate.fulfillment import FulfillmentWorker, HttpFulfillmentWorker
from vanitygate.ingest import PaymentIngestor
from vanitygate.ledger import LedgerStore
from vanitygate.policy import PaymentPolicy


@dataclass(frozen=True)
class GateContext:
    store: LedgerStore
    worker: FulfillmentWorker
    policy: PaymentPolicy
    webhook_auth_header: str = ''

    @property
    def authorizer(self) -> OrderAuthorizer:
        return OrderAuthorizer(self.store, self.worker)

    @property
    def ingestor(self) -> PaymentIngestor:
        return PaymentIngestor(self.store, self.policy)


def build_context(settings) -> GateContext:
    worker = HttpFulfillmentWorker({
        'url': getattr(settings, 'VANITY_WORKER_URL', ''),
        'timeout_seconds': getattr(settings, 'VANITY_WORKER_TIMEOUT_SECONDS', 30.0),
    })
    return GateContext(
        store=LedgerStore(),
        worker=worker,
        policy=PaymentPolicy.from_settings(settings),
        webhook_auth_header=getattr(settings, 'HELIUS_WEBHOOK_AUTH_HEADER', ''),
    )


def get_context() -> GateContext:
    return apps.get_app_config('vanitygate').context
