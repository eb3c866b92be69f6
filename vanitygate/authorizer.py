"""
Order authorization state machine.

    UNPAID        set at ingestion, never left by this code
    PAID_UNUSED -> PAID_USED   on a verified ownership proof
    PAID_USED     terminal

The PAID_UNUSED -> PAID_USED step is a guarded update in the ledger, so two
proofs racing for the same order cannot both dispatch.
"""
from dataclasses import dataclass
from typing import Callable, Optional, Union

from loguru import logger
from solders.pubkey import Pubkey

from vanitygate.exceptions import AlreadyConsumed, DispatchError, OrderNotFound, PaymentNotConfirmed
from vanitygate.fulfillment import FulfillmentRequest, FulfillmentResult, FulfillmentWorker
from vanitygate.ledger import LedgerStore, OrderStatus
from vanitygate.ownership import verify_ownership


@dataclass(frozen=True)
class OwnershipProof:
    message: bytes
    signature: bytes
    public_key: str


@dataclass
class AuthorizationResult:
    """
    Outcome of a successful PAID_UNUSED -> PAID_USED transition.

    The order stays used whether or not the worker call succeeded; exactly one
    of ``fulfillment`` and ``dispatch_error`` is set.
    """
    order_id: str
    payer: str
    word: str
    fulfillment: Optional[FulfillmentResult] = None
    dispatch_error: Optional[DispatchError] = None

    @property
    def fulfilled(self) -> bool:
        return self.fulfillment is not None


Verifier = Callable[[bytes, bytes, Union[str, bytes]], Pubkey]


class OrderAuthorizer:
    def __init__(
        self,
        store: LedgerStore,
        worker: FulfillmentWorker,
        verifier: Verifier = verify_ownership,
    ):
        self.store = store
        self.worker = worker
        self.verifier = verifier

    def authorize(self, proof: OwnershipProof, word: str) -> AuthorizationResult:
        """
        Verify the proof, consume the payer's order and dispatch one job.

        Raises:
            VerificationError: proof rejected; the ledger is not touched
            OrderNotFound: the wallet never paid
            PaymentNotConfirmed: the payment is below the minimum
            AlreadyConsumed: the order was fulfilled before, or a concurrent
                claim won the transition
            StorageFailure: the ledger is unavailable
        """
        payer = str(self.verifier(proof.message, proof.signature, proof.public_key))

        lost = set()
        while True:
            order = self.store.read_order(payer)
            if order is None:
                logger.info('claim from {} rejected: no order', payer)
                raise OrderNotFound(f'No payment found for {payer}.')

            status = order.status
            if status is OrderStatus.UNPAID:
                logger.info('claim for order {} rejected: payment below minimum', order.order_id)
                raise PaymentNotConfirmed(
                    f'Payment {order.order_id} of {order.amount_sol} SOL is below the minimum.')
            if status is OrderStatus.PAID_USED or order.order_id in lost:
                logger.info('claim for order {} rejected: already consumed', order.order_id)
                raise AlreadyConsumed(f'Order {order.order_id} was already fulfilled.')

            if self.store.try_mark_used(order.order_id, word):
                break
            # A concurrent claim took this order; the wallet may own another.
            logger.info('claim for order {} lost the race to a concurrent claim', order.order_id)
            lost.add(order.order_id)

        logger.info('order {} marked used for {} (word={})', order.order_id, payer, word)
        return self._dispatch(FulfillmentRequest(order_id=order.order_id, payer=payer, word=word))

    def _dispatch(self, job: FulfillmentRequest) -> AuthorizationResult:
        result = AuthorizationResult(order_id=job.order_id, payer=job.payer, word=job.word)
        try:
            result.fulfillment = self.worker.dispatch(job)
        except DispatchError as exc:
            # Never retried: the order is already used.
            logger.warning(
                'fulfillment for order {} failed ({}): {}',
                job.order_id,
                exc.code,
                exc.message,
            )
            result.dispatch_error = exc
        return result
