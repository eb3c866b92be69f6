"""
Ledger store backed by the Django ORM.

The store is the only shared mutable state. Callers never cache what it
returns: every decision re-reads the current row.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from loguru import logger

from vanitygate.exceptions import StorageFailure
from vanitygate.models import PaymentRecord, VanityOrder


class OrderStatus(str, enum.Enum):
    UNPAID = 'unpaid'
    PAID_UNUSED = 'paid_unused'
    PAID_USED = 'paid_used'


@dataclass(frozen=True)
class LedgerEntry:
    """A payment ready to be written, with its derived order fields."""
    signature: str
    sender: str
    receiver: str
    amount_lamports: int
    amount_sol: Decimal
    timestamp: datetime
    is_paid: bool


@dataclass(frozen=True)
class OrderState:
    order_id: str
    payer: str
    amount_sol: Decimal
    is_paid: bool
    is_used: bool
    is_generated: bool

    @property
    def status(self) -> OrderStatus:
        if not self.is_paid:
            return OrderStatus.UNPAID
        if self.is_used:
            return OrderStatus.PAID_USED
        return OrderStatus.PAID_UNUSED

    @classmethod
    def from_model(cls, order: VanityOrder) -> 'OrderState':
        return cls(
            order_id=order.signature,
            payer=order.payer,
            amount_sol=order.amount_sol,
            is_paid=order.is_paid,
            is_used=order.is_used,
            is_generated=order.is_generated,
        )


class LedgerStore:
    """Durable payment records and order status."""

    def insert_if_absent(self, entry: LedgerEntry) -> bool:
        """
        Write the payment and its order unless the signature is already known.

        Returns:
            True if the rows were created, False if the signature existed.

        Raises:
            StorageFailure: the database rejected the write for another reason.
        """
        try:
            with transaction.atomic():
                payment = PaymentRecord(
                    signature=entry.signature,
                    sender=entry.sender,
                    receiver=entry.receiver,
                    amount_lamports=entry.amount_lamports,
                    amount_sol=entry.amount_sol,
                    timestamp=entry.timestamp,
                )
                payment.save(force_insert=True)
                VanityOrder.objects.create(
                    signature=entry.signature,
                    payment=payment,
                    payer=entry.sender,
                    amount_sol=entry.amount_sol,
                    is_paid=entry.is_paid,
                )
        except IntegrityError:
            logger.debug('payment {} already recorded', entry.signature)
            return False
        except DatabaseError as exc:
            raise StorageFailure(f'Failed to record payment {entry.signature}: {exc}') from exc
        return True

    def read_order(self, payer: str) -> Optional[OrderState]:
        """
        Current state of the order a wallet would claim.

        A wallet may have paid more than once. The oldest paid and unused
        order wins, then the latest consumed one, then the latest unpaid one.
        """
        try:
            orders = VanityOrder.objects.filter(payer=payer)
            order = (
                orders.filter(is_paid=True, is_used=False).order_by('created_at', 'id').first()
                or orders.filter(is_paid=True).order_by('-used_at', '-id').first()
                or orders.order_by('-created_at', '-id').first()
            )
        except DatabaseError as exc:
            raise StorageFailure(f'Failed to read order for {payer}: {exc}') from exc
        if order is None:
            return None
        return OrderState.from_model(order)

    def try_mark_used(self, order_id: str, word: str = '') -> bool:
        """
        Atomically move a paid, unused order to used.

        Only one caller can ever see True for a given order: the update is
        guarded by ``is_used=False`` in the same statement.
        """
        now = timezone.now()
        try:
            updated = VanityOrder.objects.filter(
                signature=order_id,
                is_paid=True,
                is_used=False,
            ).update(
                is_used=True,
                requested_word=word,
                used_at=now,
                updated_at=now,
            )
        except DatabaseError as exc:
            raise StorageFailure(f'Failed to mark order {order_id} used: {exc}') from exc
        return updated == 1
