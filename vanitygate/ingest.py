"""
Payment notification ingestion.

Notifications arrive unordered and may be redelivered. Each one is written
with insert-if-absent semantics keyed by the transaction signature, so a
redelivery is a no-op. One failing entry never fails the batch.
"""
from dataclasses import asdict, dataclass
from datetime import datetime, timezone as datetime_timezone
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from django.utils import timezone
from loguru import logger
from pydantic import ValidationError

from vanitygate.exceptions import MalformedInput, StorageFailure
from vanitygate.ledger import LedgerEntry, LedgerStore
from vanitygate.policy import MAX_LAMPORTS, PaymentPolicy, lamports_to_sol
from vanitygate.schemas import HeliusTransaction, NativeTransfer


@dataclass(frozen=True)
class PaymentNotification:
    signature: str
    sender: str
    receiver: str
    amount_lamports: int
    timestamp: Optional[datetime] = None


@dataclass
class IngestReport:
    received: int = 0
    recorded: int = 0
    duplicates: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict:
        return asdict(self)


def _from_unix(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value, tz=datetime_timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _select_transfer(
    transfers: Sequence[NativeTransfer],
    treasury: Optional[str],
) -> Optional[NativeTransfer]:
    if treasury:
        return next((t for t in transfers if t.to_user_account == treasury), None)
    return transfers[0] if transfers else None


def parse_helius_payload(data: Any, treasury: Optional[str] = None) -> Tuple[List[PaymentNotification], int]:
    """
    Turn a Helius webhook body into payment notifications.

    Args:
        data: Decoded JSON body, a transaction object or a list of them
        treasury: If set, only native transfers to this address count

    Returns:
        (notifications, number of skipped entries)

    Raises:
        MalformedInput: body is neither an object nor a list
    """
    if isinstance(data, dict):
        items = [data]
    elif isinstance(data, list):
        items = data
    else:
        raise MalformedInput('Webhook body must be a transaction or a list of transactions.')

    notifications: List[PaymentNotification] = []
    skipped = 0
    for index, item in enumerate(items):
        try:
            tx = HeliusTransaction.model_validate(item)
        except ValidationError as exc:
            logger.warning('skipping malformed webhook entry {}: {}', index, exc.error_count())
            skipped += 1
            continue

        transfer = _select_transfer(tx.native_transfers or [], treasury)
        if transfer is None:
            logger.info('skipping transaction {}: no matching native transfer', tx.signature)
            skipped += 1
            continue

        notifications.append(
            PaymentNotification(
                signature=tx.signature,
                sender=transfer.from_user_account,
                receiver=transfer.to_user_account,
                amount_lamports=transfer.amount,
                timestamp=_from_unix(tx.timestamp),
            )
        )
    return notifications, skipped


class PaymentIngestor:
    """Writes payment notifications into the ledger."""

    def __init__(self, store: LedgerStore, policy: PaymentPolicy):
        self.store = store
        self.policy = policy

    def to_entry(self, notification: PaymentNotification) -> LedgerEntry:
        return LedgerEntry(
            signature=notification.signature,
            sender=notification.sender,
            receiver=notification.receiver,
            amount_lamports=notification.amount_lamports,
            amount_sol=lamports_to_sol(notification.amount_lamports),
            timestamp=notification.timestamp or timezone.now(),
            is_paid=self.policy.is_paid(notification.amount_lamports),
        )

    def ingest(self, notifications: Iterable[PaymentNotification]) -> IngestReport:
        report = IngestReport()
        for notification in notifications:
            report.received += 1
            if not 0 <= notification.amount_lamports <= MAX_LAMPORTS:
                logger.warning(
                    'skipping payment {}: amount {} out of range',
                    notification.signature,
                    notification.amount_lamports,
                )
                report.skipped += 1
                continue
            entry = self.to_entry(notification)
            try:
                created = self.store.insert_if_absent(entry)
            except StorageFailure as exc:
                logger.error('failed to record payment {}: {}', entry.signature, exc)
                report.failed += 1
                continue

            if created:
                report.recorded += 1
                logger.info(
                    f'Stored transaction: {entry.amount_sol} SOL from {entry.sender} '
                    f'to {entry.receiver} (paid={entry.is_paid})'
                )
            else:
                report.duplicates += 1
        return report

    def ingest_helius(self, data: Any) -> IngestReport:
        notifications, skipped = parse_helius_payload(data, self.policy.treasury_address)
        report = self.ingest(notifications)
        report.received += skipped
        report.skipped += skipped
        return report
