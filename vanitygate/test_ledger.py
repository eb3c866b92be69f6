from datetime import datetime, timezone as datetime_timezone
from decimal import Decimal
from unittest.mock import patch

from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase

from vanitygate.exceptions import StorageFailure
from vanitygate.ledger import LedgerEntry, LedgerStore, OrderStatus
from vanitygate.models import PaymentRecord, VanityOrder

PAYER = 'Payer1111111111111111111111111111111111111'
TREASURY = 'Treasury11111111111111111111111111111111111'


def make_entry(signature='sig-1', payer=PAYER, lamports=100_000_000, is_paid=True) -> LedgerEntry:
    return LedgerEntry(
        signature=signature,
        sender=payer,
        receiver=TREASURY,
        amount_lamports=lamports,
        amount_sol=Decimal(lamports) / Decimal(10 ** 9),
        timestamp=datetime(2024, 5, 1, tzinfo=datetime_timezone.utc),
        is_paid=is_paid,
    )


class InsertIfAbsentTests(TestCase):
    def setUp(self) -> None:
        self.store = LedgerStore()

    def test_creates_payment_and_order(self):
        self.assertTrue(self.store.insert_if_absent(make_entry()))

        payment = PaymentRecord.objects.get()
        self.assertEqual(payment.amount_lamports, 100_000_000)
        self.assertEqual(payment.amount_sol, Decimal('0.1'))
        order = VanityOrder.objects.get()
        self.assertEqual(order.signature, 'sig-1')
        self.assertEqual(order.payment, payment)
        self.assertEqual(order.payer, PAYER)
        self.assertTrue(order.is_paid)
        self.assertFalse(order.is_used)
        self.assertFalse(order.is_generated)

    def test_repeated_signature_is_a_no_op(self):
        self.assertTrue(self.store.insert_if_absent(make_entry()))
        for _ in range(3):
            self.assertFalse(self.store.insert_if_absent(make_entry(lamports=5)))

        self.assertEqual(PaymentRecord.objects.count(), 1)
        self.assertEqual(VanityOrder.objects.count(), 1)
        self.assertEqual(PaymentRecord.objects.get().amount_lamports, 100_000_000)

    def test_database_error_becomes_storage_failure(self):
        with patch.object(PaymentRecord, 'save', side_effect=DatabaseError('connection lost')):
            with self.assertRaises(StorageFailure):
                self.store.insert_if_absent(make_entry())


class ReadOrderTests(TestCase):
    def setUp(self) -> None:
        self.store = LedgerStore()

    def test_unknown_payer(self):
        self.assertIsNone(self.store.read_order(PAYER))

    def test_reports_status(self):
        self.store.insert_if_absent(make_entry(lamports=1, is_paid=False))
        order = self.store.read_order(PAYER)
        self.assertEqual(order.order_id, 'sig-1')
        self.assertEqual(order.status, OrderStatus.UNPAID)

    def test_prefers_paid_unused_order(self):
        self.store.insert_if_absent(make_entry('sig-unpaid', lamports=1, is_paid=False))
        self.store.insert_if_absent(make_entry('sig-used'))
        self.store.try_mark_used('sig-used')
        self.store.insert_if_absent(make_entry('sig-open'))

        order = self.store.read_order(PAYER)
        self.assertEqual(order.order_id, 'sig-open')
        self.assertEqual(order.status, OrderStatus.PAID_UNUSED)

    def test_consumed_order_wins_over_unpaid(self):
        self.store.insert_if_absent(make_entry('sig-used'))
        self.store.try_mark_used('sig-used')
        self.store.insert_if_absent(make_entry('sig-unpaid', lamports=1, is_paid=False))

        order = self.store.read_order(PAYER)
        self.assertEqual(order.order_id, 'sig-used')
        self.assertEqual(order.status, OrderStatus.PAID_USED)


class TryMarkUsedTests(TestCase):
    def setUp(self) -> None:
        self.store = LedgerStore()

    def test_succeeds_exactly_once(self):
        self.store.insert_if_absent(make_entry())

        self.assertTrue(self.store.try_mark_used('sig-1', 'foo'))
        self.assertFalse(self.store.try_mark_used('sig-1', 'bar'))

        order = VanityOrder.objects.get()
        self.assertTrue(order.is_used)
        self.assertEqual(order.requested_word, 'foo')
        self.assertIsNotNone(order.used_at)

    def test_refuses_unpaid_order(self):
        self.store.insert_if_absent(make_entry(lamports=1, is_paid=False))

        self.assertFalse(self.store.try_mark_used('sig-1'))
        self.assertFalse(VanityOrder.objects.get().is_used)

    def test_unknown_order(self):
        self.assertFalse(self.store.try_mark_used('missing'))

    def test_database_rejects_used_without_paid(self):
        self.store.insert_if_absent(make_entry(lamports=1, is_paid=False))
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                VanityOrder.objects.filter(signature='sig-1').update(is_used=True)
