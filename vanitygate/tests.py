import json
from unittest.mock import Mock, patch

import base58
from django.test import TestCase
from django.urls import reverse
from solders.keypair import Keypair

from vanitygate.context import GateContext, get_context
from vanitygate.exceptions import WorkerRejected
from vanitygate.fulfillment import FulfillmentRequest, FulfillmentResult, FulfillmentWorker, HttpFulfillmentWorker
from vanitygate.ledger import LedgerStore
from vanitygate.models import PaymentRecord, VanityOrder
from vanitygate.policy import PaymentPolicy

TREASURY = 'Treasury11111111111111111111111111111111111'


class VanityGateViewTests(TestCase):
    def setUp(self) -> None:
        self.keypair = Keypair()
        self.payer = str(self.keypair.pubkey())
        self.worker = Mock(spec=FulfillmentWorker)
        self.worker.dispatch.return_value = FulfillmentResult(
            payload={'address': 'fooK3y', 'word': 'foo'},
            status_code=200,
        )
        self.context = GateContext(
            store=LedgerStore(),
            worker=self.worker,
            policy=PaymentPolicy(min_payment_lamports=100_000_000, max_word_length=6),
        )
        patcher = patch('vanitygate.views.get_context', return_value=self.context)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _post(self, name, body, **headers):
        return self.client.post(
            reverse(f'vanitygate:{name}'),
            data=json.dumps(body),
            content_type='application/json',
            **headers,
        )

    def _notify(self, signature='S1', lamports=100_000_000, payer=None):
        return self._post('helius-webhook', [{
            'signature': signature,
            'timestamp': 1714521600,
            'nativeTransfers': [{
                'fromUserAccount': payer or self.payer,
                'toUserAccount': TREASURY,
                'amount': lamports,
            }],
        }])

    def _claim_body(self, word='foo', message='I own this wallet', keypair=None):
        keypair = keypair or self.keypair
        signature = keypair.sign_message(message.encode('utf-8'))
        return {
            'message': message,
            'signature': base58.b58encode(bytes(signature)).decode(),
            'publicKey': str(keypair.pubkey()),
            'word': word,
        }

    def test_end_to_end_claim(self):
        response = self._notify()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['recorded'], 1)
        order = VanityOrder.objects.get(signature='S1')
        self.assertTrue(order.is_paid)
        self.assertFalse(order.is_used)

        response = self._post('claim', self._claim_body())

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertEqual(body['status'], 'authorized')
        self.assertEqual(body['orderId'], 'S1')
        self.assertEqual(body['result'], {'address': 'fooK3y', 'word': 'foo'})
        self.worker.dispatch.assert_called_once()
        job = self.worker.dispatch.call_args.args[0]
        self.assertEqual(job.to_payload(), {'word': 'foo'})
        self.assertTrue(VanityOrder.objects.get(signature='S1').is_used)

        again = self._post('claim', self._claim_body())

        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()['status'], 'already_consumed')
        self.assertEqual(self.worker.dispatch.call_count, 1)

    def test_webhook_redelivery_is_idempotent(self):
        for _ in range(3):
            response = self._notify()
            self.assertEqual(response.status_code, 200)

        self.assertEqual(response.json()['duplicates'], 1)
        self.assertEqual(PaymentRecord.objects.count(), 1)
        self.assertEqual(VanityOrder.objects.count(), 1)

    def test_invalid_json_is_malformed_input(self):
        for name in ('claim', 'helius-webhook'):
            response = self.client.post(
                reverse(f'vanitygate:{name}'),
                data='{not json',
                content_type='application/json',
            )
            self.assertEqual(response.status_code, 400, name)
            self.assertFalse(response.json()['success'])

        response = self.client.post(
            reverse('vanitygate:claim'),
            data='{not json',
            content_type='application/json',
        )
        self.assertEqual(response.json()['status'], 'malformed_input')
        self.worker.dispatch.assert_not_called()

    def test_webhook_skips_out_of_range_amount(self):
        response = self._post('helius-webhook', [
            {
                'signature': 'S-huge',
                'nativeTransfers': [{
                    'fromUserAccount': self.payer,
                    'toUserAccount': TREASURY,
                    'amount': 2 ** 64 - 1,
                }],
            },
            {
                'signature': 'S-ok',
                'nativeTransfers': [{
                    'fromUserAccount': self.payer,
                    'toUserAccount': TREASURY,
                    'amount': 100_000_000,
                }],
            },
        ])

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['recorded'], 1)
        self.assertEqual(response.json()['skipped'], 1)
        self.assertEqual(list(PaymentRecord.objects.values_list('signature', flat=True)), ['S-ok'])

    def test_webhook_rejects_non_batch_body(self):
        response = self._post('helius-webhook', 'nope')
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.json()['success'])

    def test_webhook_auth_header(self):
        context = GateContext(
            store=self.context.store,
            worker=self.worker,
            policy=self.context.policy,
            webhook_auth_header='Bearer s3cret',
        )
        with patch('vanitygate.views.get_context', return_value=context):
            denied = self._notify()
            allowed = self._post(
                'helius-webhook',
                [],
                HTTP_AUTHORIZATION='Bearer s3cret',
            )

        self.assertEqual(denied.status_code, 401)
        self.assertEqual(PaymentRecord.objects.count(), 0)
        self.assertEqual(allowed.status_code, 200)

    def test_claim_for_unpaid_order(self):
        self._notify(lamports=99_999_999)

        response = self._post('claim', self._claim_body())

        self.assertEqual(response.status_code, 402)
        self.assertEqual(response.json()['status'], 'payment_not_confirmed')
        self.assertFalse(VanityOrder.objects.get().is_used)
        self.worker.dispatch.assert_not_called()

    def test_claim_without_payment(self):
        response = self._post('claim', self._claim_body())

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['status'], 'order_not_found')

    def test_claim_with_forged_signature(self):
        self._notify()
        body = self._claim_body()
        body['signature'] = self._claim_body(keypair=Keypair())['signature']

        response = self._post('claim', body)

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['status'], 'unauthorized')
        self.assertFalse(VanityOrder.objects.get().is_used)
        self.worker.dispatch.assert_not_called()

    def test_claim_with_malformed_body(self):
        for body in (
            {'message': 'hi', 'signature': 'abc', 'word': 'foo'},
            {**self._claim_body(), 'publicKey': 'not-base58!'},
            {**self._claim_body(), 'signature': base58.b58encode(b'\x01' * 10).decode()},
            {**self._claim_body(), 'word': 'f0O'},
            {**self._claim_body(), 'word': 'toolongword'},
            ['not', 'an', 'object'],
        ):
            response = self._post('claim', body)
            self.assertEqual(response.status_code, 400, body)
            self.assertEqual(response.json()['status'], 'malformed_input')

        self.worker.dispatch.assert_not_called()

    def test_claim_when_worker_fails(self):
        self._notify()
        self.worker.dispatch.side_effect = WorkerRejected('boom', status_code=500)

        response = self._post('claim', self._claim_body())

        self.assertEqual(response.status_code, 502)
        body = response.json()
        self.assertEqual(body['status'], 'fulfillment_failed')
        self.assertEqual(body['errorCode'], 'worker_rejected')
        self.assertEqual(body['orderId'], 'S1')
        self.assertTrue(VanityOrder.objects.get().is_used)

    def test_policy(self):
        response = self.client.get(reverse('vanitygate:policy'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'minPaymentLamports': 100_000_000,
            'minPaymentSol': '0.1',
            'treasury': None,
            'maxWordLength': 6,
        })


class ContextTests(TestCase):
    def test_built_once_at_startup(self):
        context = get_context()

        self.assertIs(context, get_context())
        self.assertIsInstance(context.store, LedgerStore)
        self.assertIsInstance(context.worker, HttpFulfillmentWorker)
        self.assertEqual(context.worker.url, 'http://worker.test/generate')
        self.assertEqual(context.policy.min_payment_lamports, 100_000_000)

    def test_job_payload_is_the_word(self):
        job = FulfillmentRequest(order_id='S1', payer='P', word='foo')
        self.assertEqual(job.to_payload(), {'word': 'foo'})


class HealthTests(TestCase):
    def test_health(self):
        response = self.client.get(reverse('health'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'ok'})
