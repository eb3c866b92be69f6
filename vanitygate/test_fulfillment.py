import unittest
from unittest.mock import Mock

import requests

from vanitygate.exceptions import (
    DispatchTimeout,
    DispatchTransportError,
    ResponseUnparseable,
    WorkerRejected,
)
from vanitygate.fulfillment import FulfillmentRequest, HttpFulfillmentWorker


class HttpFulfillmentWorkerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.session = Mock(spec=requests.Session)
        self.worker = HttpFulfillmentWorker(
            {'url': 'http://worker.test/generate', 'timeout_seconds': 12},
            session=self.session,
        )
        self.job = FulfillmentRequest(order_id='sig-1', payer='Payer111', word='foo')

    def _response(self, status_code=200, payload=None, json_error=None):
        response = Mock()
        response.status_code = status_code
        response.text = 'body'
        if json_error is not None:
            response.json.side_effect = json_error
        else:
            response.json.return_value = payload
        return response

    def test_posts_word_once_with_timeout(self):
        self.session.post.return_value = self._response(payload={'address': 'fooXyz', 'secret': '...'})

        result = self.worker.dispatch(self.job)

        self.session.post.assert_called_once_with(
            'http://worker.test/generate',
            json={'word': 'foo'},
            timeout=12.0,
        )
        self.assertEqual(result.payload, {'address': 'fooXyz', 'secret': '...'})
        self.assertEqual(result.status_code, 200)

    def test_timeout(self):
        self.session.post.side_effect = requests.Timeout('slow')
        with self.assertRaises(DispatchTimeout):
            self.worker.dispatch(self.job)
        self.assertEqual(self.session.post.call_count, 1)

    def test_transport_error(self):
        self.session.post.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(DispatchTransportError):
            self.worker.dispatch(self.job)
        self.assertEqual(self.session.post.call_count, 1)

    def test_worker_rejection(self):
        self.session.post.return_value = self._response(status_code=503)
        with self.assertRaises(WorkerRejected) as ctx:
            self.worker.dispatch(self.job)
        self.assertEqual(ctx.exception.status_code, 503)

    def test_unparseable_response(self):
        self.session.post.return_value = self._response(json_error=ValueError('Expecting value'))
        with self.assertRaises(ResponseUnparseable):
            self.worker.dispatch(self.job)

    def test_non_object_response(self):
        self.session.post.return_value = self._response(payload=['fooXyz'])
        with self.assertRaises(ResponseUnparseable):
            self.worker.dispatch(self.job)

    def test_missing_url(self):
        worker = HttpFulfillmentWorker({'url': ''}, session=self.session)
        with self.assertRaises(DispatchTransportError):
            worker.dispatch(self.job)
        self.session.post.assert_not_called()
