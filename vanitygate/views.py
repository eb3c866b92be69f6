"""
HTTP surface of the vanity gate: payment webhook, claim and policy.
"""
import hmac

from loguru import logger
from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.response import Response
from rest_framework.views import APIView

from vanitygate.authorizer import OwnershipProof
from vanitygate.context import get_context
from vanitygate.exceptions import MalformedInput, VanityGateError
from vanitygate.ownership import decode_signature
from vanitygate.schemas import parse_claim


def _error_response(exc: VanityGateError, **extra) -> Response:
    body = {
        'success': False,
        'status': exc.code,
        'errorReason': exc.message,
    }
    body.update(extra)
    return Response(body, status=exc.http_status)


def _request_data(request):
    try:
        return request.data
    except ParseError as exc:
        raise MalformedInput(f'Request body is not valid JSON: {exc.detail}') from exc


class HeliusWebhookView(APIView):
    """
    Receive Helius enhanced-transaction notifications.

    Every native transfer becomes a payment record and an order, at most once
    per transaction signature.
    """
    authentication_classes: list = []
    permission_classes: list = []

    def _authenticated(self, request, expected: str) -> bool:
        if not expected:
            return True
        provided = request.headers.get('Authorization', '')
        return hmac.compare_digest(provided.encode(), expected.encode())

    def post(self, request, *args, **kwargs):
        context = get_context()
        if not self._authenticated(request, context.webhook_auth_header):
            logger.warning('helius webhook rejected: bad authorization header')
            return Response(
                {'success': False, 'message': 'Unauthorized'},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        try:
            report = context.ingestor.ingest_helius(_request_data(request))
        except VanityGateError as exc:
            logger.info('helius webhook rejected: {}', exc.message)
            return Response(
                {'success': False, 'message': exc.message},
                status=exc.http_status,
            )

        logger.debug('helius webhook processed: {}', report.as_dict())
        return Response(
            {
                'success': True,
                'message': 'Webhook processed successfully',
                **report.as_dict(),
            },
            status=status.HTTP_200_OK,
        )


class ClaimView(APIView):
    """
    Redeem a paid order with a wallet ownership proof.

    Body: {"message", "signature" (base58), "publicKey" (base58), "word"}
    """
    authentication_classes: list = []
    permission_classes: list = []

    def post(self, request, *args, **kwargs):
        context = get_context()
        try:
            claim = parse_claim(_request_data(request), context.policy.max_word_length)
            proof = OwnershipProof(
                message=claim.message_bytes,
                signature=decode_signature(claim.signature),
                public_key=claim.public_key,
            )
            result = context.authorizer.authorize(proof, claim.word)
        except VanityGateError as exc:
            logger.info('claim rejected ({}): {}', exc.code, exc.message)
            return _error_response(exc)
        except Exception as exc:
            logger.error('claim error: {}', exc)
            import traceback
            logger.error(traceback.format_exc())
            return Response(
                {
                    'success': False,
                    'status': 'error',
                    'errorReason': 'Internal error.',
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        if result.dispatch_error is not None:
            return _error_response(
                result.dispatch_error,
                status='fulfillment_failed',
                errorCode=result.dispatch_error.code,
                orderId=result.order_id,
                payer=result.payer,
            )

        return Response(
            {
                'success': True,
                'status': 'authorized',
                'errorReason': None,
                'orderId': result.order_id,
                'payer': result.payer,
                'word': result.word,
                'result': result.fulfillment.payload,
            },
            status=status.HTTP_200_OK,
        )


class PolicyView(APIView):
    """Payment terms a client needs before paying."""

    authentication_classes: list = []
    permission_classes: list = []

    def get(self, request, *args, **kwargs):  # noqa: ANN001
        policy = get_context().policy
        return Response(
            {
                'minPaymentLamports': policy.min_payment_lamports,
                'minPaymentSol': str(policy.min_payment_sol),
                'treasury': policy.treasury_address,
                'maxWordLength': policy.max_word_length,
            },
            status=status.HTTP_200_OK,
        )
