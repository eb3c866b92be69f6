"""
Errors raised by the vanity gate.

Every error carries a stable ``code`` and the HTTP status the views answer
with, so rejections reach the caller as structured results.
"""
from typing import Optional


class VanityGateError(Exception):
    """Base error for the vanity gate."""

    code = 'error'
    http_status = 500

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or self.code


class MalformedInput(VanityGateError):
    """Request body has the wrong shape or encoding."""

    code = 'malformed_input'
    http_status = 400


class VerificationError(VanityGateError):
    """Ownership proof was rejected."""

    code = 'unauthorized'
    http_status = 401


class MalformedIdentity(VerificationError):
    """Public key is not a base58-encoded 32 byte ed25519 key."""

    code = 'malformed_input'
    http_status = 400


class MalformedSignature(VerificationError):
    """Signature is not a 64 byte ed25519 signature."""

    code = 'malformed_input'
    http_status = 400


class VerificationFailed(VerificationError):
    """Signature does not match the message and public key."""


class OrderNotFound(VanityGateError):
    """No order exists for this wallet."""

    code = 'order_not_found'
    http_status = 404


class PaymentNotConfirmed(VanityGateError):
    """Payment for this order is below the minimum amount."""

    code = 'payment_not_confirmed'
    http_status = 402


class AlreadyConsumed(VanityGateError):
    """Order was already fulfilled."""

    code = 'already_consumed'
    http_status = 409


class StorageFailure(VanityGateError):
    """Ledger store is unavailable."""

    code = 'storage_failure'
    http_status = 500


class DispatchError(VanityGateError):
    """Fulfillment worker call failed."""

    code = 'dispatch_failed'
    http_status = 502


class DispatchTimeout(DispatchError):
    """Fulfillment worker did not answer in time."""

    code = 'timeout'


class DispatchTransportError(DispatchError):
    """Fulfillment worker could not be reached."""

    code = 'transport'


class WorkerRejected(DispatchError):
    """Fulfillment worker answered with an error status."""

    code = 'worker_rejected'

    def __init__(self, message: str = '', status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseUnparseable(DispatchError):
    """Fulfillment worker answer is not a JSON object."""

    code = 'response_unparseable'
