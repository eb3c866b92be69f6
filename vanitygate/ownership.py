"""
Wallet ownership proofs.

A proof is an ed25519 signature made by a Solana wallet over an arbitrary
message (``signMessage`` in wallet adapters). Verification is pure: no I/O,
no state, deterministic.
"""
from typing import Union

import base58
from solders.pubkey import Pubkey
from solders.signature import Signature

from vanitygate.exceptions import MalformedIdentity, MalformedSignature, VerificationFailed

PUBKEY_LENGTH = 32
SIGNATURE_LENGTH = 64


def decode_identity(claimed_identity: Union[str, bytes]) -> Pubkey:
    """Decode a base58 wallet address into a public key."""
    try:
        raw = base58.b58decode(claimed_identity)
    except (ValueError, TypeError) as exc:
        raise MalformedIdentity('Public key is not valid base58.') from exc
    if len(raw) != PUBKEY_LENGTH:
        raise MalformedIdentity(
            f'Public key must be {PUBKEY_LENGTH} bytes, got {len(raw)}.')
    return Pubkey.from_bytes(raw)


def decode_signature(encoded: Union[str, bytes]) -> bytes:
    """Decode the base58 wire form of a signature."""
    try:
        raw = base58.b58decode(encoded)
    except (ValueError, TypeError) as exc:
        raise MalformedSignature('Signature is not valid base58.') from exc
    if len(raw) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f'Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}.')
    return raw


def verify_ownership(message: bytes, signature: bytes, claimed_identity: Union[str, bytes]) -> Pubkey:
    """
    Check that ``claimed_identity`` signed ``message``.

    Args:
        message: Signed bytes, used exactly as supplied.
        signature: Raw 64 byte ed25519 signature.
        claimed_identity: base58 wallet address.

    Returns:
        The verified public key.

    Raises:
        MalformedIdentity: address does not decode to a 32 byte key.
        MalformedSignature: signature is not 64 bytes.
        VerificationFailed: signature does not match message and key.
    """
    pubkey = decode_identity(claimed_identity)
    if not isinstance(signature, (bytes, bytearray)) or len(signature) != SIGNATURE_LENGTH:
        raise MalformedSignature(
            f'Signature must be {SIGNATURE_LENGTH} bytes.')
    if not isinstance(message, (bytes, bytearray)):
        raise VerificationFailed('Message must be bytes.')

    sig = Signature.from_bytes(bytes(signature))
    if not sig.verify(pubkey, bytes(message)):
        raise VerificationFailed('Signature does not match message and public key.')
    return pubkey
