"""
Request schemas validated at the HTTP boundary.
"""
from typing import Any, List, Optional

import base58
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

from vanitygate.exceptions import MalformedInput
from vanitygate.policy import MAX_LAMPORTS, MAX_WORD_LENGTH

BASE58_ALPHABET = base58.BITCOIN_ALPHABET.decode('ascii')


class NativeTransfer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    from_user_account: str = Field(alias='fromUserAccount', min_length=1)
    to_user_account: str = Field(alias='toUserAccount', min_length=1)
    amount: int = Field(ge=0, le=MAX_LAMPORTS)


class HeliusTransaction(BaseModel):
    """One enhanced transaction from a Helius webhook."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    signature: str = Field(min_length=1)
    timestamp: Optional[int] = None
    native_transfers: Optional[List[NativeTransfer]] = Field(default=None, alias='nativeTransfers')

    @model_validator(mode='before')
    @classmethod
    def _lift_nested_signature(cls, data: Any) -> Any:
        # Older payloads carry the signature as transaction.signature.
        if isinstance(data, dict) and not data.get('signature'):
            nested = data.get('transaction')
            if isinstance(nested, dict) and nested.get('signature'):
                data = {**data, 'signature': nested['signature']}
        return data


class ClaimRequest(BaseModel):
    """Ownership proof plus the word the caller wants generated."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    message: str = Field(min_length=1)
    signature: str = Field(min_length=1)
    public_key: str = Field(alias='publicKey', min_length=1)
    word: str = Field(min_length=1, max_length=MAX_WORD_LENGTH)

    @field_validator('word')
    @classmethod
    def _check_word(cls, value: str, info: ValidationInfo) -> str:
        invalid = sorted({char for char in value if char not in BASE58_ALPHABET})
        if invalid:
            raise ValueError(f"characters not allowed in a Solana address: {''.join(invalid)}")
        max_length = (info.context or {}).get('max_word_length')
        if max_length and len(value) > max_length:
            raise ValueError(f'must be at most {max_length} characters')
        return value

    @property
    def message_bytes(self) -> bytes:
        return self.message.encode('utf-8')


def parse_claim(request_data: Any, max_word_length: Optional[int] = None) -> ClaimRequest:
    """Validate a claim body, collapsing every schema problem into MalformedInput."""
    if not isinstance(request_data, dict):
        raise MalformedInput('Request body must be a JSON object.')
    try:
        return ClaimRequest.model_validate(
            request_data,
            context={'max_word_length': max_word_length},
        )
    except ValidationError as exc:
        logger.debug('claim validation failed: {}', exc)
        fields = ', '.join(
            '.'.join(str(part) for part in error['loc']) or 'body'
            for error in exc.errors()
        )
        raise MalformedInput(f'Invalid claim request: {fields}') from exc
