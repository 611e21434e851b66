"""
Module 07 - Signature Routes

Recover the signer of an EIP-712 custody transfer.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_signing_domain
from api.errors import InvalidRequestError
from api.models.requests import TransferRecoverRequest
from api.models.responses import RecoverResponse
from core.crypto.signatures import SigningDomain, verify_transfer_signature
from core.schemas.errors import SignatureException


router = APIRouter(prefix="/signatures", tags=["signatures"])


@router.post("/transfer/recover", response_model=RecoverResponse)
async def recover_transfer_signer(
    request: TransferRecoverRequest,
    domain: SigningDomain = Depends(get_signing_domain),
) -> RecoverResponse:
    """Recover who signed Transfer(from, to, tokenId, timestamp)."""
    try:
        recovered = verify_transfer_signature(
            request.from_address,
            request.to,
            request.token_id,
            request.timestamp,
            request.signature,
            domain,
        )
    except SignatureException as e:
        raise InvalidRequestError(e.message, details=e.details, code=e.code) from e

    return RecoverResponse(
        recovered=recovered,
        matches_from=recovered.lower() == request.from_address.lower(),
    )
