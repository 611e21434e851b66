"""
Module 07 - Verify Route

Check a proof for a leaf value against a root.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_proof_service
from api.models.requests import VerifyRequest
from api.models.responses import VerifyResponse
from core.merkle.merkle_proofs import ProofService


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


@router.post("/verify", response_model=VerifyResponse)
async def verify(
    request: VerifyRequest,
    service: ProofService = Depends(get_proof_service),
) -> VerifyResponse:
    """
    Recompute the root from the leaf and proof.

    The loaded tree supplies the leaf encoding, and the root when the
    request does not give one. A malformed proof is reported as ok=false.
    """
    root = request.root or service.root
    ok = service.verify(root, request.value, request.proof)
    logger.debug(f"Verify against {root}: {ok}")
    return VerifyResponse(ok=ok, root=root)
