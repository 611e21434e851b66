"""
Module 07 - Proof Routes

Serve the published root and inclusion proofs from the loaded tree.
The wallet front end calls GET /proof/{address} for the connected account.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import get_proof_service
from api.errors import InvalidRequestError, from_allowlist_error
from api.models.requests import MultiProofRequest, ProofRequest
from api.models.responses import MultiProofResponse, ProofResponse, RootResponse
from core.merkle.merkle_proofs import ProofService
from core.schemas.proof import LeafProof, OperationResult
from core.schemas.versioning import DUMP_FORMAT


logger = logging.getLogger(__name__)

router = APIRouter(tags=["proofs"])


def _proof_response(result: OperationResult[LeafProof]) -> ProofResponse:
    if not result.ok:
        raise from_allowlist_error(result.error)
    proof = result.output
    matches = result.metadata.get("matches", [])
    return ProofResponse(
        value=proof.value,
        index=proof.index,
        tree_index=proof.tree_index,
        leaf=proof.leaf,
        proof=proof.proof,
        root=proof.root,
        matches=matches if len(matches) > 1 else [],
    )


@router.get("/tree/root", response_model=RootResponse)
async def tree_root(service: ProofService = Depends(get_proof_service)) -> RootResponse:
    """Root, format and size of the loaded tree."""
    tree = service.tree
    return RootResponse(
        root=tree.root,
        format=DUMP_FORMAT,
        leaf_encoding=tree.leaf_encoding,
        leaf_count=len(tree),
    )


@router.get("/proof/{address}", response_model=ProofResponse)
async def proof_for_address(
    address: str,
    service: ProofService = Depends(get_proof_service),
) -> ProofResponse:
    """
    Proof for an address in a single-field address allow-list.

    Returns 404 when the address is not allow-listed.
    """
    if service.tree.leaf_encoding != ["address"]:
        raise InvalidRequestError(
            "Address lookup needs a tree with leaf encoding ['address']",
            details={"leaf_encoding": service.tree.leaf_encoding},
        )
    logger.debug(f"Proof requested for {address}")
    return _proof_response(service.prove_value([address]))


@router.post("/proof", response_model=ProofResponse)
async def proof(
    request: ProofRequest,
    service: ProofService = Depends(get_proof_service),
) -> ProofResponse:
    """Proof for a leaf value or for the value at an allow-list index."""
    if request.index is not None:
        return _proof_response(service.prove_index(request.index))
    return _proof_response(service.prove_value(request.value))


@router.post("/proof/multi", response_model=MultiProofResponse)
async def multi_proof(
    request: MultiProofRequest,
    service: ProofService = Depends(get_proof_service),
) -> MultiProofResponse:
    """One multiproof covering several leaf values."""
    result = service.prove_values(request.values)
    if not result.ok:
        raise from_allowlist_error(result.error)
    payload = result.output
    return MultiProofResponse(
        leaves=payload.leaves,
        proof=payload.proof,
        proof_flags=payload.proof_flags,
        root=payload.root,
    )
