"""
Module 07 - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "allowlist-proof-api"
    version: str = "v1"
    tree_loaded: bool = False


class RootResponse(BaseModel):
    """Response for GET /tree/root endpoint."""

    ok: bool = True
    root: str = Field(..., description="0x-hex Merkle root")
    format: str = Field(..., description="Dump format of the loaded tree")
    leaf_encoding: list[str] = Field(..., description="ABI types of each leaf field")
    leaf_count: int = Field(..., description="Number of stored values")


class ProofResponse(BaseModel):
    """Response for single-leaf proof endpoints."""

    ok: bool = True
    value: list[Any] = Field(..., description="The proven leaf value")
    index: int = Field(..., description="Position of the value in the allow-list")
    tree_index: int = Field(..., description="Index of the leaf node in the tree array")
    leaf: str = Field(..., description="0x-hex leaf hash")
    proof: list[str] = Field(..., description="0x-hex sibling digests, leaf level first")
    root: str = Field(..., description="0x-hex Merkle root")
    matches: list[int] = Field(
        default_factory=list,
        description="All indices holding the value, when it is stored more than once",
    )


class MultiProofResponse(BaseModel):
    """Response for POST /proof/multi endpoint."""

    ok: bool = True
    leaves: list[list[Any]] = Field(..., description="Leaves in verifier order")
    proof: list[str] = Field(...)
    proof_flags: list[bool] = Field(...)
    root: str = Field(...)


class VerifyResponse(BaseModel):
    """Response for POST /verify endpoint."""

    ok: bool = Field(..., description="Whether the proof reproduces the root")
    root: str = Field(..., description="Root the proof was checked against")


class RecoverResponse(BaseModel):
    """Response for POST /signatures/transfer/recover endpoint."""

    ok: bool = True
    recovered: str = Field(..., description="Checksummed address that signed the transfer")
    matches_from: bool = Field(..., description="Whether the signer is the claimed sender")


class ErrorDetail(BaseModel):
    """Error details."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail
