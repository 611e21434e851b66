"""
Module 07 - API Request Models

Pydantic models for API request validation.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProofRequest(BaseModel):
    """Request body for POST /proof endpoint. Give exactly one of value or index."""

    value: Optional[list[Any]] = Field(
        default=None,
        min_length=1,
        description="Leaf field values, e.g. [\"0x70997970C51812dc3A010C7d01b50e0d17dc79C8\"]",
    )
    index: Optional[int] = Field(
        default=None,
        description="Position of the value in the original allow-list",
    )

    @model_validator(mode="after")
    def _exactly_one_selector(self) -> "ProofRequest":
        if (self.value is None) == (self.index is None):
            raise ValueError("provide exactly one of 'value' or 'index'")
        return self


class MultiProofRequest(BaseModel):
    """Request body for POST /proof/multi endpoint."""

    values: list[list[Any]] = Field(
        ...,
        min_length=1,
        description="Leaves to prove together",
    )


class VerifyRequest(BaseModel):
    """Request body for POST /verify endpoint."""

    value: list[Any] = Field(..., min_length=1, description="Leaf field values")
    proof: list[str] = Field(..., description="0x-hex sibling digests, leaf level first")
    root: Optional[str] = Field(
        default=None,
        description="Root to check against (default: root of the loaded tree)",
    )


class TransferRecoverRequest(BaseModel):
    """Request body for POST /signatures/transfer/recover endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(..., alias="from", description="Claimed sender")
    to: str = Field(..., description="Recipient")
    token_id: int = Field(..., alias="tokenId", ge=0)
    timestamp: int = Field(..., ge=0, description="UNIX timestamp in the signed message")
    signature: str = Field(..., description="0x-hex 65-byte signature")
