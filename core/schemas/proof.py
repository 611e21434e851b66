"""
Module 01 - Schemas & Errors
File: proof.py

Purpose: Proof payloads handed to callers and external verifiers,
and the result wrapper used to return proofs or errors as values.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .errors import AllowlistError, ErrorCodes


class LeafProof(BaseModel):
    """Inclusion proof for a single stored value."""

    model_config = ConfigDict(extra="forbid")

    value: list[Any] = Field(..., description="The proven leaf value")
    index: int = Field(..., ge=0, description="Position of the value in the stored sequence")
    tree_index: int = Field(..., ge=0, description="Index of the leaf node in the tree array")
    leaf: str = Field(..., description="0x-hex leaf hash")
    proof: list[str] = Field(
        default_factory=list,
        description="0x-hex sibling digests, leaf level first",
    )
    root: str = Field(..., description="0x-hex root the proof is against")


class MultiProofPayload(BaseModel):
    """Multiproof in the shape MerkleProof.multiProofVerify expects."""

    model_config = ConfigDict(extra="forbid")

    leaves: list[list[Any]] = Field(
        default_factory=list,
        description="Leaf values in the order the verifier consumes them",
    )
    proof: list[str] = Field(default_factory=list)
    proof_flags: list[bool] = Field(default_factory=list)
    root: str = Field(...)


T = TypeVar("T")


@dataclass
class OperationResult(Generic[T]):
    """
    Standardized result of a builder or proof-service operation.

    Exactly one of ``output`` and ``error`` is set. Validation and lookup
    failures travel as values so callers decide whether they are fatal.
    """
    output: Optional[T] = None

    error: Optional[AllowlistError] = None

    # Additional metadata (e.g. all indices matching a duplicated value)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        return self.error is not None and self.error.code == ErrorCodes.LEAF_NOT_FOUND

    @property
    def out_of_range(self) -> bool:
        return self.error is not None and self.error.code == ErrorCodes.INDEX_OUT_OF_RANGE

    @classmethod
    def success(cls, output: T, **metadata: Any) -> "OperationResult[T]":
        """Create a successful result."""
        return cls(output=output, metadata=metadata)

    @classmethod
    def failure(cls, error: AllowlistError, **metadata: Any) -> "OperationResult[T]":
        """Create a failure result."""
        return cls(error=error, metadata=metadata)

    def unwrap(self) -> T:
        """Return the output, raising the carried error as an exception."""
        if self.error is not None:
            raise self.error.to_exception()
        return self.output
