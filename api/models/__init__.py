"""API request and response models."""

from api.models.requests import (
    ProofRequest,
    MultiProofRequest,
    VerifyRequest,
    TransferRecoverRequest,
)
from api.models.responses import (
    HealthResponse,
    RootResponse,
    ProofResponse,
    MultiProofResponse,
    VerifyResponse,
    RecoverResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "ProofRequest",
    "MultiProofRequest",
    "VerifyRequest",
    "TransferRecoverRequest",
    "HealthResponse",
    "RootResponse",
    "ProofResponse",
    "MultiProofResponse",
    "VerifyResponse",
    "RecoverResponse",
    "ErrorDetail",
    "ErrorResponse",
]
