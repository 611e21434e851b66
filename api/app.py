"""
Module 07 - FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.deps import load_runtime_config
from api.routes import health, proofs, verify, signatures
from api.errors import (
    APIError,
    api_error_handler,
    generic_error_handler,
    request_validation_error_handler,
)
from core.config.runtime import RuntimeConfig
from core.merkle.merkle_proofs import ProofService


logging.basicConfig(
    level=getattr(logging, os.getenv("ALLOWLIST_LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(
    proof_service: Optional[ProofService] = None,
    config: Optional[RuntimeConfig] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        proof_service: Service to answer proof queries; when omitted the
            tree dump at ``storage.tree_path`` is loaded on first request
        config: Runtime config; loaded from file and environment when omitted
    """
    config = config or load_runtime_config()

    app = FastAPI(
        title="Allow-list Proof API",
        description="""
HTTP API for allow-list Merkle commitments.

## Endpoints

- **GET /tree/root** - Root, format and size of the loaded tree
- **GET /proof/{address}** - Proof for an allow-listed address
- **POST /proof** - Proof for a leaf value or index
- **POST /proof/multi** - Multiproof for several leaf values
- **POST /verify** - Check a proof against a root
- **POST /signatures/transfer/recover** - Recover an EIP-712 transfer signer
- **GET /health** - Health check
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.config = config
    app.state.proof_service = proof_service

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(proofs.router)
    app.include_router(verify.router)
    app.include_router(signatures.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.config.api.host, port=app.state.config.api.port)
