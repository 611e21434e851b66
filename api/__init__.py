"""
Module 07 - Proof API (FastAPI)

HTTP API for allow-list commitments:
- GET /tree/root - Published root
- GET /proof/{address} - Proof for the connected wallet address
- POST /proof, POST /proof/multi - Proofs by value, index or batch
- POST /verify - Verify a proof
- POST /signatures/transfer/recover - Recover a transfer signer
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
