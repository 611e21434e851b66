"""API route handlers."""

from api.routes import health, proofs, verify, signatures

__all__ = ["health", "proofs", "verify", "signatures"]
