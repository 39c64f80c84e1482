"""Claim intake workflow."""

from .claim_workflow import ClaimProcessingResult, ClaimService

__all__ = [
    "ClaimProcessingResult",
    "ClaimService",
]
