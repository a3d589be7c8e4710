"""Pipeline execution modules for TenderScout."""

from .runner import (
    run_matching_pipeline,
    run_user_matching,
    run_digest_pipeline,
    MatchingPipelineResult,
    DigestPipelineResult,
)

__all__ = [
    'run_matching_pipeline',
    'run_user_matching',
    'run_digest_pipeline',
    'MatchingPipelineResult',
    'DigestPipelineResult',
]
