"""Security utilities for the screenshot service."""

from .bearer import bearer_scheme, caller_token, token_matches

__all__ = [
    "bearer_scheme",
    "caller_token",
    "token_matches",
]
