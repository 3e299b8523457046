"""
Channel package - Channel models.

Contains implementations for:
- Deterministic single-shot loss channel
"""

from .lossy import LossSpec, LossToken, LossyChannel

__all__ = [
    'LossSpec',
    'LossToken',
    'LossyChannel'
]
