"""
Test Fixtures

Shared test data factories and mock responses.
"""

from .factories import (
    ChannelPolicyFactory,
    CommercialFactory,
    ContentItemFactory,
    ProgramFactory,
)

__all__ = [
    "ChannelPolicyFactory",
    "CommercialFactory",
    "ContentItemFactory",
    "ProgramFactory",
]
