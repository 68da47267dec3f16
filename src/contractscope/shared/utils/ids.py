"""Identifier helpers."""

from uuid import uuid4


def generate_id(prefix: str) -> str:
    """
    Generate a unique, prefixed identifier.

    Examples:
        >>> generate_id("ct")  # doctest: +SKIP
        'ct_3f2a9c0e5b7d4e1f'
    """
    return f"{prefix}_{uuid4().hex[:16]}"
