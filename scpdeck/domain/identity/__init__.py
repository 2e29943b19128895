"""
Identity domain module
"""
from .models import IdentityContext, IdentitySource, ResolvedIdentity, KeyInfo
from .resolver import IdentityResolver
from .keys import inspect_identity

__all__ = [
    "IdentityContext",
    "IdentitySource",
    "ResolvedIdentity",
    "KeyInfo",
    "IdentityResolver",
    "inspect_identity",
]
