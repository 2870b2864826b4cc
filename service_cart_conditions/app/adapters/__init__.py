"""
Adapters package for the Cart Conditions service.

Contains in-process implementations of the collaborator interfaces the
evaluator consumes (cart lookup, identity lookup, site provider). Hosts
with real storage supply their own adapters; these are used for embedding,
local runs and tests.
"""

from .memory import InMemoryCartStore, InMemoryIdentityDirectory, StaticSiteProvider

__all__ = [
    "InMemoryCartStore",
    "InMemoryIdentityDirectory",
    "StaticSiteProvider",
]
