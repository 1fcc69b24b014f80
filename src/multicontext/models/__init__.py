"""Pydantic data models for multicontext."""

from multicontext.models.item import ContextChild, ContextMembership, Item, Rank, timestamp

__all__ = ["ContextChild", "ContextMembership", "Item", "Rank", "timestamp"]
