"""Amiibo Forge - UID change and fresh tag generation."""
from .pipeline import ForgeReport, generate_fresh, mutate_existing

__all__ = ["ForgeReport", "generate_fresh", "mutate_existing"]
