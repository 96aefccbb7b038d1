"""Declarative base and model/entity conversion protocols."""

from repokit.models.base import Base
from repokit.models.conversion import (
    Converter,
    EntityModel,
    ModelConverter,
    supports_entity_conversion,
)

__all__ = [
    "Base",
    "Converter",
    "EntityModel",
    "ModelConverter",
    "supports_entity_conversion",
]
