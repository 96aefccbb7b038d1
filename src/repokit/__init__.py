"""Generic SQLAlchemy repository with specifications and pagination."""

from repokit.errors import ConversionError, RepositoryError, SpecificationError
from repokit.models import Base, Converter, EntityModel, ModelConverter
from repokit.pagination import OffsetMode, PageConfig, PageResult
from repokit.repository import GenericRepository
from repokit.specification import (
    ExpressionSpecification,
    FieldSpecification,
    RawSpecification,
    Specification,
    and_specifications,
    by_example,
    example_filters,
)
from repokit.utils import chunk_sequence, map_dto, map_sequence

__all__ = [
    "Base",
    "ConversionError",
    "Converter",
    "EntityModel",
    "ExpressionSpecification",
    "FieldSpecification",
    "GenericRepository",
    "ModelConverter",
    "OffsetMode",
    "PageConfig",
    "PageResult",
    "RawSpecification",
    "RepositoryError",
    "Specification",
    "SpecificationError",
    "and_specifications",
    "by_example",
    "chunk_sequence",
    "example_filters",
    "map_dto",
    "map_sequence",
]
