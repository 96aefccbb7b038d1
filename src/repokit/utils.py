"""Generic sequence helpers."""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from repokit.errors import ConversionError
from repokit.models.conversion import Converter

T = TypeVar("T")
U = TypeVar("U")


def chunk_sequence(items: Sequence[T], size: int) -> list[list[T]]:
    """
    Split ``items`` into contiguous chunks of at most ``size`` elements.

    Order is preserved and only the last chunk may be shorter.
    An empty input gives an empty list.
    """
    if size <= 0:
        raise ValueError(f"chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def map_sequence(items: Sequence[T], fn: Callable[[T], U]) -> list[U]:
    return [fn(item) for item in items]


def map_dto(
    models: Sequence[Any],
    dto_type: type[T],
    converter: Converter[Any, Any] | None = None,
) -> list[T]:
    """
    Convert persistence models to DTOs of ``dto_type``.

    Each model goes through ``converter.to_entity`` when given, otherwise its
    own ``to_entity()``. A result that is not a ``dto_type`` raises
    ``ConversionError``.
    """
    def convert(model: Any) -> T:
        dto = converter.to_entity(model) if converter is not None else model.to_entity()
        if not isinstance(dto, dto_type):
            raise ConversionError(
                f"{type(model).__name__} converted to {type(dto).__name__}, "
                f"expected {dto_type.__name__}"
            )
        return dto

    return map_sequence(models, convert)
