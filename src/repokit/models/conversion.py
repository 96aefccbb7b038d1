"""Conversion capability between persistence models and domain entities.

A repository needs two operations per (model, entity) pair: model → entity
and entity → model. Models can carry them themselves (``EntityModel``), or a
separate ``Converter`` can be handed to the repository.
"""

from typing import Any, Generic, Protocol, TypeVar, runtime_checkable

from repokit.errors import ConversionError

M = TypeVar("M")
E = TypeVar("E")


@runtime_checkable
class EntityModel(Protocol[E]):
    """Model that knows how to convert itself to and from an entity."""

    def to_entity(self) -> E: ...

    @classmethod
    def from_entity(cls, entity: E) -> Any: ...


class Converter(Protocol[M, E]):
    """Converts between a persistence model and a domain entity. Must be pure."""

    def to_entity(self, model: M) -> E: ...

    def to_model(self, entity: E) -> M: ...


def supports_entity_conversion(model_cls: type) -> bool:
    """True if ``model_cls`` exposes ``to_entity`` and ``from_entity``."""
    return callable(getattr(model_cls, "to_entity", None)) and callable(
        getattr(model_cls, "from_entity", None)
    )


class ModelConverter(Generic[M, E]):
    """Converter delegating to the model's own ``to_entity`` / ``from_entity``."""

    def __init__(self, model_cls: type[M]):
        if not supports_entity_conversion(model_cls):
            raise TypeError(
                f"{model_cls.__name__} must define to_entity() and from_entity() "
                "or the repository needs an explicit converter"
            )
        self.model_cls = model_cls

    def to_entity(self, model: M) -> E:
        return model.to_entity()  # type: ignore[attr-defined]

    def to_model(self, entity: E) -> M:
        model = self.model_cls.from_entity(entity)  # type: ignore[attr-defined]
        if not isinstance(model, self.model_cls):
            raise ConversionError(
                f"{self.model_cls.__name__}.from_entity returned "
                f"{type(model).__name__}, expected {self.model_cls.__name__}"
            )
        return model
