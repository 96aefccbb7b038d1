"""Tests for repokit.utils."""

import pytest

from repokit.errors import ConversionError
from repokit.utils import chunk_sequence, map_dto, map_sequence
from tests.sample_models import User, UserModel, UserSummary, UserSummaryConverter


class TestChunkSequence:
    @pytest.mark.parametrize("length", [1, 2, 5, 9, 10, 11])
    @pytest.mark.parametrize("size", [1, 3, 10])
    def test_partitions(self, length: int, size: int) -> None:
        items: list[int] = list(range(length))
        chunks: list[list[int]] = chunk_sequence(items, size)

        assert [x for chunk in chunks for x in chunk] == items
        assert all(len(chunk) <= size for chunk in chunks)
        assert all(len(chunk) == size for chunk in chunks[:-1])

    def test_empty(self) -> None:
        assert chunk_sequence([], 3) == []

    def test_works_on_tuples_and_strings(self) -> None:
        assert chunk_sequence((1, 2, 3), 2) == [[1, 2], [3]]
        assert chunk_sequence("abcde", 2) == [["a", "b"], ["c", "d"], ["e"]]

    @pytest.mark.parametrize("size", [0, -1])
    def test_size_must_be_positive(self, size: int) -> None:
        with pytest.raises(ValueError):
            chunk_sequence([1, 2], size)


class TestMapSequence:
    def test_maps_in_order(self) -> None:
        assert map_sequence([1, 2, 3], str) == ["1", "2", "3"]

    def test_empty(self) -> None:
        assert map_sequence([], str) == []


class TestMapDto:
    def test_uses_model_conversion(self) -> None:
        models: list[UserModel] = [UserModel(id=1, name="a", email="a@x", age=3, active=True)]
        assert map_dto(models, User) == [User(id=1, name="a", email="a@x", age=3, active=True)]

    def test_with_converter(self) -> None:
        models: list[UserModel] = [UserModel(name="a", email="a@x")]
        result: list[UserSummary] = map_dto(models, UserSummary, UserSummaryConverter())
        assert result == [UserSummary(name="a", email="a@x")]

    def test_type_mismatch_raises(self) -> None:
        models: list[UserModel] = [UserModel(id=1, name="a", email="a@x", age=3, active=True)]
        with pytest.raises(ConversionError):
            map_dto(models, UserSummary)

    def test_empty(self) -> None:
        assert map_dto([], User) == []
