"""Tests for the Result type."""

import pytest

from withdefer import Err, Ok, Result


class TestUnpacking:
    @pytest.mark.parametrize("value", [42, None, 0, False, "", [], {"a": 1}, (1, 2)])
    def test_ok_unpacks_to_value_and_none(self, value: object) -> None:
        result: Result[object] = Ok(value)

        got, error = result

        assert got == value
        assert error is None

    def test_err_unpacks_to_none_and_error(self) -> None:
        boom = ValueError("boom")

        value, error = Err(boom)

        assert value is None
        assert error is boom

    def test_none_value_is_still_ok(self) -> None:
        result: Result[None] = Ok(None)

        assert result.is_ok()
        assert not result.is_err()
        assert result.err() is None


class TestAccessors:
    def test_unwrap_returns_the_value(self) -> None:
        value = object()
        assert Ok(value).unwrap() is value

    def test_unwrap_raises_the_error(self) -> None:
        boom = ValueError("boom")
        with pytest.raises(ValueError) as info:
            Err(boom).unwrap()
        assert info.value is boom

    def test_slots(self) -> None:
        boom = ValueError("boom")
        assert Ok(1).ok() == 1
        assert Ok(1).err() is None
        assert Err(boom).ok() is None
        assert Err(boom).err() is boom
        assert Err(boom).is_err()

    def test_truthiness_matches_is_ok(self) -> None:
        assert Ok(None)
        assert not Err(ValueError())
