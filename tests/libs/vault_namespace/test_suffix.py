"""Tests for random suffix generation."""

import pytest

from libs.vault_namespace.suffix import generate_random_suffix, is_valid_suffix


class TestGenerateRandomSuffix:
    @pytest.mark.unit()
    def test_default_length_and_charset(self) -> None:
        suffix = generate_random_suffix()

        assert len(suffix) == 8
        assert is_valid_suffix(suffix)

    @pytest.mark.unit()
    def test_custom_length(self) -> None:
        assert len(generate_random_suffix(byte_length=2)) == 4

    @pytest.mark.unit()
    def test_values_differ(self) -> None:
        assert len({generate_random_suffix() for _ in range(20)}) == 20

    @pytest.mark.unit()
    def test_non_positive_length_rejected(self) -> None:
        with pytest.raises(ValueError):
            generate_random_suffix(byte_length=0)


class TestIsValidSuffix:
    @pytest.mark.unit()
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("a1b2c3d4", True),
            ("0f", True),
            ("", False),
            ("A1B2C3D4", False),
            ("a1b2-c3", False),
            ("xyz", False),
        ],
    )
    def test_lowercase_hex_only(self, value: str, expected: bool) -> None:
        assert is_valid_suffix(value) is expected
