"""Property-based tests for size formatting invariants using Hypothesis.

These tests verify universal properties that should hold for all inputs,
catching edge cases that example-based tests might miss.
"""

from __future__ import annotations

import re

from hypothesis import given, strategies as st

from folder_size.utils.formatting import SIZE_UNITS, format_bytes

_FORMATTED = re.compile(r"^(\d+(?:\.\d+)?) (\w+)$")


class TestFormatBytesInvariants:
    """Property-based tests for byte formatting."""

    @given(st.integers(min_value=1, max_value=1024**9))
    def test_output_shape(self, bytes_value: int) -> None:
        """Property: output is a number, a space and a known unit."""
        match = _FORMATTED.match(format_bytes(bytes_value))

        assert match is not None
        assert match.group(2) in SIZE_UNITS

    @given(st.integers(min_value=1, max_value=1024**8), st.integers(min_value=0, max_value=6))
    def test_no_trailing_zeros(self, bytes_value: int, decimals: int) -> None:
        """Property: the numeric part never ends with a fractional zero or a bare dot."""
        number = format_bytes(bytes_value, decimals).split(" ")[0]

        if "." in number:
            assert not number.endswith("0")
        assert not number.endswith(".")

    @given(st.integers(min_value=1, max_value=1024**8 - 1))
    def test_value_close_to_input(self, bytes_value: int) -> None:
        """Property: the displayed value times its unit is within rounding of the input."""
        number, unit = format_bytes(bytes_value, 2).split(" ")
        scale = 1024 ** SIZE_UNITS.index(unit)

        assert abs(float(number) * scale - bytes_value) <= 0.005 * scale + 1e-9 * bytes_value

    @given(st.integers(min_value=0, max_value=1024**9), st.integers(min_value=0, max_value=6))
    def test_idempotent(self, bytes_value: int, decimals: int) -> None:
        """Property: same input always produces same output."""
        assert format_bytes(bytes_value, decimals) == format_bytes(bytes_value, decimals)
