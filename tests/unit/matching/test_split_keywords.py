from __future__ import annotations

import pytest

from docdrift.matching import split_keywords


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("MinimumNArgs", ("minimum", "n", "args")),
        ("CalculateShipping", ("calculate", "shipping")),
        ("free_shipping_threshold", ("free", "shipping", "threshold")),
        ("parseURL", ("parse", "u", "r", "l")),
        ("_private__name", ("private", "name")),
        ("x", ("x",)),
        ("", ()),
    ],
)
def test_split_keywords(name: str, expected: tuple[str, ...]) -> None:
    assert split_keywords(name) == expected
