import pytest

from app.services.sanitizer import sanitize


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  Alice  ", "Alice"),
        ("<b>Alice</b>", "Alice"),
        ("<script>alert(1)</script>hi", "alert(1)hi"),
        ("<<b>script>x", "x"),
        ("a < b and c > d", "a < b and c > d"),
        ("I <3 you >:)", "I <3 you >:)"),
        ("if x < 3 and y > 5 then ok", "if x < 3 and y > 5 then ok"),
        ("<p>x</p> <3", "x <3"),
        ("2 < 3", "2 < 3"),
        ("<!-- note -->text", "text"),
    ],
)
def test_strips_markup_and_whitespace(raw, expected):
    assert sanitize(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "\n\t", "<p> </p>", None, 42])
def test_empty_or_odd_input_gives_empty_string(raw):
    assert sanitize(raw) == ""


@pytest.mark.parametrize(
    "raw",
    [
        "<<b>script>x",
        " <i> a </i> ",
        "x<y",
        "a < b > c",
        "I <3 you >:)",
        "<a href='x'>link</a>  ",
        "&lt;b&gt;",
    ],
)
def test_idempotent(raw):
    once = sanitize(raw)
    assert sanitize(once) == once
