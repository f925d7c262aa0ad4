"""Tests for name sanitizing and series-guess cleaning."""

import pytest

from anirenamer.cleaner import (
    RESERVED_CHARS,
    clean_series_guess,
    sanitize_name,
    strip_reserved,
)
from anirenamer.models import UNKNOWN_SERIES


def test_whitespace_becomes_dots():
    assert sanitize_name("The Journey Begins") == "The.Journey.Begins"


def test_reserved_characters_removed():
    assert sanitize_name('a<b>c"d*e?') == "abcde"
    assert sanitize_name("A/B") == "A-B"
    assert sanitize_name("Why, though") == "Why.though"


def test_edges_and_runs_collapse():
    assert sanitize_name("  ..Hello  World.. ") == "Hello.World"
    assert sanitize_name("--A---B--") == "A-B"


def test_empty_input():
    assert sanitize_name("") == ""


@pytest.mark.parametrize(
    "raw",
    [
        "Re:Zero - Starting Life in Another World",
        "Fate/stay night: Unlimited Blade Works",
        "What?! <The> \"End\" | Part 2",
        " . - . ",
        "Already.Clean.Name",
    ],
)
def test_sanitize_is_idempotent_and_safe(raw):
    once = sanitize_name(raw)
    assert sanitize_name(once) == once
    assert not any(c in RESERVED_CHARS for c in once)
    assert not once.startswith((".", "-"))
    assert not once.endswith((".", "-"))


def test_strip_reserved_keeps_spaces():
    assert strip_reserved("Season: 01 ") == "Season 01"


def test_clean_series_guess():
    assert clean_series_guess("[Group] My_Show.Name -") == "My Show Name"
    assert clean_series_guess("Show (2019) 【Raw】") == "Show"


def test_clean_series_guess_empty():
    assert clean_series_guess("") == UNKNOWN_SERIES
    assert clean_series_guess(None) == UNKNOWN_SERIES
    assert clean_series_guess("[Only Tags]") == UNKNOWN_SERIES
