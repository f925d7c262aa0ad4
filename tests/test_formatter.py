"""Tests for file and folder name formatting."""

import pytest

from anirenamer.formatter import (
    NamingTemplates,
    format_episode_name,
    format_folder_name,
    insert_version,
    render_template,
    split_version,
    version_of,
    version_suffix,
)


def test_regular_episode():
    assert format_episode_name("Show", 1, 1, "Alpha", ".mkv") == "Show.S01E01.Alpha.mkv"


def test_special_episode_uses_special_template():
    assert format_episode_name("Show", 0, 3, "Recap", ".mkv") == "Show.S00E03.Recap.mkv"


def test_titles_are_sanitized():
    name = format_episode_name("Re:Zero", 2, 10, "Who Are You?", ".mkv")
    assert name == "Re-Zero.S02E10.Who.Are.You.mkv"


def test_version_goes_after_episode_code():
    name = format_episode_name("Show", 1, 1, "Alpha", ".mkv", version_suffix=".v2")
    assert name == "Show.S01E01.v2.Alpha.mkv"


def test_custom_template():
    templates = NamingTemplates(regular="{series}.{season}x{episode:02}")
    assert format_episode_name("Show", 1, 5, "Ignored", ".mp4", templates=templates) == "Show.1x05.mp4"


def test_render_template_missing_variable():
    with pytest.raises(KeyError):
        render_template("{series}.{missing}", {"series": "Show"})


def test_braces_in_values_are_not_rendered_again():
    assert render_template("{title}.{episode:02}", {"title": "{series}", "episode": 3}) == "{series}.03"
    name = format_episode_name("Show", 1, 1, "The {Secret} Room", ".mkv")
    assert name == "Show.S01E01.The.{Secret}.Room.mkv"


def test_broken_template_falls_back_to_default():
    templates = NamingTemplates(regular="{series}.{bogus}", special="{series}.{nope}")
    assert format_episode_name("Show", 1, 1, "Alpha", ".mkv", templates=templates) == "Show.S01E01.Alpha.mkv"
    assert format_episode_name("Show", 0, 2, "Recap", ".mkv", templates=templates) == "Show.S00E02.Recap.mkv"


def test_version_suffix():
    assert version_suffix(None) == ""
    assert version_suffix(1) == ""
    assert version_suffix(3) == ".v3"


def test_insert_version_without_episode_code():
    assert insert_version("Movie.mkv", ".v2") == "Movie.v2.mkv"
    assert insert_version("Movie.mkv", "") == "Movie.mkv"


def test_split_version():
    assert split_version("Show.S01E01.v2.Alpha.mkv") == ("Show.S01E01.Alpha.mkv", 2)
    assert split_version("Show.S01E01.z3.Alpha.mkv") == ("Show.S01E01.Alpha.mkv", 3)
    assert split_version("Show.S01E01.Alpha.mkv") == ("Show.S01E01.Alpha.mkv", None)


def test_folder_names():
    assert format_folder_name(2) == "Season 02"
    assert format_folder_name(0) == "Specials"


def test_split_version_ignores_look_alikes_in_title():
    assert split_version("Show.S01E01.Gundam.V2.mkv") == ("Show.S01E01.Gundam.V2.mkv", None)
    assert split_version("Show.S01E01.Part.v3.mkv") == ("Show.S01E01.Part.v3.mkv", None)
    assert split_version("Show.S01E01.v2.Gundam.V2.mkv") == ("Show.S01E01.Gundam.V2.mkv", 2)


def test_split_version_without_episode_code():
    assert split_version("Movie.v2.mkv") == ("Movie.mkv", 2)
    assert split_version("Gundam.v2.Movie.mkv") == ("Gundam.v2.Movie.mkv", None)


def test_version_of():
    target = "Show.S01E01.Gundam.V2.mkv"
    assert version_of(target, target) == 1
    assert version_of("Show.S01E01.v4.Gundam.V2.mkv", target) == 4
    assert version_of("Show.S01E01.z2.Gundam.V2.mkv", target) == 2
    assert version_of("Show.S01E01.Gundam.mkv", target) is None
    assert version_of("Show.S01E01.v2.Other.mkv", target) is None
