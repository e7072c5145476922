from __future__ import annotations

from datetime import datetime

import pytest

from pawgrab.config import FetchRequest
from pawgrab.errors import ConfigError
from pawgrab.models import PostRecord
from pawgrab.utils import folder_name, parse_published, safe_title, url_extension


@pytest.mark.parametrize(
    "tags,expected",
    [
        ("wolf solo", "wolf_solo"),
        ("  fox\t rating:s ", "_fox_ratings_"),
        ('a<b>c:"d/e\\f|g?h*i', "abcdefghi"),
        ("x" * 80, "x" * 50),
    ],
)
def test_folder_name(tags, expected) -> None:
    assert folder_name(tags) == expected


def test_safe_title() -> None:
    assert safe_title("Forest Friends: Part 2!") == "Forest_Friends__Part_2_"


@pytest.mark.parametrize(
    "url,default,expected",
    [
        ("https://static1.e621.net/data/ab/1.png?download=1", "", ".png"),
        ("https://cdn.example.org/pages/002.JPG#top", ".jpg", ".JPG"),
        ("https://cdn.example.org/pages/002", ".jpg", ".jpg"),
        ("https://cdn.example.org/pages.d/002?x=a.gif", "", ""),
    ],
)
def test_url_extension(url, default, expected) -> None:
    assert url_extension(url, default) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Jan 2, 2024", datetime(2024, 1, 2)),
        ("January  2, 2024", datetime(2024, 1, 2)),
        ("2 March 2023", datetime(2023, 3, 2)),
        ("2023-03-02", datetime(2023, 3, 2)),
        ("2023-03-02T10:30:00", datetime(2023, 3, 2, 10, 30)),
        ("", None),
        ("a while ago", None),
    ],
)
def test_parse_published(text, expected) -> None:
    assert parse_published(text) == expected


def test_post_from_api_tolerates_missing_fields() -> None:
    post = PostRecord.from_api({"id": "12", "tags": None, "file": {"url": None}})

    assert post == PostRecord(12)


def test_fetch_request_block_parsing() -> None:
    assert FetchRequest.from_cli("wolf", "none", 5).block_list == frozenset()
    assert FetchRequest.from_cli("wolf", None, 5).block_list == frozenset()
    assert FetchRequest.from_cli("wolf", " gore ,scat", 5).block_list == frozenset({"gore", "scat"})

    with pytest.raises(ConfigError):
        FetchRequest.from_cli("wolf", "", -3)
