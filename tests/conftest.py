"""Shared fixtures: sample feed bodies and records."""

from __future__ import annotations

import pytest

from yavs.models.vanity import VanityRecord

FEED_URL = "https://feeds.example.com/vanity.txt"

SAMPLE_FEED = b"foo git https://example.com/foo\nbar hg https://example.com/bar\n"


@pytest.fixture()
def feed_url() -> str:
    return FEED_URL


@pytest.fixture()
def sample_feed() -> bytes:
    return SAMPLE_FEED


@pytest.fixture()
def sample_records() -> list[VanityRecord]:
    return [
        VanityRecord(name="foo", vcs="git", repo_url="https://example.com/foo"),
        VanityRecord(name="bar", vcs="hg", repo_url="https://example.com/bar"),
    ]
