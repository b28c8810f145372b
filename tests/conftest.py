"""Shared test fixtures."""
from pathlib import Path
from typing import List

import pytest

from crawler import Fetcher

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


class FakeFetcher(Fetcher):
    """Serves canned markup per path and records every fetch."""

    def __init__(self, pages=None, error: Exception = None):
        super().__init__(base_url="https://hianime.test")
        self.pages = pages or {}
        self.error = error
        self.calls: List[str] = []

    def fetch(self, path: str) -> str:
        self.calls.append(path)
        if self.error is not None:
            raise self.error
        return self.pages.get(path, "<html></html>")


@pytest.fixture
def home_html():
    return load_fixture("home.html")


@pytest.fixture
def search_html():
    return load_fixture("search.html")


@pytest.fixture
def details_html():
    return load_fixture("details.html")


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()
