"""
Pytest configuration and shared fixtures for tests
"""

from datetime import datetime, timedelta, timezone

import pytest

from dining_bot.clock import ScheduleClock
from dining_bot.errors import FetchError
from dining_bot.models import Meal

EASTERN = timezone(timedelta(hours=-4))


class FakeClock(ScheduleClock):
    """ScheduleClock whose 'now' is set by the test"""

    def __init__(self, current: datetime):
        super().__init__(utc_offset_hours=-4, run_hour=6, run_minute=5)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class FakePageClient:
    """Serves canned pages and records every URL requested"""

    def __init__(self, pages=None, default=""):
        self.pages = dict(pages or {})
        self.default = default
        self.failing = set()
        self.requests = []

    async def fetch_document(self, url: str) -> str:
        self.requests.append(url)
        if url in self.failing or "*" in self.failing:
            raise FetchError(url, "connection refused")
        return self.pages.get(url, self.default)


def build_menu_page(meals=None) -> str:
    """HTML shaped like a dining hall menu page: {Meal: [item, ...]}"""
    sections = []
    for meal, items in (meals or {}).items():
        links = "".join(
            f'<li><a href="#" class="lightbox-nutrition" data-dish-name="{item}">{item}</a></li>'
            for item in items
        )
        sections.append(
            f'<div id="{meal.anchor}" class="menu_fragment">'
            f'<h2>{meal.label}</h2>'
            f'<div id="content_text"><ul>{links}</ul></div>'
            f"</div>"
        )
    return f"<html><body><div class='menus'>{''.join(sections)}</div></body></html>"


@pytest.fixture(name="monday")
def monday_fixture():
    """Monday 2024-03-04, 10:00 in UTC-4"""
    return datetime(2024, 3, 4, 10, 0, tzinfo=EASTERN)


@pytest.fixture(name="clock")
def clock_fixture(monday):
    return FakeClock(monday)


@pytest.fixture(name="page_client")
def page_client_fixture():
    return FakePageClient(default=build_menu_page({Meal.LUNCH: ["Grilled Chicken", "Veggie Burger"]}))


@pytest.fixture(name="menu_page")
def menu_page_fixture():
    return build_menu_page


@pytest.fixture(name="make_page_client")
def make_page_client_fixture():
    return FakePageClient


@pytest.fixture(name="make_clock")
def make_clock_fixture():
    return FakeClock
