"""
Tests for menu search and the weekday meal table
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from bs4 import BeautifulSoup

from dining_bot.errors import FetchError, ParseError
from dining_bot.menu_search import (
    MenuSearchEngine,
    extract_meal_items,
    format_report,
    servable_meals,
    which_meals,
)
from dining_bot.models import DiningHall, Meal, Weekday

EASTERN = timezone(timedelta(hours=-4))

B, L, D, LN, G = Meal.BREAKFAST, Meal.LUNCH, Meal.DINNER, Meal.LATE_NIGHT, Meal.GRAB_AND_GO


def stub_cache(documents, default=""):
    """Cache stand-in returning a fixed document per hall"""
    cache = Mock()
    cache.get = AsyncMock(side_effect=lambda hall: documents.get(hall, default))
    return cache


class TestWhichMeals:
    """Tests for the weekday -> hall -> meals table"""

    @pytest.mark.parametrize(
        "weekday",
        [Weekday.MONDAY, Weekday.TUESDAY, Weekday.WEDNESDAY, Weekday.THURSDAY],
    )
    def test_monday_to_thursday(self, weekday):
        """Test the Mon-Thu row"""
        assert which_meals(DiningHall.BERK, weekday) == [L, D, LN, G]
        assert which_meals(DiningHall.HAMP, weekday) == [B, L, D, G]
        assert which_meals(DiningHall.FRANK, weekday) == [B, L, D, G]
        assert which_meals(DiningHall.WORCESTER, weekday) == [B, L, D, LN, G]

    def test_friday(self):
        """Test Worcester drops late night on Friday"""
        assert which_meals(DiningHall.BERK, Weekday.FRIDAY) == [L, D, LN, G]
        assert which_meals(DiningHall.HAMP, Weekday.FRIDAY) == [B, L, D, G]
        assert which_meals(DiningHall.FRANK, Weekday.FRIDAY) == [B, L, D, G]
        assert which_meals(DiningHall.WORCESTER, Weekday.FRIDAY) == [B, L, D, G]

    def test_saturday(self):
        """Test the Saturday row"""
        assert which_meals(DiningHall.BERK, Weekday.SATURDAY) == [L, D, LN]
        assert which_meals(DiningHall.HAMP, Weekday.SATURDAY) == [L, D]
        assert which_meals(DiningHall.FRANK, Weekday.SATURDAY) == [L, D]
        assert which_meals(DiningHall.WORCESTER, Weekday.SATURDAY) == [L, D]

    def test_sunday(self):
        """Test Worcester has late night on Sunday"""
        assert which_meals(DiningHall.BERK, Weekday.SUNDAY) == [L, D, LN]
        assert which_meals(DiningHall.HAMP, Weekday.SUNDAY) == [L, D]
        assert which_meals(DiningHall.FRANK, Weekday.SUNDAY) == [L, D]
        assert which_meals(DiningHall.WORCESTER, Weekday.SUNDAY) == [L, D, LN]

    def test_berk_never_serves_breakfast(self):
        """Test Berk has no breakfast on any day"""
        for weekday in Weekday:
            assert B not in which_meals(DiningHall.BERK, weekday)

    def test_returned_list_is_a_copy(self):
        """Test callers can't corrupt the table"""
        meals = which_meals(DiningHall.HAMP, Weekday.MONDAY)
        meals.clear()
        assert which_meals(DiningHall.HAMP, Weekday.MONDAY) == [B, L, D, G]

    def test_servable_meals(self):
        """Test the union of meals per hall, in meal order"""
        assert servable_meals(DiningHall.BERK) == [L, D, LN, G]
        assert servable_meals(DiningHall.WORCESTER) == [B, L, D, LN, G]
        assert servable_meals(DiningHall.HAMP) == [B, L, D, G]


class TestMealDisplay:
    """Tests for meal labels"""

    def test_lunch_is_brunch_on_weekends(self):
        """Test weekend lunch displays as Brunch"""
        assert L.display_name(Weekday.SATURDAY) == "Brunch"
        assert L.display_name(Weekday.SUNDAY) == "Brunch"
        assert L.display_name(Weekday.FRIDAY) == "Lunch"

    def test_other_labels(self):
        """Test labels that don't depend on the weekday"""
        assert LN.display_name(Weekday.SUNDAY) == "Late Night"
        assert G.display_name(Weekday.MONDAY) == "Grab n' Go"


class TestExtractMealItems:
    """Tests for pulling item names out of a menu page"""

    def test_items_for_meal(self, menu_page):
        """Test items are read from the meal's content region only"""
        page = menu_page({L: ["Grilled Chicken", "Veggie Burger"], D: ["Pizza"]})
        soup = BeautifulSoup(page, "html.parser")

        assert extract_meal_items(soup, L) == ["Grilled Chicken", "Veggie Burger"]
        assert extract_meal_items(soup, D) == ["Pizza"]

    def test_missing_anchor_raises(self, menu_page):
        """Test a meal absent from the page is a ParseError"""
        soup = BeautifulSoup(menu_page({L: ["Soup"]}), "html.parser")
        with pytest.raises(ParseError):
            extract_meal_items(soup, B)

    def test_missing_content_region_raises(self):
        """Test an anchor without a content_text region is a ParseError"""
        soup = BeautifulSoup('<div id="lunch_menu"><p>closed</p></div>', "html.parser")
        with pytest.raises(ParseError):
            extract_meal_items(soup, L)


class TestFindItem:
    """Tests for MenuSearchEngine.find_item"""

    @pytest.mark.asyncio
    async def test_substring_match_is_lowercased(self, menu_page, clock):
        """Test a case-insensitive substring match returns lowercased items"""
        cache = stub_cache({DiningHall.BERK: menu_page({L: ["Grilled Chicken", "Veggie Burger"]})})
        engine = MenuSearchEngine(cache, clock)

        assert await engine.find_item(DiningHall.BERK, L, "chicken") == ["grilled chicken"]
        assert await engine.find_item(DiningHall.BERK, L, "CHICKEN") == ["grilled chicken"]

    @pytest.mark.asyncio
    async def test_no_match_is_empty(self, menu_page, clock):
        """Test a query matching nothing returns an empty list"""
        cache = stub_cache({DiningHall.BERK: menu_page({L: ["Grilled Chicken", "Veggie Burger"]})})
        engine = MenuSearchEngine(cache, clock)

        assert await engine.find_item(DiningHall.BERK, L, "pizza") == []

    @pytest.mark.asyncio
    async def test_missing_meal_is_empty_not_error(self, menu_page, clock):
        """Test a meal missing from the page yields no results"""
        cache = stub_cache({DiningHall.BERK: menu_page({L: ["Grilled Chicken"]})})
        engine = MenuSearchEngine(cache, clock)

        assert await engine.find_item(DiningHall.BERK, LN, "chicken") == []

    @pytest.mark.asyncio
    async def test_duplicates_and_order_preserved(self, menu_page, clock):
        """Test every matching node is returned in page order"""
        page = menu_page({D: ["Chicken Tenders", "Rice", "Chicken Tenders", "BBQ Chicken"]})
        engine = MenuSearchEngine(stub_cache({DiningHall.HAMP: page}), clock)

        assert await engine.find_item(DiningHall.HAMP, D, "chicken") == [
            "chicken tenders",
            "chicken tenders",
            "bbq chicken",
        ]

    @pytest.mark.asyncio
    async def test_meal_hall_never_serves_skips_fetch(self, clock):
        """Test Berk breakfast returns nothing without touching the cache"""
        cache = Mock()
        cache.get = AsyncMock(side_effect=FetchError("http://x", "down"))
        engine = MenuSearchEngine(cache, clock)

        assert await engine.find_item(DiningHall.BERK, B, "eggs") == []
        cache.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_error_propagates(self, clock):
        """Test a cache failure surfaces as FetchError"""
        cache = Mock()
        cache.get = AsyncMock(side_effect=FetchError("http://x", "down"))
        engine = MenuSearchEngine(cache, clock)

        with pytest.raises(FetchError):
            await engine.find_item(DiningHall.BERK, L, "chicken")

    @pytest.mark.asyncio
    async def test_document_parsed_once_per_snapshot(self, menu_page, clock):
        """Test the same document object isn't re-parsed for every meal"""
        page = menu_page({L: ["Pasta"], D: ["Pasta Bake"]})
        engine = MenuSearchEngine(stub_cache({DiningHall.FRANK: page}), clock)

        await engine.find_item(DiningHall.FRANK, L, "pasta")
        first = engine._parsed[DiningHall.FRANK][1]
        await engine.find_item(DiningHall.FRANK, D, "pasta")

        assert engine._parsed[DiningHall.FRANK][1] is first


class TestReportFor:
    """Tests for the user-facing report"""

    @pytest.mark.asyncio
    async def test_not_found(self, menu_page, clock):
        """Test no matches gives '<query> not found'"""
        cache = stub_cache({}, default=menu_page({L: ["Grilled Chicken"], D: ["Salad"]}))
        engine = MenuSearchEngine(cache, clock)

        assert await engine.report_for("pizza") == "pizza not found"

    @pytest.mark.asyncio
    async def test_report_lines_per_hall_and_meal(self, menu_page, clock):
        """Test a line per hall/meal with matches, halls in fixed order"""
        documents = {
            DiningHall.BERK: menu_page({L: ["Cheese Pizza"], LN: ["Pizza Slice", "Fries"]}),
            DiningHall.WORCESTER: menu_page({D: ["Pepperoni Pizza", "Pizza Bagel"]}),
        }
        engine = MenuSearchEngine(stub_cache(documents, default=menu_page({})), clock)

        report = await engine.report_for("pizza")

        assert report == (
            "pizza: \n"
            "Berk Lunch: cheese pizza\n"
            "Berk Late Night: pizza slice\n"
            "Worcester Dinner: pepperoni pizza, pizza bagel"
        )

    @pytest.mark.asyncio
    async def test_weekend_uses_brunch_and_weekend_meals(self, menu_page, make_clock):
        """Test Saturday reports Brunch and skips meals not served"""
        saturday = make_clock(datetime(2024, 3, 9, 9, 0, tzinfo=EASTERN))
        page = menu_page({L: ["Waffles"], G: ["Waffle Sandwich"]})
        engine = MenuSearchEngine(stub_cache({DiningHall.HAMP: page}, default=menu_page({})), saturday)

        report = await engine.report_for("waffle")

        assert report == "waffle: \nHamp Brunch: waffles"

    @pytest.mark.asyncio
    async def test_only_todays_meals_are_looked_up(self, menu_page, clock):
        """Test Berk breakfast is never checked"""
        cache = stub_cache({}, default=menu_page({B: ["Omelette"]}))
        engine = MenuSearchEngine(cache, clock)

        report = await engine.report_for("omelette")

        assert "Berk" not in report
        assert "Hamp Breakfast: omelette" in report

    def test_format_report(self):
        """Test the report layout"""
        assert format_report("tofu", []) == "tofu not found"
        assert format_report("tofu", ["Berk Lunch: tofu"]) == "tofu: \nBerk Lunch: tofu"
