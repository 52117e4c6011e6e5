"""
Menu search: which meals each hall serves on a given weekday, and
case-insensitive substring lookup of food items in a meal's section.
"""

import logging
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from dining_bot.clock import ScheduleClock
from dining_bot.errors import ParseError
from dining_bot.menu_cache import MenuCache
from dining_bot.models import DiningHall, Meal, Weekday

logger = logging.getLogger(__name__)

BERK, HAMP, FRANK, WORCESTER = DiningHall.BERK, DiningHall.HAMP, DiningHall.FRANK, DiningHall.WORCESTER
BREAKFAST, LUNCH, DINNER, LATE_NIGHT, GRAB_AND_GO = (
    Meal.BREAKFAST,
    Meal.LUNCH,
    Meal.DINNER,
    Meal.LATE_NIGHT,
    Meal.GRAB_AND_GO,
)

_MON_THU = {
    BERK: (LUNCH, DINNER, LATE_NIGHT, GRAB_AND_GO),
    HAMP: (BREAKFAST, LUNCH, DINNER, GRAB_AND_GO),
    FRANK: (BREAKFAST, LUNCH, DINNER, GRAB_AND_GO),
    WORCESTER: (BREAKFAST, LUNCH, DINNER, LATE_NIGHT, GRAB_AND_GO),
}
_FRIDAY = {
    BERK: (LUNCH, DINNER, LATE_NIGHT, GRAB_AND_GO),
    HAMP: (BREAKFAST, LUNCH, DINNER, GRAB_AND_GO),
    FRANK: (BREAKFAST, LUNCH, DINNER, GRAB_AND_GO),
    WORCESTER: (BREAKFAST, LUNCH, DINNER, GRAB_AND_GO),
}
_SATURDAY = {
    BERK: (LUNCH, DINNER, LATE_NIGHT),
    HAMP: (LUNCH, DINNER),
    FRANK: (LUNCH, DINNER),
    WORCESTER: (LUNCH, DINNER),
}
_SUNDAY = {
    BERK: (LUNCH, DINNER, LATE_NIGHT),
    HAMP: (LUNCH, DINNER),
    FRANK: (LUNCH, DINNER),
    WORCESTER: (LUNCH, DINNER, LATE_NIGHT),
}

MEALS_BY_WEEKDAY: Dict[Weekday, Dict[DiningHall, Tuple[Meal, ...]]] = {
    Weekday.MONDAY: _MON_THU,
    Weekday.TUESDAY: _MON_THU,
    Weekday.WEDNESDAY: _MON_THU,
    Weekday.THURSDAY: _MON_THU,
    Weekday.FRIDAY: _FRIDAY,
    Weekday.SATURDAY: _SATURDAY,
    Weekday.SUNDAY: _SUNDAY,
}

MEAL_REGION_ID = "content_text"
ITEM_CLASS = "lightbox-nutrition"


def which_meals(hall: DiningHall, weekday: Weekday) -> List[Meal]:
    """Meals a hall serves on a weekday, in serving order"""
    return list(MEALS_BY_WEEKDAY[weekday][hall])


def servable_meals(hall: DiningHall) -> List[Meal]:
    """Every meal a hall serves on at least one day of the week"""
    served = {meal for day in MEALS_BY_WEEKDAY.values() for meal in day[hall]}
    return [meal for meal in Meal if meal in served]


def extract_meal_items(soup: BeautifulSoup, meal: Meal) -> List[str]:
    """
    Item names listed under a meal's section.

    Raises:
        ParseError: If the meal's anchor or its content region is missing
    """
    anchor = soup.find(id=meal.anchor)
    if anchor is None:
        raise ParseError(f"no element with id '{meal.anchor}'")
    region = anchor.find(id=MEAL_REGION_ID)
    if region is None:
        raise ParseError(f"no '{MEAL_REGION_ID}' inside '{meal.anchor}'")
    return [node.get_text().strip() for node in region.find_all(class_=ITEM_CLASS)]


def format_report(query: str, lines: List[str]) -> str:
    if not lines:
        return f"{query} not found"
    return f"{query}: \n" + "\n".join(lines)


class MenuSearchEngine:
    """Looks up foods in today's cached menus"""

    def __init__(self, cache: MenuCache, clock: Optional[ScheduleClock] = None):
        self.cache = cache
        self.clock = clock or cache.clock
        # hall -> (document text it was parsed from, parsed tree)
        self._parsed: Dict[DiningHall, Tuple[str, BeautifulSoup]] = {}

    def which_meals(self, hall: DiningHall, weekday: Weekday) -> List[Meal]:
        return which_meals(hall, weekday)

    async def find_item(self, hall: DiningHall, meal: Meal, query: str) -> List[str]:
        """
        Lower-cased items in a hall's meal whose text contains the query.

        An empty list means nothing matched or the meal isn't on the page.

        Raises:
            FetchError: If the menu page couldn't be obtained
        """
        if meal not in servable_meals(hall):
            # e.g. Berk breakfast: there is no section to search
            return []

        document = await self.cache.get(hall)
        soup = self._soup_for(hall, document)

        try:
            items = extract_meal_items(soup, meal)
        except ParseError as e:
            logger.info(f"Tried to find food at {hall.label} {meal.label} but failed to parse page: {e}")
            return []

        needle = query.lower()
        found = [text.lower() for text in items if needle in text.lower()]
        if found:
            logger.debug(f"{hall.label} {meal.label}: {' '.join(found)}")
        return found

    async def report_lines(self, query: str) -> List[str]:
        """One '<Hall> <Meal>: <matches>' line per hall/meal with a match"""
        weekday = self.clock.weekday()
        lines = []
        for hall in DiningHall:
            for meal in which_meals(hall, weekday):
                found = await self.find_item(hall, meal, query)
                if found:
                    lines.append(f"{hall.label} {meal.display_name(weekday)}: {', '.join(found)}")
        return lines

    async def report_for(self, query: str) -> str:
        """
        User-facing report for a food query.

        Raises:
            FetchError: If today's menus couldn't be obtained
        """
        report = format_report(query, await self.report_lines(query))
        logger.info(f"Report for {query!r}: {report!r}")
        return report

    def _soup_for(self, hall: DiningHall, document: str) -> BeautifulSoup:
        cached = self._parsed.get(hall)
        if cached is not None and cached[0] is document:
            return cached[1]
        soup = BeautifulSoup(document, "html.parser")
        self._parsed[hall] = (document, soup)
        return soup
