"""
Campus events listing, scraped from the university events page.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup

from dining_bot.page_client import PageClient

logger = logging.getLogger(__name__)

DEFAULT_EVENTS_URL = "http://www.umass.edu/events/"


@dataclass
class CampusEvent:
    title: str
    description: str
    date: str
    location: Optional[str] = None

    def format(self) -> str:
        if self.location:
            return f"{self.title} at {self.location}:\n{self.description}"
        return f"{self.title}:\n{self.description}"


def _text(node) -> str:
    return node.get_text(" ", strip=True) if node is not None else ""


def parse_events(document: str) -> List[CampusEvent]:
    """Events listed on the page; rows without a title are skipped"""
    soup = BeautifulSoup(document, "html.parser")
    events = []
    for row in soup.select(".views-row"):
        title = _text(row.select_one(".views-field-title"))
        if not title:
            logger.debug("Skipping event row without a title")
            continue
        events.append(
            CampusEvent(
                title=title,
                description=_text(row.select_one(".views-field-field-short-desc")),
                date=_text(row.select_one(".event-date")),
                location=_text(row.select_one(".event-location")) or None,
            )
        )
    return events


async def fetch_events(page_client: PageClient, url: str = DEFAULT_EVENTS_URL) -> List[CampusEvent]:
    """
    Raises:
        FetchError: If the events page couldn't be retrieved
    """
    document = await page_client.fetch_document(url)
    events = parse_events(document)
    logger.info(f"Found {len(events)} event(s) on {url}")
    return events
