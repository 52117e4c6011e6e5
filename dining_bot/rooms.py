"""
Static room lookup: which class sections meet in a room.
Loaded once from the SPIRE sections JSON and never mutated.
"""

import json
import logging
from collections import defaultdict
from datetime import datetime, time
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, field_validator

logger = logging.getLogger(__name__)

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class Section(BaseModel):
    """One meeting pattern of a class"""
    start_time: time
    end_time: time
    days: List[str]
    room: str
    number: str

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def parse_clock_time(cls, v):
        """Times come as hh:mmAM / hh:mmPM"""
        if isinstance(v, str):
            return datetime.strptime(v.strip(), "%I:%M%p").time()
        return v

    @field_validator("days")
    @classmethod
    def validate_days(cls, v: List[str]) -> List[str]:
        unknown = [day for day in v if day not in DAYS]
        if unknown:
            raise ValueError(f"unknown day(s): {', '.join(unknown)}")
        return v

    def format(self) -> str:
        days = ", ".join(day[:3] for day in self.days)
        start = self.start_time.strftime("%I:%M%p")
        end = self.end_time.strftime("%I:%M%p")
        return f"{self.number} {days} {start}-{end}"


class ClassInfo(BaseModel):
    name: str
    sections: List[Section]


class RoomDirectory:
    """Room name -> sections meeting there"""

    def __init__(self, rooms: Optional[Dict[str, List[Section]]] = None):
        self._rooms: Dict[str, List[Section]] = dict(rooms or {})

    @classmethod
    def from_classes(cls, classes: List[ClassInfo]) -> "RoomDirectory":
        rooms: Dict[str, List[Section]] = defaultdict(list)
        for class_info in classes:
            for section in class_info.sections:
                rooms[section.room].append(section)
        return cls(rooms)

    @classmethod
    def load(cls, path: str) -> "RoomDirectory":
        """
        Load the sections JSON. A missing file gives an empty directory.

        Raises:
            ValidationError: If the file doesn't match the expected shape
        """
        file_path = Path(path)
        if not file_path.exists():
            logger.warning(f"No rooms file at {path}, room lookups will find nothing")
            return cls()

        data = json.loads(file_path.read_text(encoding="utf-8").strip())
        classes = TypeAdapter(List[ClassInfo]).validate_python(data)
        directory = cls.from_classes(classes)
        logger.info(f"Loaded {len(directory)} room(s) from {path}")
        return directory

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room: str) -> bool:
        return room in self._rooms

    def sections(self, room: str) -> List[Section]:
        return list(self._rooms.get(room, []))
