"""Clock port - the source of "now" for token expiry, windows and timestamps."""

from abc import abstractmethod
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    @abstractmethod
    def now(self) -> datetime:
        """Current instant as an aware UTC datetime."""
        ...
