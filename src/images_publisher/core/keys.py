"""Storage key generation."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _random_id() -> str:
    return str(uuid.uuid4())


def format_timestamp(moment: datetime) -> str:
    """
    Render an instant as a sortable, filesystem-safe string.

    The instant is converted to UTC and rendered as ISO-8601 with
    millisecond precision, then colons and periods become dashes:
    ``2024-01-02T03:04:05.678Z`` -> ``2024-01-02T03-04-05-678Z``.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    iso = moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")


class KeyGenerator:
    """Generates time-ordered storage keys with a random disambiguator.

    Uniqueness is statistical: no lookup against the store is made.
    """

    SHORT_ID_LENGTH = 8

    def __init__(
        self, clock: Optional[Clock] = None, id_factory: Optional[IdFactory] = None
    ):
        self._clock = clock or _utc_now
        self._id_factory = id_factory or _random_id

    def generate(self, prefix: str, extension: str) -> str:
        """Build ``prefix + timestamp + "-" + short_id + "." + extension``."""
        timestamp = format_timestamp(self._clock())
        short_id = self._id_factory()[: self.SHORT_ID_LENGTH]
        return f"{prefix or ''}{timestamp}-{short_id}.{extension}"
