"""``Accept`` header parsing for content negotiation.

Only the decision "would this client take *this* media type" is needed,
so there is no best-match scoring across offers; callers ask in their
own preference order.
"""

from dataclasses import dataclass
from functools import lru_cache

# Short names accepted by ``accepts()``, as in ``request.accepts("html")``
SHORT_TYPES: dict[str, str] = {
    "html": "text/html",
    "json": "application/json",
    "text": "text/plain",
    "txt": "text/plain",
}


@dataclass(frozen=True, slots=True)
class MediaRange:
    """One entry of an ``Accept`` header, e.g. ``text/*;q=0.8``."""

    type: str
    subtype: str
    quality: float = 1.0

    def matches(self, media_type: str) -> bool:
        main, _, sub = media_type.partition("/")
        if self.type == "*":
            return True
        if self.type != main:
            return False
        return self.subtype in ("*", sub)


@lru_cache(maxsize=256)
def parse_accept(header: str) -> tuple[MediaRange, ...]:
    """Parse an ``Accept`` header into media ranges.

    Malformed entries and ``q`` values that are not numbers are skipped
    rather than failing the request.
    """
    ranges: list[MediaRange] = []
    for part in header.split(","):
        part = part.strip()
        if not part:
            continue
        media, *params = (p.strip() for p in part.split(";"))
        main, sep, sub = media.lower().partition("/")
        if not sep or not main or not sub:
            continue
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = -1.0
        if 0.0 <= quality <= 1.0:
            ranges.append(MediaRange(main, sub, quality))
    return tuple(ranges)


def accepts(header: str | None, media_type: str) -> bool:
    """True if a client sending *header* accepts *media_type*.

    A missing or empty ``Accept`` header accepts everything. *media_type*
    may be a full type (``"text/html"``) or a short name (``"html"``).
    ``q=0`` explicitly refuses a type.
    """
    full = SHORT_TYPES.get(media_type, media_type).lower()
    if not header or not header.strip():
        return True
    ranges = parse_accept(header)
    if not ranges:
        return True
    # Most specific range wins: exact type, then type/*, then */*
    best: MediaRange | None = None
    for media_range in ranges:
        if not media_range.matches(full):
            continue
        if best is None or _specificity(media_range) > _specificity(best):
            best = media_range
    return best is not None and best.quality > 0


def _specificity(media_range: MediaRange) -> int:
    if media_range.type == "*":
        return 0
    if media_range.subtype == "*":
        return 1
    return 2
