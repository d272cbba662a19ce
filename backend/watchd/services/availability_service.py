import logging
import re
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

from watchd.core.interfaces import AvailabilityClientInterface

logger = logging.getLogger(__name__)

CACHE_TTL_1H = 60 * 60

# Only subscription and free offers; purchase, rental and cinema are dropped
STREAMING_MONETIZATION = {"flatrate", "free"}

# Canonical provider display name -> icon file served from /icons
PROVIDER_ICONS = {
    "Netflix": "netflix.png",
    "Prime Video": "amazon-prime.png",
    "Disney Plus": "disney-plus.png",
    "Apple TV+": "apple-tv.png",
    "HBO Max": "hbo-max.png",
    "Joyn": "joyn.png",
    "Paramount+": "paramount-plus.png",
    "Rakuten TV": "rakuten-tv.png",
    "RTL+": "rtl-plus.png",
    "WOW": "wow.png",
    "Magenta TV": "magenta-tv.png",
    "Sky Go": "sky-go.png",
}

# Checked in order, first hit wins
_PROVIDER_NAME_RULES = [
    (re.compile(r"^Netflix\b", re.I), "Netflix"),
    (re.compile(r"^Amazon\s*Prime\b", re.I), "Prime Video"),
    (re.compile(r"^Prime\s*Video\b", re.I), "Prime Video"),
    (re.compile(r"^Prime\b", re.I), "Prime Video"),
    # Channels sold through Amazon, e.g. "HBO Max Amazon Channel"
    (re.compile(r"\bAmazon\b", re.I), "Prime Video"),
    (re.compile(r"^Disney\b", re.I), "Disney Plus"),
    (re.compile(r"^Apple\s*TV\b", re.I), "Apple TV+"),
    (re.compile(r"^(HBO\s*Max|Max)\b", re.I), "HBO Max"),
    (re.compile(r"^Joyn\b", re.I), "Joyn"),
    (re.compile(r"^Paramount\b", re.I), "Paramount+"),
    (re.compile(r"^Rakuten\s*TV\b", re.I), "Rakuten TV"),
    (re.compile(r"^RTL\s*\+?", re.I), "RTL+"),
    (re.compile(r"^WOW\b", re.I), "WOW"),
    (re.compile(r"^Magenta\s*TV\b", re.I), "Magenta TV"),
    (re.compile(r"^Sky\s*Go\b", re.I), "Sky Go"),
]


def normalize_provider_name(clear_name: Optional[str]) -> Optional[str]:
    """Map a JustWatch package name onto the canonical display name, e.g. "Netflix Standard with Ads" -> "Netflix"."""
    if not clear_name or not clear_name.strip():
        return clear_name
    for pattern, canonical in _PROVIDER_NAME_RULES:
        if pattern.search(clear_name):
            return canonical
    return clear_name


def normalize_offers(raw_offers: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep streaming offers only and flatten them into the API offer shape"""
    offers = []
    for raw in raw_offers or []:
        monetization = (raw.get("monetizationType") or "").lower()
        if monetization not in STREAMING_MONETIZATION:
            continue
        package = raw.get("package") or {}
        provider_name = normalize_provider_name(package.get("clearName"))
        icon_file = PROVIDER_ICONS.get(provider_name)
        offers.append({
            "monetization_type": monetization,
            "presentation_type": raw.get("presentationType"),
            "provider_name": provider_name,
            "icon_path": f"/icons/{icon_file}" if icon_file else None,
        })
    return offers


class AvailabilityCache:
    """Process-wide streaming offer lookup with a fixed TTL per movie id.

    Entries are evicted lazily when read after expiry. Failed lookups are
    cached as an empty list for the full TTL, so an unreachable upstream is
    asked at most once per movie and window. Concurrent misses on the same
    cold key may each hit the upstream; the last writer wins.
    """

    def __init__(self, client: AvailabilityClientInterface, ttl_seconds: int = CACHE_TTL_1H,
                 clock: Callable[[], float] = time.monotonic):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[int, Tuple[float, List[Dict[str, Any]]]] = {}
        self._lock = threading.Lock()

    def get_offers(self, movie_id: int, title: str, release_year: int) -> List[Dict[str, Any]]:
        cached = self._get_fresh(movie_id)
        if cached is not None:
            return cached

        try:
            node_id = self.client.find_node_id(title, release_year)
            offers = normalize_offers(self.client.get_offers(node_id)) if node_id else []
        except Exception as e:
            logger.warning(f"Availability lookup failed for movie {movie_id}: {str(e)}")
            offers = []

        self._store(movie_id, offers)
        return [dict(o) for o in offers]

    def _get_fresh(self, movie_id: int) -> Optional[List[Dict[str, Any]]]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(movie_id)
            if entry is None:
                return None
            expires_at, offers = entry
            if expires_at <= now:
                del self._entries[movie_id]
                return None
            return [dict(o) for o in offers]

    def _store(self, movie_id: int, offers: List[Dict[str, Any]]) -> None:
        with self._lock:
            self._entries[movie_id] = (self._clock() + self.ttl_seconds, offers)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
