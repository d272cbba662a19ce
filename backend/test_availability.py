import pytest

from watchd.services.availability_service import AvailabilityCache, normalize_offers, normalize_provider_name
from conftest import FakeAvailabilityClient


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.parametrize("raw, expected", [
    ("Netflix Standard with Ads", "Netflix"),
    ("Amazon Prime Video", "Prime Video"),
    ("Prime Video with Ads", "Prime Video"),
    ("HBO Max Amazon Channel", "Prime Video"),
    ("Disney+", "Disney Plus"),
    ("Apple TV Plus", "Apple TV+"),
    ("Max", "HBO Max"),
    ("Paramount Plus", "Paramount+"),
    ("RTL+ Premium", "RTL+"),
    ("Sky Go", "Sky Go"),
    ("MUBI", "MUBI"),
])
def test_normalize_provider_name(raw, expected):
    assert normalize_provider_name(raw) == expected


def test_normalize_provider_name_keeps_empty_values():
    assert normalize_provider_name(None) is None
    assert normalize_provider_name("  ") == "  "


def test_normalize_offers_keeps_streaming_only():
    offers = normalize_offers([
        {"monetizationType": "FLATRATE", "presentationType": "4K", "package": {"clearName": "Disney Plus"}},
        {"monetizationType": "FREE", "presentationType": "SD", "package": {"clearName": "Joyn"}},
        {"monetizationType": "BUY", "presentationType": "HD", "package": {"clearName": "Apple TV"}},
        {"monetizationType": "RENT", "presentationType": "HD", "package": {"clearName": "Rakuten TV"}},
        {"monetizationType": "FLATRATE", "presentationType": "HD", "package": {"clearName": "MUBI"}},
    ])

    assert offers == [
        {"monetization_type": "flatrate", "presentation_type": "4K",
         "provider_name": "Disney Plus", "icon_path": "/icons/disney-plus.png"},
        {"monetization_type": "free", "presentation_type": "SD",
         "provider_name": "Joyn", "icon_path": "/icons/joyn.png"},
        {"monetization_type": "flatrate", "presentation_type": "HD",
         "provider_name": "MUBI", "icon_path": None},
    ]


def test_lookup_is_cached_per_movie():
    client = FakeAvailabilityClient()
    cache = AvailabilityCache(client)

    first = cache.get_offers(550, "Fight Club", 1999)
    second = cache.get_offers(550, "Fight Club", 1999)

    assert first == second
    assert client.lookups == [("Fight Club", 1999)]
    assert len(cache) == 1


def test_failure_is_cached_as_empty_list():
    client = FakeAvailabilityClient(fail=True)
    cache = AvailabilityCache(client)

    assert cache.get_offers(550, "Fight Club", 1999) == []
    assert cache.get_offers(550, "Fight Club", 1999) == []
    assert len(client.lookups) == 1


def test_unknown_title_is_cached_as_empty_list():
    client = FakeAvailabilityClient()
    client.no_match = True
    cache = AvailabilityCache(client)

    assert cache.get_offers(1, "Nothing", 2001) == []
    assert cache.get_offers(1, "Nothing", 2001) == []
    assert len(client.lookups) == 1


def test_entries_expire_after_ttl():
    client = FakeAvailabilityClient(fail=True)
    clock = FakeClock()
    cache = AvailabilityCache(client, ttl_seconds=3600, clock=clock)

    cache.get_offers(550, "Fight Club", 1999)
    clock.now += 3599
    cache.get_offers(550, "Fight Club", 1999)
    assert len(client.lookups) == 1

    client.fail = False
    clock.now += 2
    offers = cache.get_offers(550, "Fight Club", 1999)

    assert len(client.lookups) == 2
    assert offers[0]["provider_name"] == "Netflix"


def test_cached_offers_cannot_be_mutated_by_callers():
    cache = AvailabilityCache(FakeAvailabilityClient())

    offers = cache.get_offers(550, "Fight Club", 1999)
    offers[0]["provider_name"] = "changed"
    offers.append({"monetization_type": "free"})

    again = cache.get_offers(550, "Fight Club", 1999)
    assert len(again) == 1
    assert again[0]["provider_name"] == "Netflix"


def test_clear_drops_all_entries():
    client = FakeAvailabilityClient()
    cache = AvailabilityCache(client)
    cache.get_offers(550, "Fight Club", 1999)
    cache.get_offers(680, "Pulp Fiction", 1994)

    cache.clear()

    assert len(cache) == 0
    cache.get_offers(550, "Fight Club", 1999)
    assert len(client.lookups) == 3
