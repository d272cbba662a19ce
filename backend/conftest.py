import itertools
import os

# Must be set before watchd reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["TMDB_API_KEY"] = ""
os.environ["REDIS_URL"] = ""
os.environ["AUTO_CREATE_TABLES"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from watchd import models  # noqa: F401
from watchd.core.dependencies import get_availability_cache, get_catalog, get_notifier, get_optional_catalog
from watchd.core.interfaces import (
    AvailabilityClientInterface,
    AvailabilityError,
    MovieServiceInterface,
    TMDBError,
    TMDBResponse,
)
from watchd.db import Base, get_db
from watchd.main import app
from watchd.repositories.user_repository import UserRepository
from watchd.services.availability_service import AvailabilityCache
from watchd.services.movie_service import MovieService
from watchd.services.notification_service import ConnectionManager


def default_pages():
    # Page 1 leads with Fight Club (550); 100 ids over 5 pages
    pages = {1: [550] + list(range(101, 120))}
    for page in range(2, 6):
        pages[page] = list(range(page * 100 + 1, page * 100 + 21))
    return pages


def movie_details(movie_id):
    return {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "overview": f"Overview of movie {movie_id}",
        "poster_path": f"/poster{movie_id}.jpg",
        "backdrop_path": None,
        "release_date": "2020-05-01",
        "vote_average": 7.5,
        "runtime": 120,
        "genres": [{"id": 18, "name": "Drama"}],
    }


class FakeCatalog(MovieServiceInterface):
    """In-memory stand-in for the TMDB movie service"""

    def __init__(self, pages=None, fail_from_page=None):
        self.pages = pages if pages is not None else default_pages()
        self.fail_from_page = fail_from_page
        self.missing = set()
        self.popular = []
        self.discover_calls = []
        self.details_calls = []

    def discover_movies(self, page=1, **filters):
        return TMDBResponse({"results": [{"id": i} for i in self.pages.get(page, [])]}, 200, True)

    def discover_movie_ids(self, page=1, **filters):
        self.discover_calls.append((page, filters))
        if self.fail_from_page is not None and page >= self.fail_from_page:
            raise TMDBError("Request failed: upstream unavailable", 503)
        return list(self.pages.get(page, []))

    def get_movie_details(self, movie_id):
        self.details_calls.append(movie_id)
        if movie_id in self.missing:
            return TMDBResponse({}, 404, False)
        return TMDBResponse(movie_details(movie_id), 200, True)

    def get_popular_movies(self, page=1):
        return TMDBResponse({"page": page, "results": list(self.popular)}, 200, True)


class FakeAvailabilityClient(AvailabilityClientInterface):
    def __init__(self, offers=None, fail=False):
        self.offers = offers if offers is not None else [
            {"monetizationType": "FLATRATE", "presentationType": "HD",
             "package": {"clearName": "Netflix Standard with Ads"}},
            {"monetizationType": "RENT", "presentationType": "HD",
             "package": {"clearName": "Apple TV"}},
        ]
        self.fail = fail
        self.no_match = False
        self.lookups = []

    def find_node_id(self, title, release_year):
        self.lookups.append((title, release_year))
        if self.fail:
            raise AvailabilityError("JustWatch request failed: 502", 502)
        if self.no_match:
            return None
        return f"tm-{title}"

    def get_offers(self, node_id):
        return [dict(o) for o in self.offers]


class RecordingNotifier(ConnectionManager):
    """ConnectionManager that also remembers what it published"""

    def __init__(self):
        super().__init__()
        self.events = []

    async def publish(self, room_id, event, payload=None):
        self.events.append((room_id, event.value, payload or {}))
        await super().publish(room_id, event, payload)

    def kinds(self):
        return [kind for _, kind, _ in self.events]


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(name=None, guest=False):
        n = next(counter)
        return UserRepository(db).create_user(
            name=name or f"User {n}",
            email=None if guest else f"user{n}@example.com",
            is_guest=guest,
        )

    return _make


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def availability_client():
    return FakeAvailabilityClient()


@pytest.fixture
def availability(availability_client):
    return AvailabilityCache(availability_client, ttl_seconds=3600)


@pytest.fixture
def movie_service(catalog, availability):
    return MovieService(catalog, availability)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, catalog, availability, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_optional_catalog] = lambda: catalog
    app.dependency_overrides[get_availability_cache] = lambda: availability
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def guest(client):
    """Factory returning (user id, auth headers) for a fresh guest account"""

    def _guest(name=None):
        response = client.post("/auth/guest", json={"name": name} if name else None)
        assert response.status_code == 201
        body = response.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _guest
