import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from watchd.routers import health, auth, users, rooms, movies, swipes, matches, favorites
from watchd.core.config import get_settings
from watchd.db import Base, engine
from watchd import models  # ensure models are imported

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Watchd API",
    description="Swipe on movies together and find the one you both want to watch",
    version="1.0.0"
)

origins_env = settings.CORS_ALLOW_ORIGINS or ""
origins = [o.strip() for o in origins_env.split(",") if o.strip()] or [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(rooms.router)
app.include_router(movies.router)
app.include_router(swipes.router)
app.include_router(matches.router)
app.include_router(favorites.router)


@app.on_event("startup")
async def init_db():
    # Idempotent, for first deploys without a migration step
    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
