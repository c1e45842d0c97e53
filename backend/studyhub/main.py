from contextlib import asynccontextmanager, suppress
import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, engine, SessionLocal
from .cleanup import purge_expired_generations
from .settings import settings
from .routers import gemini
from .routers import generate
from .routers import generations
from .routers import flashcards

logging.basicConfig(
	level=settings.log_level.upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CLEANUP_INTERVAL_SECONDS = 24 * 60 * 60


def _run_cleanup() -> None:
	db = SessionLocal()
	try:
		removed = purge_expired_generations(db)
		if removed:
			logger.info("Purged %d expired generations", removed)
	except Exception:
		logger.exception("Generation cleanup failed")
	finally:
		db.close()


async def _cleanup_watcher():
	# Startup already ran one pass; repeat daily
	while True:
		await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
		await asyncio.to_thread(_run_cleanup)


@asynccontextmanager
async def lifespan(app: FastAPI):
	Base.metadata.create_all(bind=engine)
	await asyncio.to_thread(_run_cleanup)
	watcher = asyncio.create_task(_cleanup_watcher())
	app.state.cleanup_watcher = watcher
	yield
	watcher.cancel()
	with suppress(asyncio.CancelledError):
		await watcher


app = FastAPI(title="StudyHub AI API", lifespan=lifespan)

app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_allow_origins,
	allow_methods=["GET", "POST", "PUT", "OPTIONS"],
	allow_headers=["Content-Type", "X-User-Id"],
)

app.include_router(gemini.router)
app.include_router(generate.router)
app.include_router(generations.router)
app.include_router(flashcards.router)


@app.get("/health")
async def health():
	return {"status": "ok"}


@app.get("/info")
def root():
	return {"status": "ok", "gemini_configured": bool(settings.gemini_api_key)}
