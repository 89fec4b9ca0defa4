# Kitchen Stories API Main Entry Point
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError

from .context import AppContext
from .db import init_db
from .errors import KitchenStoriesError, kitchen_stories_error_handler, store_error_handler
from .routers.ready import router as ready_router
from .routers.recipes import router as recipes_router
from .seed import seed_sample_recipes
from .settings import Settings, settings as default_settings

# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("kitchen_stories")


@asynccontextmanager
async def lifespan(app: FastAPI):
    context: AppContext = app.state.context
    context.storage.root.mkdir(parents=True, exist_ok=True)
    init_db(context.engine)
    logger.info(f"Database ready: {context.engine.url.render_as_string(hide_password=True)}")
    logger.info(f"Upload folder: {context.storage.root}")

    if context.settings.seed_sample_data:
        with context.session_factory() as db:
            seed_sample_recipes(context.repository(db))

    yield

    context.engine.dispose()
    logger.info("Database connection closed.")


def enforce_rate_limit(request: Request) -> None:
    """Apply the app's default per-IP limit to an API route.

    Runs as a router dependency: the matched endpoint is already in the
    scope, so each operation gets its own bucket per client address.
    Raises RateLimitExceeded.
    """
    limiter: Limiter = request.app.state.limiter
    limiter._check_request_limit(request, request.scope.get("endpoint"), True)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    context = AppContext.from_settings(settings)

    app = FastAPI(title="Kitchen Stories API", version="0.1.0", lifespan=lifespan)
    app.state.context = context

    # Rate limiter (per-IP)
    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
        key_style="endpoint",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(KitchenStoriesError, kitchen_stories_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_dependencies = [Depends(enforce_rate_limit)]
    app.include_router(ready_router, prefix="/api", tags=["ready"], dependencies=api_dependencies)
    app.include_router(recipes_router, prefix="/api", tags=["recipes"], dependencies=api_dependencies)

    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
    if Path(settings.public_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run(
        "kitchen_stories.main:app",
        host=default_settings.host,
        port=default_settings.port,
    )


if __name__ == "__main__":
    run()
