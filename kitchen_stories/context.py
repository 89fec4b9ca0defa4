"""Process-scoped application context.

Built once by ``create_app`` and stored on ``app.state.context``; request
dependencies read their collaborators from here instead of module globals.
"""

from dataclasses import dataclass
from pathlib import Path

from fastapi import Depends, Request
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .auth import AdminGate
from .db import create_db_engine, create_session_factory, get_db
from .repository import RecipeRepository
from .services.storage import LocalImageStorage
from .settings import Settings


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    storage: LocalImageStorage
    gate: AdminGate

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        engine = create_db_engine(settings.database_url, echo=settings.db_echo)
        return cls(
            settings=settings,
            engine=engine,
            session_factory=create_session_factory(engine),
            storage=LocalImageStorage(
                root=Path(settings.upload_dir),
                max_bytes=settings.max_upload_bytes,
                allowed_types=settings.allowed_image_types,
            ),
            gate=AdminGate(settings.admin_password),
        )

    def repository(self, session: Session) -> RecipeRepository:
        return RecipeRepository(session, self.storage)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def get_repository(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
) -> RecipeRepository:
    return context.repository(db)
