from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from atrium.modules.config import settings, configure_logging
from atrium.modules.database import database, connect_to_db, disconnect_from_db
from atrium.modules.migration_runner import run_migrations
from atrium.modules.system_endpoints import router as system_router
from atrium.modules.users.api import admin_router, user_router, register_exception_handlers

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await connect_to_db()
    if settings.run_migrations:
        await run_migrations(database)
    yield
    # Shutdown
    await disconnect_from_db()


def create_app(use_lifespan: bool = True) -> FastAPI:
    app = FastAPI(title="Atrium User Service", version="0.1.0", lifespan=lifespan if use_lifespan else None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(user_router)
    app.include_router(admin_router)
    app.include_router(system_router)

    @app.get("/")
    async def root():
        return {"status": "online", "system": "Atrium User Service"}

    return app


app = create_app()
