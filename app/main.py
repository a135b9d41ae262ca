from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.admin.records.router import router as records_router
from app.api.admin.recycle_bin.router import router as recycle_bin_router
from app.api.admin.recycle_history.router import router as recycle_history_router
from app.api.auth.router import router as auth_router
from app.core.config import settings
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Recycle Bin")

    # CORS: allow the admin frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(records_router)
    app.include_router(recycle_bin_router)
    app.include_router(recycle_history_router)

    return app


app = create_app()
