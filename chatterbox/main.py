import logging
import os
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatterbox import __version__
from chatterbox.config import Settings
from chatterbox.database import Database
from chatterbox.errors import register_exception_handlers
from chatterbox.payments import PaymentBridge
from chatterbox.routes import routers

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    payments: Optional[PaymentBridge] = None,
) -> FastAPI:
    settings = settings or Settings()
    database = database or Database(settings.mongo_uri, settings.database_name)
    payments = payments or PaymentBridge.from_settings(settings)

    app = FastAPI(title="Chatter Box API", version=__version__)
    app.state.settings = settings
    app.state.database = database
    app.state.payments = payments

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.on_event("startup")
    def on_start():
        database.connect()
        database.ensure_indexes()
        if settings.is_production and settings.jwt_secret == Settings.model_fields["jwt_secret"].default:
            logger.warning("JWT_SECRET is not set; sessions are signed with the default key")

    @app.on_event("shutdown")
    def on_stop():
        database.close()

    # ---------- Basic ----------

    @app.get("/")
    def root():
        return {"status": "success", "message": "Server is Running!"}

    @app.get("/test")
    def test_database():
        response = {
            "backend": "running",
            "database": "not available",
            "collections": [],
        }
        if not database.connected:
            return response
        try:
            response["collections"] = database.list_collection_names()
            response["database"] = "connected"
        except Exception as e:
            response["database"] = f"error: {str(e)[:80]}"
        return response

    for router in routers:
        app.include_router(router)

    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    configure_logging(settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
