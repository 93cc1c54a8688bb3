"""
EarthLord Client - FastAPI Application
Local API over the auth flow coordinator for the game's presentation layer
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from contextlib import asynccontextmanager

from shared.schemas.auth import LanguageOption
from shared.utils.logger import init_logging
from earthlord.config import (
    get_app_config, get_google_config, get_storage_config, get_supabase_config,
    validate_configuration
)
from earthlord.routes import auth, health, preferences
from earthlord.services.auth_manager import AuthManager
from earthlord.services.language_manager import LanguageManager
from earthlord.utils.edge_functions import EdgeFunctionClient
from earthlord.utils.session_storage import create_session_storage
from earthlord.utils.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    init_logging()
    logger.info("EarthLord client starting up...")

    app_config = app.state.app_config
    app.state.language_manager = LanguageManager(
        app_config.preferences_path,
        default=LanguageOption(app_config.default_language)
    )
    app.state.supabase = None
    app.state.auth_manager = None
    functions = None

    if validate_configuration():
        supabase_config = get_supabase_config()
        supabase = SupabaseClient(supabase_config, storage=create_session_storage(get_storage_config()))
        await supabase.start()

        functions = EdgeFunctionClient(supabase_config)
        await functions.start()

        language_manager = app.state.language_manager
        auth_manager = AuthManager(
            supabase,
            functions,
            get_google_config(),
            supabase_config,
            language_provider=lambda: language_manager.current_language_code
        )
        await auth_manager.start()
        await auth_manager.check_session()

        app.state.supabase = supabase
        app.state.auth_manager = auth_manager

    logger.info("EarthLord client startup complete")

    yield

    logger.info("EarthLord client shutting down...")
    if app.state.auth_manager is not None:
        await app.state.auth_manager.close()
    if functions is not None:
        await functions.stop()
    if app.state.supabase is not None:
        await app.state.supabase.stop()


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    app_config = get_app_config()

    app = FastAPI(
        title="EarthLord Client",
        description="Auth flow coordinator for the EarthLord game client",
        version=app_config.service_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.app_config = app_config

    # The presentation layer runs on the same machine
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request, exc):
        """Custom HTTP exception handler"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(preferences.router, prefix="/preferences", tags=["Preferences"])

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": app_config.service_name,
            "version": app_config.service_version,
            "description": "Auth flow coordinator for the EarthLord game client",
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    config = get_app_config()
    uvicorn.run(
        "earthlord.main:app",
        host=config.host,
        port=config.port,
        log_level="debug" if config.debug else "info"
    )
