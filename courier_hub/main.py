# courier_hub/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from courier_hub.api.v1.router import api_router
from courier_hub.config.database import init_db
from courier_hub.config.settings import settings
from courier_hub.core.middleware import setup_middleware

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"{settings.app_name} starting - version {settings.version}")
    logger.info(f"Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(f"Identity provider: {settings.identity_provider}")
    init_db()

    yield

    # Shutdown
    logger.info(f"{settings.app_name} shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Parcel delivery coordination: shipments, rider legs, earnings and payments",
        lifespan=lifespan,
    )

    # Setup middleware
    setup_middleware(app)

    # Include routers
    app.include_router(api_router)

    @app.get("/")
    def root():
        return {"message": f"{settings.app_name} is running", "version": settings.version}

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "version": settings.version,
            "app": settings.app_name,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "courier_hub.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
