from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings, logger
from api.endpoints import router

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    """Build the dispense calculator app with CORS and the versioned router."""
    application = FastAPI(
        title="Prescription Dispense Calculator API",
        description="Turns a SIG and a days' supply into a dispense quantity, package plan and warnings",
        version="1.0.0"
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router, prefix=API_PREFIX)
    logger.info(f"Dispense calculator routes mounted under {API_PREFIX}")
    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
