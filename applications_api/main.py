import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from . import __version__
from .config import Settings, get_settings
from .errors import ApplicationError
from .routes import dev, submissions
from .storage import ensure_dir

log = logging.getLogger("applications_api")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Uploads are written into an existing directory only.
        ensure_dir(settings.upload_dir)
        yield

    app = FastAPI(title="Applications Backend", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request: Request, exc: ApplicationError):
        if exc.status_code < 500:
            log.warning("Rejected submission: %s", exc.message)
        else:
            log.error("Submission failed: %s", exc.message, exc_info=exc)
        return PlainTextResponse(exc.client_message(), status_code=exc.status_code)

    app.include_router(submissions.router, prefix="/api")
    app.include_router(dev.router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=5000)
