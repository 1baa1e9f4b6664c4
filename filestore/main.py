"""Entry point for the file store service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from common.constants import PROFILES_BUCKET, SHARED_BUCKET
from common.logging_config import setup_logging
from filestore.blob_storage import BlobStore
from filestore.config import (
    DATABASE_PATH,
    FILESTORE_HOST,
    FILESTORE_PORT,
    PUBLIC_URL_PREFIX,
    UPLOAD_ROOT,
)
from filestore.database import Database
from filestore.exceptions import (
    ConflictError,
    FileStoreException,
    ForbiddenError,
    InconsistentStateError,
    InvalidInputError,
    NotFoundError,
    StorageUnavailableError,
)
from filestore.repositories.shared_file_repository import SharedFileRepository
from filestore.repositories.user_repository import UserRepository
from filestore.routes import file_router, profile_router
from filestore.service_locator import clear_services, get_blob_store, set_services
from filestore.services.file_service import FileService
from filestore.services.profile_service import ProfileService

logger = setup_logging('filestore')

GENERIC_ERROR_DETAIL = "Internal server error"


def _request_id(request: Request) -> str:
    return getattr(request.state, 'request_id', 'unknown')


def create_app(
    database_path: Optional[str] = None,
    upload_root: Optional[str] = None,
    public_url_prefix: str = PUBLIC_URL_PREFIX,
) -> FastAPI:
    """
    Build the FastAPI app with its database and blob store.

    Both are opened on startup (failing fast if not writable) and closed on shutdown.
    """
    database = Database(database_path or DATABASE_PATH)
    blob_store = BlobStore(upload_root or UPLOAD_ROOT, public_url_prefix=public_url_prefix)

    app = FastAPI(
        title="File Store",
        description="Self-hosted profile picture and shared file storage",
        version="1.0.0"
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

        response = await call_next(request)

        duration = time.time() - start_time

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    @app.on_event("startup")
    async def startup_event():
        """
        Open the database and blob store and wire up the services.
        """
        logger.info("File store starting up...")

        database.open()
        blob_store.open()

        set_services(
            file_service=FileService(SharedFileRepository(database), blob_store),
            profile_service=ProfileService(UserRepository(database), blob_store),
            blob_store=blob_store,
        )
        logger.info("Services initialized")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("File store shutting down...")
        clear_services()
        database.close()

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        logger.warning(f"Not found: {exc} [request_id={_request_id(request)}] path={request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "NOT_FOUND"}
        )

    @app.exception_handler(ForbiddenError)
    async def forbidden_handler(request: Request, exc: ForbiddenError):
        logger.warning(f"Forbidden: {exc} [request_id={_request_id(request)}] path={request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"detail": str(exc), "code": "FORBIDDEN"}
        )

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        logger.warning(f"Conflict: {exc} [request_id={_request_id(request)}] path={request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"detail": str(exc), "code": "CONFLICT"}
        )

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        logger.warning(f"Invalid input: {exc} [request_id={_request_id(request)}] path={request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "code": "INVALID_INPUT"}
        )

    @app.exception_handler(StorageUnavailableError)
    async def storage_unavailable_handler(request: Request, exc: StorageUnavailableError):
        logger.error(
            f"Storage unavailable: {exc} [request_id={_request_id(request)}] path={request.url.path}",
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": GENERIC_ERROR_DETAIL, "code": "STORAGE_UNAVAILABLE"}
        )

    @app.exception_handler(InconsistentStateError)
    async def inconsistent_state_handler(request: Request, exc: InconsistentStateError):
        logger.error(
            f"Inconsistent state: {exc} [request_id={_request_id(request)}] path={request.url.path}",
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": GENERIC_ERROR_DETAIL, "code": "INTERNAL_ERROR"}
        )

    @app.exception_handler(FileStoreException)
    async def filestore_exception_handler(request: Request, exc: FileStoreException):
        logger.error(
            f"File store exception: {exc} [request_id={_request_id(request)}] path={request.url.path}",
            exc_info=True
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": GENERIC_ERROR_DETAIL, "code": "INTERNAL_ERROR"}
        )

    app.include_router(file_router)
    app.include_router(profile_router)

    app.mount(
        public_url_prefix,
        StaticFiles(directory=str(blob_store.root), check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    def health_check():
        """
        Health check with blob counts per bucket.
        """
        store = get_blob_store()
        return {
            "status": "OK",
            "service": "filestore",
            "storage": {
                PROFILES_BUCKET: store.count(PROFILES_BUCKET),
                SHARED_BUCKET: store.count(SHARED_BUCKET),
            }
        }

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "filestore.main:app",
        host=FILESTORE_HOST,
        port=FILESTORE_PORT,
    )


if __name__ == "__main__":
    main()
