"""
FastAPI main application for the Books API.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.config import APIConfig, config
from api.models import Book, BookInput, BookListQuery, HealthResponse, MessageResponse
from api.registry import BookRegistry, BookRegistryError, REQUIRED_FIELDS_MESSAGE
from utilities.logger import get_logger, setup_logging

# Setup logging
logger = get_logger(__name__)

BAD_REQUEST = {status.HTTP_400_BAD_REQUEST: {"model": MessageResponse, "description": "Bad request"}}
NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": MessageResponse, "description": "Book not found"}}

router = APIRouter()


def get_registry(request: Request) -> BookRegistry:
    """Registry owned by the running application."""
    return request.app.state.registry


# Health check endpoint
@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check(request: Request, registry: BookRegistry = Depends(get_registry)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=request.app.version,
        book_count=registry.count()
    )


# Books endpoints
@router.get(
    "/books",
    response_model=List[Book],
    tags=["Books"],
    summary="Retrieve a list of all books",
    response_description="A list of books",
)
async def list_books(
    author: Optional[str] = Query(None, description="Filter by author name"),
    page: Optional[str] = Query(None, description="Page number for pagination"),
    size: Optional[str] = Query(None, description="Number of items per page"),
    registry: BookRegistry = Depends(get_registry)
):
    """
    List books in insertion order.

    - **author**: case-insensitive substring of the author name
    - **page**, **size**: applied only when both are given
    """
    query_params = BookListQuery(author=author, page=page, size=size)
    return registry.list_books(query_params)


@router.get(
    "/books/{book_id}",
    response_model=Book,
    tags=["Books"],
    summary="Retrieve a single book by ID",
    response_description="The book data",
    responses=NOT_FOUND,
)
async def get_book(
    book_id: str = Path(..., description="The book ID", json_schema_extra={"type": "integer"}),
    registry: BookRegistry = Depends(get_registry)
):
    return registry.get_book(book_id)


@router.post(
    "/books",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"],
    summary="Create a new book",
    response_description="The book was successfully created",
    responses=BAD_REQUEST,
)
async def create_book(
    payload: BookInput,
    registry: BookRegistry = Depends(get_registry)
):
    return registry.create_book(payload)


@router.put(
    "/books/{book_id}",
    response_model=Book,
    tags=["Books"],
    summary="Update a book by ID",
    response_description="The updated book",
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def update_book(
    payload: BookInput,
    book_id: str = Path(..., description="The book ID", json_schema_extra={"type": "integer"}),
    registry: BookRegistry = Depends(get_registry)
):
    """Replace title, author and publishedYear; the id never changes."""
    return registry.update_book(book_id, payload)


@router.delete(
    "/books/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    tags=["Books"],
    summary="Delete a book by ID",
    response_description="The book was deleted",
    responses=NOT_FOUND,
)
async def delete_book(
    book_id: str = Path(..., description="The book ID", json_schema_extra={"type": "integer"}),
    registry: BookRegistry = Depends(get_registry)
):
    registry.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Exception handlers
async def registry_exception_handler(request: Request, exc: BookRegistryError):
    """Report validation and not-found errors as ``{message}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content=MessageResponse(message=exc.message).model_dump()
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """A body that is not a JSON object is treated like one with no fields."""
    logger.debug("Request body rejected", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=MessageResponse(message=REQUIRED_FIELDS_MESSAGE).model_dump()
    )


def drop_validation_error_responses(app: FastAPI) -> None:
    """Request validation failures are answered with 400, never 422."""
    default_openapi = app.openapi

    def openapi():
        if app.openapi_schema is None:
            schema = default_openapi()
            for path_item in schema.get("paths", {}).values():
                for operation in path_item.values():
                    operation.get("responses", {}).pop("422", None)
            schemas = schema.get("components", {}).get("schemas", {})
            schemas.pop("HTTPValidationError", None)
            schemas.pop("ValidationError", None)
        return app.openapi_schema

    app.openapi = openapi


def create_app(
    registry: Optional[BookRegistry] = None,
    app_config: Optional[APIConfig] = None
) -> FastAPI:
    """
    Build the application around a single book registry.

    Args:
        registry: Registry to serve; a fresh empty one is created if omitted
        app_config: Settings to use instead of the environment-derived config

    Returns:
        Configured FastAPI application
    """
    settings = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        setup_logging(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            debug=settings.debug
        )
        logger.info("Starting Books API", url=settings.server_url(), docs=settings.docs_url())

        yield

        logger.info("Shutting down Books API", books=app.state.registry.count())

    app = FastAPI(
        title=settings.api_title,
        description=settings.api_description,
        version=settings.api_version,
        servers=[{"url": settings.server_url()}],
        openapi_tags=[{"name": "Books", "description": "The books managing API"}],
        docs_url="/api-docs",
        openapi_url="/api-docs/openapi.json",
        redoc_url=None,
        lifespan=lifespan
    )
    app.state.registry = registry if registry is not None else BookRegistry()
    app.state.config = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_exception_handler(BookRegistryError, registry_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error("Unhandled exception", error=str(exc), path=request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=MessageResponse(
                message=str(exc) if settings.debug else "Internal server error"
            ).model_dump()
        )

    app.include_router(router)
    drop_validation_error_responses(app)
    return app


# Create FastAPI application
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
