import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from autobrief.api.dependencies import admit_request, get_admission_pipeline, get_book_service
from autobrief.core.admission import AdmissionPipeline, AdmissionResult
from autobrief.core.errors import AppError
from autobrief.core.exception_handlers import build_error_content, error_status
from autobrief.schemas.book import ArtifactResponse, IngestResponse
from autobrief.services.book_service import BookService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Books"])

# Other methods are answered by the pipeline through the 405 handler in
# autobrief.core.exception_handlers
GATED_METHODS = [AdmissionPipeline.accepted_method, "OPTIONS"]

INGEST_FIELDS = ("bookTitle",)
GENERATE_FIELDS = ("slug", "artifactType")

_REJECTION_RESPONSES = {
    400: {"description": "Validation Error"},
    405: {"description": "Method Not Allowed"},
    429: {"description": "Too Many Requests"},
}

Pipeline = Annotated[AdmissionPipeline, Depends(get_admission_pipeline)]
Service = Annotated[BookService, Depends(get_book_service)]


def _error_response(admission: AdmissionResult, exc: AppError) -> Response:
    status_code = error_status(exc)
    logger.warning(
        "app_error_handled",
        extra={"error_code": exc.code, "status_code": status_code},
    )
    return admission.respond(build_error_content(exc), status_code=status_code)


@router.api_route(
    "/ingest",
    methods=GATED_METHODS,
    response_model=IngestResponse,
    responses={**_REJECTION_RESPONSES, 404: {"description": "Book not found"}},
)
async def ingest_book(request: Request, pipeline: Pipeline, service: Service) -> Response:
    """Analyse a book by title, serving the stored analysis when one exists.

    Body: ``{"bookTitle": "..."}``.
    """
    admission = await admit_request(request, pipeline, INGEST_FIELDS)
    if not admission.admitted:
        return admission.response

    try:
        result = await service.ingest(admission.body["bookTitle"])
    except AppError as exc:
        return _error_response(admission, exc)

    return admission.respond(result.model_dump())


@router.api_route(
    "/generate",
    methods=GATED_METHODS,
    response_model=ArtifactResponse,
    responses={**_REJECTION_RESPONSES, 404: {"description": "Book not ingested yet"}},
)
async def generate_artifact(request: Request, pipeline: Pipeline, service: Service) -> Response:
    """Generate slides or flashcards from an ingested book.

    Body: ``{"slug": "...", "artifactType": "slides" | "flashcards"}``.
    """
    admission = await admit_request(request, pipeline, GENERATE_FIELDS)
    if not admission.admitted:
        return admission.response

    try:
        result = await service.generate_artifact(
            admission.body["slug"],
            admission.body["artifactType"],
        )
    except AppError as exc:
        return _error_response(admission, exc)

    return admission.respond(result.model_dump())
