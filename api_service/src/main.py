"""
FastAPI backend for the transcript annotation service.

Endpoints:
    GET    /health                                              Health check
    POST   /api/v1/sessions                                     Upload a VTT file and start a session
    GET    /api/v1/sessions/{session_id}                        Fetch a session
    GET    /api/v1/sessions/{session_id}/summary                Completion summary + export control
    PUT    /api/v1/sessions/{session_id}/cues/{index}/importance  Rate a cue
    DELETE /api/v1/sessions/{session_id}/cues/{index}/importance  Clear a cue rating
    POST   /api/v1/sessions/{session_id}/export                 Download the annotation archive
    DELETE /api/v1/sessions/{session_id}                        Discard a session
"""

from typing import Optional
from fastapi import FastAPI, UploadFile, File, Form, status, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
import uvicorn

from core_transcript.engine.completion import export_control_for, summarize_session_completion
from core_transcript.engine.navigation import first_unrated_index
from core_transcript.engine.statistics import session_statistics
from domain.models import AnnotationSession
from shared_utils.config_loader import get_settings
from shared_utils.logging_utils import ContextualLogger, configure_logging
from shared_utils.constants import LogScope, APIEndpoints
from shared_utils.error_handler import AppException, handle_error
from shared_utils.validation import InputValidator
from shared_utils.di_container import get_di_container


# ---------------------------------------------------------------------------
# Application bootstrap
# ---------------------------------------------------------------------------

settings = get_settings()
configure_logging(settings.environment, settings.log_level)
logger = ContextualLogger(scope=LogScope.API)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=settings.app_description,
)

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Drop sessions past the expiry window once at startup
try:
    _removed = get_di_container().get_session_service().cleanup_expired_sessions()
    logger.info(
        "api_initialized",
        environment=settings.environment,
        expired_sessions_removed=len(_removed),
    )
except Exception as e:
    logger.error("api_initialization_failed", error=str(e))
    raise


class ImportanceUpdate(BaseModel):
    """Request body for rating a cue."""
    importance: int


def _session_body(session: AnnotationSession) -> dict:
    return session.model_dump(mode="json", by_alias=True, exclude={"original_file_content"})


def _summary_body(session: AnnotationSession) -> dict:
    summary = summarize_session_completion(session)
    pending = get_di_container().get_export_service().is_pending(session.session_id)
    return {
        "summary": summary.model_dump(mode="json", by_alias=True),
        "exportControl": export_control_for(summary, pending=pending).model_dump(mode="json", by_alias=True),
        "firstUnratedIndex": first_unrated_index(session.cues),
    }


def _unexpected_error(e: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=handle_error(e, scope=LogScope.API),
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get(APIEndpoints.HEALTH)
def health_check() -> dict:
    """Health check endpoint."""
    logger.debug("health_check_requested")
    return {
        "status": "healthy",
        "environment": settings.environment,
        "session_store": settings.session_store,
        "archive_store": settings.archive_store,
    }


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@app.post(APIEndpoints.SESSIONS)
@limiter.limit("30/minute")
async def create_session(
    request: Request,
    file: UploadFile = File(...),
    meeting_id: Optional[str] = Form(None),
    annotator: Optional[str] = Form(None),
) -> JSONResponse:
    """Parse an uploaded VTT file and start an annotation session.

    Returns 201 with the session, or 422 with classified parse errors.
    """
    try:
        filename = InputValidator.sanitize_filename(file.filename or "")
        content = await file.read()

        container = get_di_container()
        outcome = container.get_upload_service().parse_upload(
            filename, content, content_type=file.content_type
        )
        result = outcome.result

        if not result.success:
            first = result.first_error
            logger.info(
                "session_upload_rejected",
                filename=filename,
                error_type=first.type.value if first else None,
            )
            return JSONResponse(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                content={
                    "errors": [err.model_dump(mode="json", by_alias=True) for err in result.errors],
                    "warnings": result.warnings,
                },
            )

        session = container.get_session_service().create_session(
            cues=result.cues or [],
            original_file_name=filename,
            original_file_content=outcome.original_content,
            meeting_id=meeting_id,
            annotator=annotator,
        )
        logger.info("session_upload_accepted", session_id=session.session_id, cue_count=len(session.cues))
        return JSONResponse(
            status_code=status.HTTP_201_CREATED,
            content={"session": _session_body(session), "warnings": result.warnings},
        )

    except AppException as e:
        logger.warning("session_upload_error", error_code=e.error_code)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.get(APIEndpoints.SESSION)
async def get_session(session_id: str) -> JSONResponse:
    """Fetch a stored session."""
    try:
        session = get_di_container().get_session_service().get_session(session_id)
        return JSONResponse(content=_session_body(session))
    except AppException as e:
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.get(APIEndpoints.SESSION_SUMMARY)
async def get_session_summary(session_id: str) -> JSONResponse:
    """Completion summary, export control state and statistics."""
    try:
        session = get_di_container().get_session_service().get_session(session_id)
        body = _summary_body(session)
        body["statistics"] = session_statistics(session).model_dump(mode="json", by_alias=True)
        return JSONResponse(content=body)
    except AppException as e:
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.put(APIEndpoints.CUE_IMPORTANCE)
async def rate_cue(session_id: str, cue_index: int, body: ImportanceUpdate) -> JSONResponse:
    """Set the importance of one cue."""
    try:
        session = get_di_container().get_session_service().rate_cue(
            session_id, cue_index, body.importance
        )
        return JSONResponse(content={"session": _session_body(session), **_summary_body(session)})
    except AppException as e:
        logger.warning("rate_cue_error", error_code=e.error_code, session_id=session_id)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.delete(APIEndpoints.CUE_IMPORTANCE)
async def clear_cue_rating(session_id: str, cue_index: int) -> JSONResponse:
    """Remove the importance of one cue."""
    try:
        session = get_di_container().get_session_service().clear_rating(session_id, cue_index)
        return JSONResponse(content={"session": _session_body(session), **_summary_body(session)})
    except AppException as e:
        logger.warning("clear_rating_error", error_code=e.error_code, session_id=session_id)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.post(APIEndpoints.SESSION_EXPORT)
async def export_session(session_id: str) -> Response:
    """Build the annotation archive and return it as a download.

    The session is marked exported only after the archive was produced.
    """
    try:
        container = get_di_container()
        session_service = container.get_session_service()
        session = session_service.get_session(session_id)

        result = container.get_export_service().export_session(session)
        session_service.mark_exported(session_id)

        logger.info(
            "session_export_delivered",
            session_id=session_id,
            filename=result.filename,
            location=result.location,
        )
        return Response(
            content=result.archive_bytes,
            media_type="application/zip",
            headers={
                "Content-Disposition": f'attachment; filename="{result.filename}"',
                "X-Annotation-Count": str(result.annotation_count),
            },
        )

    except AppException as e:
        logger.warning("session_export_error", error_code=e.error_code, session_id=session_id)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


@app.delete(APIEndpoints.SESSION)
async def delete_session(session_id: str) -> Response:
    """Discard a session."""
    try:
        get_di_container().get_session_service().clear_session(session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except AppException as e:
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    except Exception as e:
        return _unexpected_error(e)


if __name__ == "__main__":
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=settings.api_port,
        log_level=settings.log_level.lower()
    )
