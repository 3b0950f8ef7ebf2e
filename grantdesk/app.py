import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
from fastapi import Body, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from .core.config import Config
from .core.errors import RepositoryError, SessionTransitionError
from .core.http import create_http_client
from .core.middleware import (
    global_exception_handler,
    log_requests,
    repository_exception_handler,
    session_exception_handler,
)
from .core.validation import validate_record_id, validate_upload
from .forms import FormRegistry, console_forms
from .models import UploadContent
from .sections import SectionId, all_sections, describe
from .services.feedback import QueueFeedbackChannel
from .services.orchestrator import Orchestrator
from .services.repository import RepositoryClient
from .views import dialog_title, session_view, table_view

logger = logging.getLogger(__name__)


def _orchestrator(request: Request) -> Orchestrator:
    return request.app.state.orchestrator


def _console_view(orchestrator: Orchestrator, forms: FormRegistry) -> Dict[str, Any]:
    descriptor = describe(orchestrator.active_section)
    return {
        "activeSection": descriptor.id.value,
        "table": table_view(orchestrator.records, descriptor),
        "session": session_view(orchestrator.session),
        "dialogTitle": dialog_title(orchestrator.session, descriptor),
        "dialog": orchestrator.render_form(forms),
    }


def _section_or_404(section_id: str) -> SectionId:
    try:
        return describe(section_id).id
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown section: {section_id}")


def create_app(config: Optional[Config] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    """Build the console API around a single orchestrator.

    ``transport`` replaces the network layer of the records API client,
    which is how tests run the console against a fake server.
    """
    config = config or Config()
    repository = RepositoryClient(create_http_client(config, transport=transport))
    feedback = QueueFeedbackChannel()
    orchestrator = Orchestrator(repository, feedback)
    forms = console_forms()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await orchestrator.select_section(orchestrator.active_section)
        yield
        await repository.aclose()

    app = FastAPI(title="Grant Desk Console API", lifespan=lifespan)
    app.state.config = config
    app.state.orchestrator = orchestrator
    app.state.feedback = feedback
    app.state.forms = forms

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _log_requests(request, call_next):
        return await log_requests(request, call_next)

    app.add_exception_handler(RepositoryError, repository_exception_handler)
    app.add_exception_handler(SessionTransitionError, session_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    @app.get("/")
    async def root():
        """Return basic API information."""
        return {
            "service": "Grant Desk Console API",
            "version": "1.0",
            "endpoints": {
                "sections": "/sections",
                "view": "/view",
                "notifications": "/notifications",
                "health": "/health",
            },
            "timestamp": datetime.now().isoformat(),
        }

    @app.get("/health")
    async def health_check(request: Request):
        """Configuration check plus one read against the records API."""
        health_start_time = time.time()
        try:
            config.validate()
            await _orchestrator(request).check_upstream()
            health_duration = time.time() - health_start_time
            return {
                "status": "healthy",
                "service": "grant-desk-console",
                "timestamp": datetime.now().isoformat(),
                "response_time_ms": round(health_duration * 1000, 2),
            }
        except (ValueError, RepositoryError) as e:
            health_duration = time.time() - health_start_time
            logger.error(f"Health check failed: {str(e)} - Duration: {health_duration:.1f}s")
            return {
                "status": "unhealthy",
                "service": "grant-desk-console",
                "timestamp": datetime.now().isoformat(),
                "error": str(e),
                "response_time_ms": round(health_duration * 1000, 2),
            }

    @app.get("/sections")
    async def list_sections():
        return [
            {
                "id": d.id.value,
                "title": d.title,
                "description": d.description,
                "displayFields": list(d.display_fields),
                "navLabel": d.nav_label,
            }
            for d in all_sections()
        ]

    @app.post("/sections/{section_id}/select")
    async def select_section(section_id: str, request: Request):
        orchestrator = _orchestrator(request)
        await orchestrator.select_section(_section_or_404(section_id))
        return _console_view(orchestrator, request.app.state.forms)

    @app.get("/view")
    async def current_view(request: Request):
        return _console_view(_orchestrator(request), request.app.state.forms)

    @app.post("/session/create")
    async def open_create(request: Request):
        orchestrator = _orchestrator(request)
        orchestrator.open_create()
        return _console_view(orchestrator, request.app.state.forms)

    @app.post("/session/edit/{record_id}")
    async def open_edit(record_id: str, request: Request):
        validate_record_id(record_id)
        orchestrator = _orchestrator(request)
        try:
            orchestrator.open_edit_by_id(record_id)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Record not found: {record_id}")
        return _console_view(orchestrator, request.app.state.forms)

    @app.post("/session/cancel")
    async def cancel(request: Request):
        orchestrator = _orchestrator(request)
        orchestrator.cancel()
        return _console_view(orchestrator, request.app.state.forms)

    @app.post("/session/save")
    async def save(request: Request, fields: Dict[str, Any] = Body(...)):
        orchestrator = _orchestrator(request)
        saved = await orchestrator.save(fields)
        return {"saved": saved, "view": _console_view(orchestrator, request.app.state.forms)}

    @app.delete("/records/{record_id}")
    async def delete_record(record_id: str, request: Request, confirm: bool = False):
        """Delete a record of the active section.

        ``confirm=true`` is the front end's signal that the user answered the
        confirmation prompt; without it nothing is sent upstream.
        """
        validate_record_id(record_id)
        orchestrator = _orchestrator(request)
        deleted = await orchestrator.delete(record_id, lambda: confirm)
        return {"deleted": deleted, "view": _console_view(orchestrator, request.app.state.forms)}

    @app.post("/upload")
    async def upload(request: Request, file: UploadFile = File(...)):
        data = await file.read()
        validate_upload(file.filename, len(data), config.MAX_UPLOAD_BYTES)
        content = UploadContent(
            file_name=file.filename,
            data=data,
            content_type=file.content_type or "application/octet-stream",
        )
        result = await _orchestrator(request).upload_attachment(content)
        return result.to_dict()

    @app.get("/notifications")
    async def notifications(request: Request):
        return [n.to_dict() for n in request.app.state.feedback.drain()]

    return app


app = create_app()
