"""FastAPI routes for the training-set console.

Every route acts on one customer's :class:`TrainingSetWorkspace`, found
(or created) in ``app.state.workspaces`` from the trusted
``X-Customer-Id`` header set by the auth proxy.  Routes under
``/bots/{bot_id}`` make that bot active first; naming a different bot
than last time switches the workspace (selection cleared, documents
reloaded).

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                        Method  Description
# ───────────────────────────────────────────────────────────────────
# /api/v1/bots/{bot}/documents                    GET     List documents
# /api/v1/bots/{bot}/documents/refresh            POST    Reload documents
# /api/v1/bots/{bot}/documents/{doc}              DELETE  Delete one (confirm=true)
# /api/v1/bots/{bot}/selection                    PUT     Replace selection
# /api/v1/bots/{bot}/selection                    DELETE  Clear selection
# /api/v1/bots/{bot}/selection/all                POST    Toggle select-all
# /api/v1/bots/{bot}/selection/{doc}/toggle       POST    Toggle one document
# /api/v1/bots/{bot}/content/files                POST    Upload file(s)
# /api/v1/bots/{bot}/content/text                 POST    Add text
# /api/v1/bots/{bot}/content/qa                   POST    Add Q&A pair
# /api/v1/bots/{bot}/content/website              POST    Scrape / crawl
# /api/v1/bots/{bot}/content/video                POST    YouTube transcript
# /api/v1/bots/{bot}/bulk/retrain                 POST    Retrain ids / selection
# /api/v1/bots/{bot}/bulk/delete                  POST    Delete ids / selection
# /api/v1/bots/{bot}/schedule                     GET     Retrain schedule
# /api/v1/bots/{bot}/schedule                     PUT     Set + save schedule
# /api/v1/notifications/active                    GET     Active notification
# /api/v1/notifications/dismiss                   POST    Dismiss it
# /api/v1/health                                  GET     Health check
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, File, Header, HTTPException, Query, Request, UploadFile

from src.api.schemas import (
    ActiveNotificationResponse,
    BulkRequest,
    BulkResponse,
    DismissResponse,
    DocumentListResponse,
    DocumentResponse,
    ErrorResponse,
    HealthResponse,
    NotificationResponse,
    QAContentRequest,
    ScheduleResponse,
    ScheduleUpdateRequest,
    SelectionRequest,
    SelectionResponse,
    SubmissionResponse,
    TextContentRequest,
    VideoContentRequest,
    WebsiteContentRequest,
)
from src.models.document import RetrainSchedule
from src.models.submission import SubmissionOutcome, UploadedFile
from src.services.document_formatter import DocumentFormatter
from src.services.workspace import TrainingSetWorkspace
from src.utils.errors import ValidationError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_formatter = DocumentFormatter()

MSG_DELETE_UNCONFIRMED = "Deletion must be confirmed"

_ERROR_RESPONSES = {
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _customer_workspace(
    request: Request,
    x_customer_id: Annotated[int, Header()],
) -> TrainingSetWorkspace:
    """Return (creating on first use) the workspace for the calling customer."""
    workspaces: dict[int, TrainingSetWorkspace] = request.app.state.workspaces
    workspace = workspaces.get(x_customer_id)
    if workspace is None:
        workspace = TrainingSetWorkspace(
            x_customer_id,
            request.app.state.backend,
            request.app.state.settings,
        )
        workspaces[x_customer_id] = workspace
        _logger.info("workspace_created", customer_id=x_customer_id)
    return workspace


async def _bot_workspace(
    bot_id: int,
    workspace: Annotated[TrainingSetWorkspace, Depends(_customer_workspace)],
) -> TrainingSetWorkspace:
    """Make *bot_id* the workspace's active bot, loading it if it changed."""
    if workspace.bot_id != bot_id:
        await workspace.switch_bot(bot_id)
    return workspace


CustomerWorkspaceDep = Annotated[TrainingSetWorkspace, Depends(_customer_workspace)]
WorkspaceDep = Annotated[TrainingSetWorkspace, Depends(_bot_workspace)]


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------


def _document_list(workspace: TrainingSetWorkspace) -> DocumentListResponse:
    registry = workspace.registry
    selected = registry.selected_ids
    bulk_action = workspace.bulk.current_action
    return DocumentListResponse(
        bot_id=registry.bot_id,
        documents=[
            DocumentResponse(**_formatter.format_document(doc, doc.id in selected))
            for doc in registry.documents
        ],
        selected_ids=sorted(selected),
        all_selected=registry.is_all_selected(),
        uploading=workspace.dispatcher.uploading,
        bulk_action=bulk_action.value if bulk_action else None,
    )


def _selection(workspace: TrainingSetWorkspace) -> SelectionResponse:
    return SelectionResponse(
        selected_ids=sorted(workspace.registry.selected_ids),
        all_selected=workspace.registry.is_all_selected(),
    )


def _submission(outcome: SubmissionOutcome) -> SubmissionResponse:
    scrape = outcome.scrape
    return SubmissionResponse(
        kind=outcome.kind,
        message=outcome.message,
        pages_scraped=scrape.pages_scraped if scrape else None,
        title=scrape.title if scrape else None,
    )


def _schedule(workspace: TrainingSetWorkspace) -> ScheduleResponse:
    manager = workspace.schedule
    draft: RetrainSchedule = manager.draft
    committed: RetrainSchedule = manager.committed
    return ScheduleResponse(
        frequency=draft.frequency.value,
        time=draft.time,
        committed_frequency=committed.frequency.value,
        committed_time=committed.time,
        banner=committed.describe(),
        dirty=manager.is_dirty,
    )


def _not_found(exc: KeyError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc.args[0]) if exc.args else "Not found")


# ---------------------------------------------------------------------------
# Documents and selection
# ---------------------------------------------------------------------------


@router.get(
    "/bots/{bot_id}/documents",
    response_model=DocumentListResponse,
    responses=_ERROR_RESPONSES,
    summary="List the bot's documents",
)
async def list_documents(workspace: WorkspaceDep) -> DocumentListResponse:
    return _document_list(workspace)


@router.post(
    "/bots/{bot_id}/documents/refresh",
    response_model=DocumentListResponse,
    responses=_ERROR_RESPONSES,
    summary="Reload the bot's documents from the backend",
)
async def refresh_documents(bot_id: int, workspace: WorkspaceDep) -> DocumentListResponse:
    await workspace.registry.load(bot_id)
    return _document_list(workspace)


@router.put("/bots/{bot_id}/selection", response_model=SelectionResponse)
async def replace_selection(body: SelectionRequest, workspace: WorkspaceDep) -> SelectionResponse:
    try:
        workspace.registry.select(body.ids)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return _selection(workspace)


@router.delete("/bots/{bot_id}/selection", response_model=SelectionResponse)
async def clear_selection(workspace: WorkspaceDep) -> SelectionResponse:
    workspace.registry.clear()
    return _selection(workspace)


@router.post("/bots/{bot_id}/selection/all", response_model=SelectionResponse)
async def toggle_select_all(workspace: WorkspaceDep) -> SelectionResponse:
    workspace.registry.toggle_all()
    return _selection(workspace)


@router.post("/bots/{bot_id}/selection/{document_id}/toggle", response_model=SelectionResponse)
async def toggle_selection(document_id: int, workspace: WorkspaceDep) -> SelectionResponse:
    try:
        workspace.registry.toggle(document_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return _selection(workspace)


# ---------------------------------------------------------------------------
# Content submission
# ---------------------------------------------------------------------------


@router.post(
    "/bots/{bot_id}/content/files",
    response_model=SubmissionResponse,
    responses=_ERROR_RESPONSES,
    summary="Upload one or more PDF / Word / TXT / CSV files",
)
async def upload_files(
    workspace: WorkspaceDep,
    files: Annotated[list[UploadFile], File()],
) -> SubmissionResponse:
    uploaded = [
        UploadedFile(
            filename=upload.filename or "unknown",
            content=await upload.read(),
            media_type=upload.content_type,
        )
        for upload in files
    ]
    return _submission(await workspace.upload_files(uploaded))


@router.post("/bots/{bot_id}/content/text", response_model=SubmissionResponse, responses=_ERROR_RESPONSES)
async def add_text(body: TextContentRequest, workspace: WorkspaceDep) -> SubmissionResponse:
    return _submission(await workspace.add_text(body.content, title=body.title))


@router.post("/bots/{bot_id}/content/qa", response_model=SubmissionResponse, responses=_ERROR_RESPONSES)
async def add_qa(body: QAContentRequest, workspace: WorkspaceDep) -> SubmissionResponse:
    return _submission(await workspace.add_qa(body.question, body.answer))


@router.post(
    "/bots/{bot_id}/content/website",
    response_model=SubmissionResponse,
    responses=_ERROR_RESPONSES,
    summary="Scrape a single page or crawl a whole site",
)
async def scrape_website(body: WebsiteContentRequest, workspace: WorkspaceDep) -> SubmissionResponse:
    return _submission(await workspace.scrape_website(body.url, full_site=body.full_site))


@router.post("/bots/{bot_id}/content/video", response_model=SubmissionResponse, responses=_ERROR_RESPONSES)
async def extract_video(body: VideoContentRequest, workspace: WorkspaceDep) -> SubmissionResponse:
    return _submission(await workspace.extract_video(body.url))


# ---------------------------------------------------------------------------
# Bulk operations
# ---------------------------------------------------------------------------


@router.post("/bots/{bot_id}/bulk/retrain", response_model=BulkResponse, responses=_ERROR_RESPONSES)
async def bulk_retrain(body: BulkRequest, workspace: WorkspaceDep) -> BulkResponse:
    try:
        count = await workspace.retrain(body.ids)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return BulkResponse(action="retrain", count=count, message=f"{count} document(s) retrained")


@router.post("/bots/{bot_id}/bulk/delete", response_model=BulkResponse, responses=_ERROR_RESPONSES)
async def bulk_delete(body: BulkRequest, workspace: WorkspaceDep) -> BulkResponse:
    if not body.confirm:
        raise ValidationError(MSG_DELETE_UNCONFIRMED)
    try:
        count = await workspace.delete(body.ids)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return BulkResponse(action="delete", count=count, message=f"{count} document(s) deleted")


@router.delete(
    "/bots/{bot_id}/documents/{document_id}",
    response_model=BulkResponse,
    responses=_ERROR_RESPONSES,
)
async def delete_document(
    document_id: int,
    workspace: WorkspaceDep,
    confirm: Annotated[bool, Query()] = False,
) -> BulkResponse:
    if not confirm:
        raise ValidationError(MSG_DELETE_UNCONFIRMED)
    try:
        count = await workspace.delete_document(document_id)
    except KeyError as exc:
        raise _not_found(exc) from exc
    return BulkResponse(action="delete", count=count, message="Document deleted")


# ---------------------------------------------------------------------------
# Retrain schedule
# ---------------------------------------------------------------------------


@router.get("/bots/{bot_id}/schedule", response_model=ScheduleResponse)
async def get_schedule(workspace: WorkspaceDep) -> ScheduleResponse:
    await workspace.open_schedule()
    return _schedule(workspace)


@router.put("/bots/{bot_id}/schedule", response_model=ScheduleResponse, responses=_ERROR_RESPONSES)
async def update_schedule(body: ScheduleUpdateRequest, workspace: WorkspaceDep) -> ScheduleResponse:
    await workspace.open_schedule()
    workspace.schedule.set_frequency(body.frequency)
    if body.time is not None:
        workspace.schedule.set_time(body.time)
    await workspace.schedule.save()
    return _schedule(workspace)


# ---------------------------------------------------------------------------
# Notifications and health
# ---------------------------------------------------------------------------


@router.get("/notifications/active", response_model=ActiveNotificationResponse)
async def active_notification(workspace: CustomerWorkspaceDep) -> ActiveNotificationResponse:
    active = workspace.notifications.active
    if active is None:
        return ActiveNotificationResponse()
    return ActiveNotificationResponse(
        notification=NotificationResponse(
            id=active.id,
            level=active.level.value,
            message=active.message,
        )
    )


@router.post("/notifications/dismiss", response_model=DismissResponse)
async def dismiss_notification(
    workspace: CustomerWorkspaceDep,
    notification_id: Annotated[int | None, Query()] = None,
) -> DismissResponse:
    return DismissResponse(dismissed=workspace.notifications.dismiss(notification_id))


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return application health and the configured backend adapter."""
    backend = request.app.state.backend
    return HealthResponse(
        status="healthy",
        version=request.app.version,
        backend=backend.get_provider_name(),
        workspaces=len(request.app.state.workspaces),
    )
