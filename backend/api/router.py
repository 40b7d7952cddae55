from typing import Any

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Request, Response, UploadFile
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_workspace
from config import settings
from models.actions import SECTION_PATCH_MODELS, PersonalPatch
from models.cv import CVData, new_item_id
from models.requests import (
    AnalyzeJobRequest,
    ChatRequest,
    CreateCVRequest,
    CVSettingsUpdate,
    OptimizeSummaryRequest,
)
from models.responses import ChatResponse, HealthResponse, TextResponse
from services import cv_mutations, document_import, gemini_client
from services.cv_mutations import UnknownSectionError
from services.cv_store import CVNotFoundError
from services.document_import import DocumentImportError
from services.workspace import CVWorkspace

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

IMPORT_FAILED_DETAIL = "Error al importar el documento"


async def _get_cv(ws: CVWorkspace, cv_id: str) -> CVData:
    try:
        return await ws.get(cv_id)
    except CVNotFoundError:
        raise HTTPException(status_code=404, detail="CV not found")


def _validate_patch(section: str, body: dict[str, Any]):
    model = SECTION_PATCH_MODELS.get(section)
    if model is None or section == "personal":
        raise HTTPException(status_code=404, detail=f"Unknown section: {section}")
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))


@router.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", gemini_configured=bool(settings.gemini_api_key))


@router.get("/cvs", response_model=list[CVData])
async def list_cvs(ws: CVWorkspace = Depends(get_workspace)):
    return await ws.list()


@router.post("/cvs", response_model=CVData, status_code=201)
async def create_cv(body: CreateCVRequest, ws: CVWorkspace = Depends(get_workspace)):
    return await ws.create(title=body.title)


@router.post("/cvs/import", response_model=CVData, status_code=201)
@limiter.limit(settings.import_rate_limit)
async def import_cv(
    request: Request,
    cv_file: UploadFile = File(...),
    title: str | None = Form(None),
    ws: CVWorkspace = Depends(get_workspace),
):
    mime_type = document_import.guess_mime_type(cv_file.filename, cv_file.content_type)
    if mime_type not in document_import.ACCEPTED_MIME_TYPES:
        raise HTTPException(status_code=400, detail="Only PDF, DOC or DOCX files are accepted")

    content = await cv_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    try:
        return await ws.import_cv(document_import.encode_document(content), mime_type, title)
    except DocumentImportError:
        raise HTTPException(status_code=422, detail=IMPORT_FAILED_DETAIL)


@router.get("/cvs/{cv_id}", response_model=CVData)
async def get_cv(cv_id: str, ws: CVWorkspace = Depends(get_workspace)):
    return await _get_cv(ws, cv_id)


@router.put("/cvs/{cv_id}", response_model=CVData)
async def replace_cv(cv_id: str, body: CVData, ws: CVWorkspace = Depends(get_workspace)):
    await _get_cv(ws, cv_id)
    return await ws.update(body.model_copy(update={"id": cv_id}))


@router.patch("/cvs/{cv_id}", response_model=CVData)
async def update_cv_settings(
    cv_id: str, body: CVSettingsUpdate, ws: CVWorkspace = Depends(get_workspace)
):
    cv = await _get_cv(ws, cv_id)
    # Only custom_template can be cleared with null
    changes = {
        k: getattr(body, k)
        for k in body.model_fields_set
        if getattr(body, k) is not None or k == "custom_template"
    }
    return await ws.update(cv.model_copy(update=changes))


@router.delete("/cvs/{cv_id}", status_code=204)
async def delete_cv(cv_id: str, ws: CVWorkspace = Depends(get_workspace)):
    try:
        await ws.delete(cv_id)
    except CVNotFoundError:
        raise HTTPException(status_code=404, detail="CV not found")
    return Response(status_code=204)


@router.patch("/cvs/{cv_id}/personal", response_model=CVData)
async def update_personal(cv_id: str, body: PersonalPatch, ws: CVWorkspace = Depends(get_workspace)):
    cv = await _get_cv(ws, cv_id)
    return await ws.update(cv_mutations.update_personal(cv, body.changes()))


@router.post("/cvs/{cv_id}/sections/{section}", response_model=CVData, status_code=201)
async def add_section_item(
    cv_id: str,
    section: str,
    body: dict[str, Any] = Body(...),
    ws: CVWorkspace = Depends(get_workspace),
):
    patch = _validate_patch(section, body)
    cv = await _get_cv(ws, cv_id)
    fields = patch.changes()
    fields.pop("id", None)
    try:
        item = cv_mutations.new_item(section, fields, new_item_id())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))
    return await ws.update(cv_mutations.add_item(cv, section, item))


@router.patch("/cvs/{cv_id}/sections/{section}/{item_id}", response_model=CVData)
async def update_section_item(
    cv_id: str,
    section: str,
    item_id: str,
    body: dict[str, Any] = Body(...),
    ws: CVWorkspace = Depends(get_workspace),
):
    patch = _validate_patch(section, body)
    cv = await _get_cv(ws, cv_id)
    if cv_mutations.find_item(cv, section, item_id) is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return await ws.update(cv_mutations.update_item(cv, section, item_id, patch.changes()))


@router.delete("/cvs/{cv_id}/sections/{section}/{item_id}", response_model=CVData)
async def remove_section_item(
    cv_id: str, section: str, item_id: str, ws: CVWorkspace = Depends(get_workspace)
):
    cv = await _get_cv(ws, cv_id)
    try:
        updated = cv_mutations.remove_item(cv, section, item_id)
    except UnknownSectionError:
        raise HTTPException(status_code=404, detail=f"Unknown section: {section}")
    return await ws.update(updated)


@router.post("/cvs/{cv_id}/chat", response_model=ChatResponse)
@limiter.limit(settings.chat_rate_limit)
async def chat(
    request: Request, cv_id: str, body: ChatRequest, ws: CVWorkspace = Depends(get_workspace)
):
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is empty")
    await _get_cv(ws, cv_id)

    try:
        result = await ws.chat(cv_id, body.message)
    except CVNotFoundError:
        # Deleted while the assistant was answering; the reply is discarded
        raise HTTPException(status_code=404, detail="CV not found")
    return ChatResponse(
        message=result.reply.message,
        action=result.reply.action,
        applied=result.applied,
        cv=result.cv,
    )


@router.post("/cvs/{cv_id}/optimize-summary", response_model=TextResponse)
@limiter.limit(settings.chat_rate_limit)
async def optimize_summary(
    request: Request,
    cv_id: str,
    body: OptimizeSummaryRequest,
    ws: CVWorkspace = Depends(get_workspace),
):
    cv = await _get_cv(ws, cv_id)
    text = body.text if body.text is not None else cv.personal.profile_summary
    if not text.strip():
        raise HTTPException(status_code=400, detail="Nothing to optimize")
    role_goal = body.role_goal or (cv.experience[0].role if cv.experience else "") or "Profesional"

    optimized = await gemini_client.optimize_summary(text, role_goal, body.context, body.max_lines)
    return TextResponse(text=optimized)


@router.post("/cvs/{cv_id}/analyze-job", response_model=TextResponse)
@limiter.limit(settings.chat_rate_limit)
async def analyze_job(
    request: Request,
    cv_id: str,
    body: AnalyzeJobRequest,
    ws: CVWorkspace = Depends(get_workspace),
):
    cv = await _get_cv(ws, cv_id)
    return TextResponse(text=await gemini_client.analyze_job_description(body.job_description, cv))
