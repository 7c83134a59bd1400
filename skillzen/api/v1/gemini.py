from fastapi import APIRouter, Depends, HTTPException, Request

from skillzen.core.rate_limit import rate_limit
from skillzen.quota import QuotaManager, QuotaSnapshot
from skillzen.schemas.gemini import GeminiRequest, QuotaResetRequest
from skillzen.services.gemini_service import GeminiServiceError, generate_content
from skillzen.services.quota_service import get_quota_manager

router = APIRouter()


@router.post("/gemini")
@rate_limit()
def gemini_generate(
    request: Request,
    payload: GeminiRequest,
    manager: QuotaManager = Depends(get_quota_manager),
):
    _ = request
    try:
        return generate_content(
            manager,
            payload.prompt,
            audio_b64=payload.audio,
            model_id=payload.model_id,
        )
    except GeminiServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.to_payload()) from exc


@router.get("/quota", response_model=QuotaSnapshot, response_model_by_alias=True)
async def quota_status(manager: QuotaManager = Depends(get_quota_manager)):
    return manager.snapshot()


@router.post("/quota/reset", response_model=QuotaSnapshot, response_model_by_alias=True)
async def quota_reset(payload: QuotaResetRequest, manager: QuotaManager = Depends(get_quota_manager)):
    manager.reset_quota(payload.total)
    return manager.snapshot()
