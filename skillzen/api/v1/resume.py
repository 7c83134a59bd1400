from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from skillzen.core.rate_limit import rate_limit
from skillzen.integrations.errors import ResumeVendorError
from skillzen.resume import normalize_resume_payload
from skillzen.schemas.resume import NormalizedResumeRecord, ResumeNormalizeRequest
from skillzen.services.resume_service import MAX_RESUME_BYTES, ResumeInputError, parse_resume_file

router = APIRouter()


@router.post(
    "/resume/parse",
    response_model=NormalizedResumeRecord,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
@rate_limit()
def resume_parse(request: Request, file: UploadFile = File(...), include_raw: bool = False):
    _ = request
    # One byte past the limit is enough for validation to reject it.
    content = file.file.read(MAX_RESUME_BYTES + 1)
    try:
        return parse_resume_file(
            file.filename or "",
            content,
            file.content_type or "",
            include_raw=include_raw,
        )
    except ResumeInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ResumeVendorError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.to_payload()) from exc


@router.post(
    "/resume/normalize",
    response_model=NormalizedResumeRecord,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
async def resume_normalize(payload: ResumeNormalizeRequest):
    return normalize_resume_payload(payload.payload, source=payload.source, include_raw=payload.include_raw)
