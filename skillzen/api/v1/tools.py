from datetime import datetime, timezone

import httpx
from fastapi import APIRouter, HTTPException, Request, status

from skillzen.core.rate_limit import rate_limit
from skillzen.integrations import judge0, languagetool
from skillzen.integrations.errors import UpstreamServiceError
from skillzen.integrations.resume_vendors import probe_vendors
from skillzen.schemas.tools import CompileRequest, GrammarCheckRequest

router = APIRouter()


def _raise_upstream_http_error(exc: Exception) -> None:
    if isinstance(exc, UpstreamServiceError):
        raise HTTPException(status_code=exc.status_code, detail=exc.to_payload()) from exc
    if isinstance(exc, httpx.HTTPError):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "Upstream request failed", "details": str(exc)},
        ) from exc
    raise exc


@router.post("/languagetool")
@rate_limit()
def grammar_check(request: Request, payload: GrammarCheckRequest):
    _ = request
    try:
        return languagetool.check_text(payload.text, payload.language)
    except (UpstreamServiceError, httpx.HTTPError) as exc:
        _raise_upstream_http_error(exc)


@router.post("/compile")
@rate_limit()
def compile_code(request: Request, payload: CompileRequest):
    _ = request
    if judge0.language_id(payload.language) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported language: {payload.language}",
        )
    try:
        return judge0.run_submission(
            payload.code,
            payload.language,
            stdin=payload.input,
            expected_output=payload.expected_output,
        )
    except (UpstreamServiceError, httpx.HTTPError) as exc:
        _raise_upstream_http_error(exc)


@router.get("/compile/languages")
def compile_languages():
    try:
        return judge0.list_languages()
    except (UpstreamServiceError, httpx.HTTPError) as exc:
        _raise_upstream_http_error(exc)


@router.get("/test-apis")
def test_apis():
    return {
        "message": "API connectivity test completed",
        "results": probe_vendors(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
