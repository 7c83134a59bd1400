import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from skillzen.api.v1.health import router as health_router
from skillzen.api.v1.gemini import router as gemini_router
from skillzen.api.v1.resume import router as resume_router
from skillzen.api.v1.tools import router as tools_router
from skillzen.core.cors import cors_allow_origin_regex, cors_allowed_origins
from skillzen.core.rate_limit import limiter
from skillzen.core.config import settings
from dotenv import load_dotenv
from skillzen.core.lifespan import lifespan

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="SkillZen API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_origin_regex=cors_allow_origin_regex(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(gemini_router, prefix="/v1", tags=["Gemini"])
app.include_router(resume_router, prefix="/v1", tags=["Resume"])
app.include_router(tools_router, prefix="/v1", tags=["Tools"])
