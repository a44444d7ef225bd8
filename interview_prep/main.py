from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from interview_prep.config import settings
from interview_prep.utils.logging import configure_logging
from interview_prep.utils.security import verify_api_key
from interview_prep.routers.ai import router as ai_router
from interview_prep.routers.sessions import router as sessions_router
from interview_prep.routers.questions import router as questions_router
from interview_prep.utils.audit import auditor
from interview_prep.services.llm_service import llm_service


configure_logging(settings.log_level, settings.log_level_overrides)
auditor.configure(settings.analytics_path)
app = FastAPI(title="Interview Prep AI Backend", version="0.1.0")

# CORS
app.add_middleware(
	CORSMiddleware,
	allow_origins=settings.cors_allow_origins,
	# Wildcard origins require credentials to be False per CORS spec
	allow_credentials=False if settings.cors_allow_origins == ["*"] else True,
	allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
	allow_headers=["Content-Type", "Authorization", "Accept-Language"],
	max_age=3600,
)


@app.get("/health")
async def health() -> JSONResponse:
	return JSONResponse({
		"status": "ok",
		"version": app.version,
		"llm": {"provider": llm_service.provider, "enabled": llm_service.enabled},
	})


# Routers
protected = [Depends(verify_api_key)]
app.include_router(ai_router, prefix="/api/ai", tags=["ai"], dependencies=protected)
app.include_router(sessions_router, prefix="/api/sessions", tags=["sessions"], dependencies=protected)
app.include_router(questions_router, prefix="/api/questions", tags=["questions"], dependencies=protected)
