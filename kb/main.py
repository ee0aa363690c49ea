
import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from kb.middleware.ratelimit import RateLimitMiddleware, make_key_func
from kb.config import settings
from kb.db.session import init_db
from kb.errors import KnowledgeBaseError, Unauthenticated, ValidationError
from kb.utils.security import ALGORITHM
from kb.auth.routes import router as auth_router
from kb.notes.routes import router as notes_router
from kb.tags.routes import router as tags_router
from kb.search.routes import router as search_router

logger = logging.getLogger(__name__)

def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

async def handle_domain_error(request: Request, exc: KnowledgeBaseError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

async def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:])
    message = f"{field}: {first['msg']}" if field and "msg" in first else "Invalid request"
    return await handle_domain_error(request, ValidationError(message, {"errors": errors}))

def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=settings.rate_limit_window_seconds,
        max_calls=settings.rate_limit_max_calls,
        key_func=make_key_func(settings.secret_key, ALGORITHM),
        include_path_prefixes=("/auth/login", "/auth/register"),
    )

    app.add_exception_handler(KnowledgeBaseError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    app.include_router(auth_router)
    app.include_router(notes_router)
    app.include_router(tags_router)
    app.include_router(search_router)

    @app.on_event("startup")
    def on_startup():
        init_db()
        logger.info("%s started (env=%s)", settings.app_name, settings.app_env)

    @app.get("/", tags=["root"])
    def root():
        return {"name": settings.app_name, "env": settings.app_env}

    return app

app = create_app()
