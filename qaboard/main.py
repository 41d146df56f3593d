import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi_users.password import PasswordHelper
from sqlalchemy import select

from .database import init_db, async_session_maker
from .errors import QABoardError
from .models import User, UserRole
from .routers import accounts, answers, questions
from .schemas import UserCreate, UserRead
from .settings.config import settings
from .users import auth_backend, fastapi_users

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger(__name__)

app = FastAPI(title="QA Board")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ----------------------
# Route Includes
# ----------------------
app.include_router(questions.router)
app.include_router(answers.router)
app.include_router(accounts.router)

# Authentication Routes
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/api/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/api/auth",
    tags=["auth"],
)
app.include_router(
    fastapi_users.get_reset_password_router(),
    prefix="/api/auth",
    tags=["auth"],
)


# ----------------------
# Error Rendering
# ----------------------
def _error_response(status_code: int, message: str, **extra) -> JSONResponse:
    body = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(QABoardError)
async def _qaboard_error_handler(request: Request, exc: QABoardError):
    if exc.status_code >= 500:
        details = str(exc.__cause__ or exc) if settings.is_development else None
        return _error_response(exc.status_code, exc.message, details=details)
    return _error_response(exc.status_code, exc.message, fields=getattr(exc, "fields", None) or None)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    # A malformed id in the path means the entity cannot exist.
    if errors and all((err.get("loc") or ("",))[0] == "path" for err in errors):
        return _error_response(404, "Not found")

    fields: list[str] = []
    parts: list[str] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        name = ".".join(loc) or "body"
        if name not in fields:
            fields.append(name)
        if err.get("type") == "missing":
            parts.append(f"{name} is required")
        else:
            parts.append(f"{name}: {err.get('msg')}")
    return _error_response(400, "; ".join(parts) or "Invalid request", fields=fields)


@app.exception_handler(Exception)
async def _unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    details = str(exc) if settings.is_development else None
    return _error_response(500, "Server error", details=details)


# ----------------------
# Auto-create admin user
# ----------------------
async def create_admin_user(session_maker=async_session_maker):
    admin_email = settings.ADMIN_EMAIL
    admin_password = settings.ADMIN_PASSWORD

    if not admin_email or not admin_password:
        logger.warning("ADMIN_EMAIL or ADMIN_PASSWORD not set, skipping admin creation.")
        return None

    async with session_maker() as session:
        result = await session.execute(select(User).where(User.email == admin_email))
        existing_admin = result.scalars().first()
        if existing_admin:
            logger.info("Admin user already exists: %s", admin_email)
            return existing_admin
        user = User(
            email=admin_email,
            hashed_password=PasswordHelper().hash(admin_password),
            name=settings.ADMIN_NAME,
            role=UserRole.admin,
            is_active=True,
            is_verified=True,
        )
        session.add(user)
        await session.commit()
        logger.info("Admin user created: %s", admin_email)
        return user


@app.on_event("startup")
async def on_startup():
    await init_db()
    await create_admin_user()


@app.get("/health")
async def health():
    return {"status": "ok"}
