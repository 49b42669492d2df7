import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from lacura.core.config import get_settings
from lacura.core.exceptions import LaCuraError
from lacura.routers import bookings, chat, content, email, ingest
from lacura.utils.logger import get_logger

logger = get_logger("api")

settings = get_settings()

app = FastAPI(
    title="La Cura API",
    description="Booking chat, calendar, email and content index for the La Cura practice",
    version="0.1.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = str(uuid.uuid4())
    logger.info(f"[{request_id}] {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        logger.info(f"[{request_id}] Response status: {response.status_code}")
        return response
    except Exception as e:
        logger.error(f"[{request_id}] Unhandled exception: {e}", exc_info=True)
        content = {"error": "Internal error", "requestId": request_id}
        if get_settings().is_development:
            content["details"] = str(e)
        return JSONResponse(status_code=500, content=content)


@app.exception_handler(LaCuraError)
async def lacura_error_handler(request: Request, exc: LaCuraError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


app.include_router(chat.router)
app.include_router(bookings.router)
app.include_router(email.router)
app.include_router(ingest.router)
app.include_router(content.router)


@app.get("/")
async def root():
    return {"message": "Welcome to La Cura API"}


@app.get("/health")
async def health_check():
    return {"status": "ok"}
