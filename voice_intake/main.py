import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from voice_intake.api.routes import router as api_router
from voice_intake.config import get_settings
from voice_intake.db import init_db
from voice_intake.errors import ConfigurationError, IntakeError


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Voice Intake API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for dev; tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True,
)


@app.exception_handler(IntakeError)
def handle_intake_error(request: Request, exc: IntakeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Missing or mistyped roomName / intake, or a body that is not JSON.
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field or 'body'}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.on_event("startup")
def on_startup() -> None:
    try:
        init_db()
    except ConfigurationError as exc:
        logger.warning("%s Intake endpoints will answer 503.", exc.message)
    except SQLAlchemyError as exc:
        logger.error("Could not create intake tables: %s", exc)


@app.get("/")
def root():
    return {"message": "Voice Intake API is running"}


app.include_router(api_router)
# Path used by the web client.
app.include_router(api_router, prefix="/api")
