import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pay_engine.config import settings
from pay_engine.errors import PayEngineError
from pay_engine.logging_utils import setup_json_logging
from pay_engine.routers import admin, calculate, compliance, health, reference_data

setup_json_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Apprentice Pay Engine API",
    description="Award-based pay calculation for apprentice timesheets",
    version="1.0.0",
)


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"code": code, "message": message}})


@app.exception_handler(PayEngineError)
async def handle_pay_engine_error(request: Request, exc: PayEngineError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "pay_engine_error",
        extra={"path": request.url.path, "error_code": exc.code, "context": exc.context},
    )
    return error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    code_map = {
        403: "FORBIDDEN",
        404: "NOT_FOUND",
    }
    message = str(exc.detail) if exc.detail else "Request failed."
    return error_response(exc.status_code, code_map.get(exc.status_code, "HTTP_ERROR"), message)


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(422, "VALIDATION_ERROR", str(exc.errors()))


app.include_router(health.router)
app.include_router(calculate.router)
app.include_router(reference_data.router)
app.include_router(compliance.router)
app.include_router(admin.router)
