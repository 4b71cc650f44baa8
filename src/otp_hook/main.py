from __future__ import annotations

from collections.abc import Generator
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .logger import get_logger
from .pipeline import handle_send_sms_hook

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: fail fast on an invalid environment (e.g. a non-numeric template id)
    settings = get_settings()
    logger.info(
        "otp-hook starting",
        extra={
            "signature_verification": bool(settings.hook_secret),
            "whatsapp_enabled": settings.whatsapp_template_id is not None,
            "sms_country_codes": settings.sms_country_codes,
        },
    )
    yield


app = FastAPI(title="otp-hook", version="0.1.0", lifespan=lifespan)

# Every method is routed here so that the wrong ones get our JSON 405
# instead of the framework's default body.
HOOK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# --- HTTP client dependency ---


def get_http_client() -> Generator[httpx.Client, None, None]:
    client = httpx.Client()
    try:
        yield client
    finally:
        client.close()


# --- Routes ---


@app.api_route("/", methods=HOOK_METHODS)
async def send_sms_hook(
    request: Request,
    settings: Settings = Depends(get_settings),
    http_client: httpx.Client = Depends(get_http_client),
) -> JSONResponse:
    """
    Supabase Auth "Send SMS" hook.

    Supabase requires a JSON body on every response, errors included, so
    nothing escapes this function as an exception.
    """
    logger.info("Webhook received", extra={"method": request.method})

    if request.method != "POST":
        logger.error("Invalid method", extra={"method": request.method})
        return JSONResponse(
            {"code": "method_not_allowed", "message": "Only POST method is allowed"},
            status_code=405,
        )

    try:
        # Undecodable bytes are replaced, as a fetch Request.text() would
        raw_body = (await request.body()).decode("utf-8", errors="replace")
        # The Authentica call blocks, keep it off the event loop
        result = await run_in_threadpool(
            handle_send_sms_hook, raw_body, request.headers, settings, http_client
        )
    except Exception as e:
        logger.exception("Unhandled error in webhook handler")
        return JSONResponse(
            {"code": "unexpected_failure", "message": str(e) or "Internal server error"},
            status_code=500,
        )

    return JSONResponse(result.body, status_code=result.status_code)
