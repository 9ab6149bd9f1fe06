import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from errors import (
    DraftValidationError,
    ImagePreparationError,
    RelayError,
    SessionDiscardedError,
    UploadError,
)
from routes import relay_routes, workflow_routes

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)-8s] %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Canvas Uploader API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


PAYLOAD_TOO_LARGE = "Payload too large"


class BodySizeLimitMiddleware:
    """Reject bodies above MAX_BODY_BYTES (base64 images need up to ~50 MB).

    A declared Content-Length is checked up front; chunked bodies are counted
    as they are read and the request fails with 413 once the limit is passed.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = config.MAX_BODY_BYTES
        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > limit:
            response = JSONResponse(status_code=413, content={"message": PAYLOAD_TOO_LARGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    logger.warning("Request body for %s passed %d bytes", scope.get("path"), limit)
                    raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)


app.add_middleware(BodySizeLimitMiddleware)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 413:
        return JSONResponse(status_code=413, content={"message": exc.detail})
    return await http_exception_handler(request, exc)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    # Upstream status and body go back untouched
    return JSONResponse(status_code=exc.status_code, content=exc.body)


@app.exception_handler(ImagePreparationError)
async def image_error_handler(request: Request, exc: ImagePreparationError):
    return JSONResponse(status_code=400, content={"message": exc.message, "details": exc.details})


@app.exception_handler(DraftValidationError)
async def validation_error_handler(request: Request, exc: DraftValidationError):
    return JSONResponse(status_code=422, content={"message": "Validation failed", "errors": exc.errors})


@app.exception_handler(UploadError)
async def upload_error_handler(request: Request, exc: UploadError):
    return JSONResponse(status_code=502, content={"message": exc.message})


@app.exception_handler(SessionDiscardedError)
async def discarded_error_handler(request: Request, exc: SessionDiscardedError):
    return JSONResponse(status_code=409, content={"message": exc.message, "details": exc.details})


app.include_router(relay_routes.router)
app.include_router(workflow_routes.router)


@app.get("/health")
async def health():
    from deps import printify
    return {"status": "ok", "printify_configured": printify.is_configured}


if __name__ == "__main__":
    import uvicorn
    logger.info("Relay listening on port %d", config.PORT)
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
