import os
from typing import Any, Dict, Optional, Union

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from starlette.exceptions import HTTPException as StarletteHTTPException

from wizards.backend import Backend
from wizards.errors import WizardError

app = FastAPI()

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins; the frontend is served elsewhere
    allow_credentials=False,
    allow_methods=["POST", "OPTIONS"],
    allow_headers=["*"],
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# Query-string keys accepted as a fallback for body keys (tips_search?query=...)
QUERY_KEYS = ("query", "event_id", "frame_id", "bento_id")


class RequestBody(BaseModel):
    model_config = ConfigDict(extra="allow")

    step: Optional[Union[int, str]] = None
    input: Optional[Any] = None
    state: Optional[Dict[str, Any]] = None
    context: Optional[Dict[str, Any]] = None


_backend: Optional[Backend] = None


def get_backend() -> Backend:
    global _backend
    if _backend is None:
        _backend = Backend()
    return _backend


@app.exception_handler(WizardError)
async def wizard_error_handler(request: Request, exc: WizardError):
    return JSONResponse({"error": str(exc)}, status_code=exc.status_code, headers=CORS_HEADERS)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid JSON body"}, status_code=400, headers=CORS_HEADERS)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code, headers=CORS_HEADERS)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/{endpoint}")
def call_endpoint(
    endpoint: str,
    request: Request,
    body: Optional[RequestBody] = Body(None),
    backend: Backend = Depends(get_backend),
):
    data = {k: v for k, v in body.model_dump().items() if v is not None} if body is not None else {}
    for key in QUERY_KEYS:
        if key not in data and request.query_params.get(key):
            data[key] = request.query_params[key]
    return backend.process_request(endpoint, data)


@app.options("/api/{endpoint}")
def preflight(endpoint: str):
    return JSONResponse({}, status_code=200, headers=CORS_HEADERS)


@app.api_route("/api/{endpoint}", methods=["GET", "PUT", "PATCH", "DELETE"])
def wrong_method(endpoint: str):
    return JSONResponse({"error": "Use POST"}, status_code=405, headers=CORS_HEADERS)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
