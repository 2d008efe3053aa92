"""FastAPI form agent service — fills a form schema from document text.

Builds the prompt, calls the DashScope LLM, and normalizes the model's
semi-structured answer into a scored AnalyzeResult.
Document content is never logged, only its size.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config import settings
from extraction import analyze_document
from llm_client import DashScopeClient, LLMServiceError, LLMServiceTimeout, LLMServiceUnavailable
from models import AnalyzeRequest, AnalyzeResult

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_llm_client: DashScopeClient | None = None
_llm_available: bool = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize the LLM client on startup if an API key is configured."""
    global _llm_client, _llm_available

    if not settings.DASHSCOPE_API_KEY:
        logger.info("LLM not configured (DASHSCOPE_API_KEY is empty) — analysis disabled")
        _llm_available = False
    else:
        logger.info("Using DashScope model %s at %s", settings.DASHSCOPE_MODEL, settings.DASHSCOPE_ENDPOINT)
        _llm_client = DashScopeClient()
        _llm_available = True

    yield

    if _llm_client is not None:
        _llm_client.close()


app = FastAPI(title="Form Agent", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "issues": jsonable_encoder(exc.errors())},
    )


@app.post(
    "/api/agent/analyze",
    response_model=AnalyzeResult,
    response_model_exclude_none=True,
)
def analyze(body: AnalyzeRequest):
    """Analyze a text document against the given form schema."""
    if not _llm_available or _llm_client is None:
        return JSONResponse(
            status_code=503,
            content={"detail": "Document analysis is not available - no LLM API key configured"},
        )

    logger.info(
        "Processing analysis: fields=%d size=%d chars filename=%s",
        len(body.options.form_schema),
        len(body.document.content),
        body.document.filename,
    )

    try:
        return analyze_document(body, _llm_client)
    except LLMServiceTimeout as e:
        logger.error("LLM request timed out: %s", e)
        return JSONResponse(
            status_code=504,
            content={"error": "Upstream model request timed out, please retry later"},
        )
    except (LLMServiceUnavailable, LLMServiceError) as e:
        logger.error("LLM request failed: %s", e)
        return JSONResponse(status_code=502, content={"error": str(e)})
    except Exception as e:
        logger.exception("Analysis failed")
        return JSONResponse(status_code=500, content={"error": str(e) or "LLM call failed"})


@app.get("/health")
async def health():
    """Return service status and LLM availability."""
    return {
        "status": "healthy",
        "llm_available": _llm_available,
        "model": settings.DASHSCOPE_MODEL,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
