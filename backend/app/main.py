import logging
from typing import Literal

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from app.config import Settings, settings
from app.di import get_http, get_settings
from app.errors import PriceServiceError
from app.http import init_http, close_http
from app.schemas import ErrorResponse, PriceExplanation, PriceResult
from app.services.pricing import fetch_price
from app.utils.pricing_messages import format_price_explanation

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("cropprice.api")

# Single FastAPI instance
app = FastAPI(title="Crop Price Service", version="1.0.0")

@app.on_event("startup")
async def startup_event():
    """Initialize HTTP client on startup."""
    await init_http()
    log.info("HTTP client initialized")

@app.on_event("shutdown")
async def shutdown_event():
    """Close HTTP client on shutdown."""
    await close_http()
    log.info("HTTP client closed")

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# API endpoints
@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Crop service is running"

@app.get("/health", response_class=PlainTextResponse)
async def health():
    return "OK"

@app.get(
    "/get-price/{name}",
    response_model=PriceResult | PriceExplanation,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_price(
    name: str,
    format: Literal["json", "text"] = Query("json", description="'text' returns {explanation: '₹ X.X'}"),
    cfg: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http),
):
    """
    Current national average mandi price of `name` in INR per kilogram,
    estimated by Gemini with search grounding.
    """
    try:
        result = await fetch_price(name, cfg, client)
    except ValidationError:
        return JSONResponse(status_code=400, content={"error": "Commodity name must not be empty."})
    except PriceServiceError as e:
        log.error("Price lookup for %r failed: %s", name, e)
        body = ErrorResponse(error=e.public_message, details=e.details())
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    except Exception as e:
        log.exception("Unexpected error during price lookup for %r", name)
        body = ErrorResponse(error="Failed to get response from AI service.", details=str(e) or type(e).__name__)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

    if format == "text":
        return PriceExplanation(explanation=format_price_explanation(result))
    return result


if __name__ == "__main__":
    log.info("✅ Crop service running on port %s", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
