"""Extractor service: one stateless request/response handler.

Events follow the API Gateway proxy shape (``httpMethod`` + ``body``); the
body may arrive as a JSON string or already decoded. Every response, error
or not, is an envelope carrying the CORS headers.
"""

import asyncio
import json

import structlog

from pricelocator import config
from pricelocator.generator import TextGenerator, get_generator
from pricelocator.models import ResponseEnvelope
from pricelocator.prompt import build_prompt

logger = structlog.get_logger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

MISSING_HTML = "Missing 'html' field"


def _envelope(status: int, payload: dict) -> dict:
    return ResponseEnvelope(
        statusCode=status,
        headers=dict(CORS_HEADERS),
        body=json.dumps(payload),
    ).model_dump()


def preflight() -> dict:
    return _envelope(200, {"message": "CORS preflight successful"})


def _method(event: dict) -> str:
    method = event.get("httpMethod")
    if method is None:
        # HTTP API (payload v2) events
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return (method or "").upper()


def _decode_body(body):
    if body is None:
        return {}
    if isinstance(body, (str, bytes, bytearray)):
        return json.loads(body)
    return body


async def handle(event: dict, generator: TextGenerator | None = None) -> dict:
    """Answer one extraction request with the model's raw text.

    400 when the body has no usable ``html``; 500 for anything else that
    goes wrong, with the exception's message.
    """
    if _method(event) == "OPTIONS":
        return preflight()

    try:
        logger.info("Incoming event", request=event)

        body = _decode_body(event.get("body"))
        html = body.get("html") if isinstance(body, dict) else None
        if not html:
            logger.info("Rejected request without html")
            return _envelope(400, {"error": MISSING_HTML})

        prompt = build_prompt(html)
        generator = generator or get_generator()
        text = await generator.generate(config.GEMINI_MODEL, prompt)

        logger.info("Model answered", model=config.GEMINI_MODEL, html_chars=len(str(html)), response_chars=len(text))
        return _envelope(200, {"gemini_response": text})

    except Exception as e:
        logger.exception("Unhandled error", error=str(e))
        return _envelope(500, {"error": str(e) or "Unknown error"})


def lambda_handler(event, context):
    """AWS Lambda entry point."""
    return asyncio.run(handle(event))
