"""Sends selected markup to the extractor service."""

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from pricelocator import config
from pricelocator.models import ExtractionRequest, ExtractionResult, SchemaNonconformance, parse_extraction_result

logger = structlog.get_logger(__name__)


@dataclass
class DispatchOutcome:
    seq: int
    status_code: int
    payload: Any
    result: ExtractionResult | None = None
    latest: bool = True  # False when a newer dispatch finished first


class ExtractorClient:
    """One POST per request, no retry and no cancellation.

    Responses may come back in any order; each outcome carries its sequence
    number and whether it was the newest to complete.
    """

    def __init__(self, url: str | None = None, timeout: float | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url or config.EXTRACTOR_URL
        self.timeout = timeout if timeout is not None else config.DISPATCH_TIMEOUT
        self._transport = transport
        self._seq = 0
        self._completed = 0
        self._pending: set[asyncio.Task] = set()

    async def dispatch(self, request: ExtractionRequest) -> DispatchOutcome | None:
        self._seq += 1
        seq = self._seq
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(
                    self.url,
                    json=request.model_dump(),
                    headers={"Content-Type": "application/json"},
                )
            payload = r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Dispatch failed", seq=seq, url=self.url, error=str(e))
            return None

        latest = seq > self._completed
        self._completed = max(self._completed, seq)
        logger.info("Extraction response", seq=seq, status=r.status_code, payload=payload, latest=latest)

        result = None
        text = payload.get("gemini_response") if isinstance(payload, dict) else None
        if text is not None:
            try:
                result = parse_extraction_result(text)
            except SchemaNonconformance as e:
                logger.warning("Model answer does not follow the result schema", seq=seq, error=str(e))
            else:
                logger.info("Price located", seq=seq, price_found=result.price_found, price=result.lowest_price)

        return DispatchOutcome(seq=seq, status_code=r.status_code, payload=payload, result=result, latest=latest)

    def submit(self, request: ExtractionRequest) -> asyncio.Task:
        """Dispatch in the background; the caller does not wait for the answer."""
        task = asyncio.get_running_loop().create_task(self.dispatch(request))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*list(self._pending))
