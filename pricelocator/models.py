"""Data models for the price locator."""

import json
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ExtractionRequest(BaseModel):
    """Outer markup of the container the user clicked in."""

    html: str = Field(..., min_length=1, description="Serialized outer HTML of the selected container")


class PriceSelector(BaseModel):
    """One price-bearing element located by the model."""

    model_config = ConfigDict(populate_by_name=True)

    selector: str = Field(..., description="CSS selector or XPath expression")
    type: Literal["css", "xpath"]
    confidence: Literal["high", "medium", "low"]
    price: str | int | float | None = Field(None, alias="Price")

    @property
    def normalized_price(self) -> int | None:
        return normalize_price(self.price)


class ExtractionResult(BaseModel):
    """The JSON document the extraction prompt asks the model to produce."""

    price_found: bool
    selectors: list[PriceSelector] = Field(default_factory=list)

    @property
    def prices(self) -> list[int]:
        """Normalized prices of every selector that carries one, in model order."""
        return [p for p in (s.normalized_price for s in self.selectors) if p is not None]

    @property
    def lowest_price(self) -> int | None:
        prices = self.prices
        return min(prices) if prices else None


class ResponseEnvelope(BaseModel):
    """Proxy-integration response: status, headers and a serialized JSON body."""

    statusCode: int
    headers: dict[str, str]
    body: str

    def payload(self) -> dict[str, Any]:
        return json.loads(self.body)


class SchemaNonconformance(Exception):
    """The model's answer is not a valid ExtractionResult document."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


_NUMBER_RE = re.compile(r"\d[\d.,]*")
_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.S | re.I)
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def normalize_price(value) -> int | None:
    """Reduce a displayed price to its integer amount.

    Currency symbols and words are ignored and the fractional part is dropped
    (not rounded). Both ``1,234.50`` and ``1.234,50`` give 1234; a lone
    separator followed by exactly three digits is read as a thousands
    separator. Returns None when there is no number to read.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)

    m = _NUMBER_RE.search(str(value))
    if not m:
        return None
    token = m.group(0).rstrip(".,")

    if "." in token and "," in token:
        decimal = "." if token.rfind(".") > token.rfind(",") else ","
        thousands = "," if decimal == "." else "."
        token = token.replace(thousands, "")
        integer = token.split(decimal)[0]
    else:
        sep = "." if "." in token else ("," if "," in token else None)
        if sep is None:
            integer = token
        else:
            parts = token.split(sep)
            if len(parts) > 2 or len(parts[-1]) == 3:
                integer = "".join(parts)
            else:
                integer = parts[0]

    try:
        return int(integer)
    except ValueError:
        return None


def parse_extraction_result(text: str) -> ExtractionResult:
    """Validate a raw model answer against the ExtractionResult schema.

    Accepts the answer wrapped in a Markdown code fence and tolerates trailing
    commas. Raises SchemaNonconformance for anything else.
    """
    if text is not None and not isinstance(text, str):
        raise SchemaNonconformance(f"Model answer is not text: {type(text).__name__}", repr(text))
    raw = text or ""
    content = raw.strip()
    m = _FENCE_RE.match(content)
    if m:
        content = m.group(1)
    content = _TRAILING_COMMA_RE.sub(r"\1", content)

    try:
        data = json.loads(content)
    except ValueError as e:
        raise SchemaNonconformance(f"Model answer is not JSON: {e}", raw) from e

    try:
        return ExtractionResult.model_validate(data)
    except ValidationError as e:
        raise SchemaNonconformance(f"Model answer does not match schema: {e}", raw) from e
