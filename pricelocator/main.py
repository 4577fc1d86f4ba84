import sys, asyncio
from pathlib import Path

from pricelocator import config
from pricelocator.client import ExtractorClient
from pricelocator.models import ExtractionRequest
from pricelocator.picker import SoupPicker

USAGE = """usage:
  pricelocator --serve
  pricelocator --browse URL
  pricelocator --pick FILE CSS_SELECTOR
  pricelocator --locate FILE"""


def main():
    config.configure_logging()
    args = sys.argv[1:]
    if args == ["--serve"]:
        from pricelocator.server import run
        run()
        return 0
    if len(args) == 2 and args[0] == "--browse":
        from pricelocator.selector import run_selector
        asyncio.run(run_selector(args[1]))
        return 0
    if len(args) == 3 and args[0] == "--pick":
        return asyncio.run(_pick(Path(args[1]), args[2]))
    if len(args) == 2 and args[0] == "--locate":
        return asyncio.run(_locate(Path(args[1])))
    print(USAGE)
    return 2


async def _pick(path: Path, css: str) -> int:
    try:
        selection = SoupPicker(path.read_text(encoding="utf-8")).pick(css)
    except LookupError as e:
        print(f"pick: {e}")
        return 2
    if not selection.intercepted:
        print("pick: target is a link or form field, not intercepted")
        return 2
    if selection.request is None:
        print("pick: no parent <div> found")
        return 2
    return await _send(selection.request)


async def _locate(path: Path) -> int:
    html = path.read_text(encoding="utf-8")
    if not html.strip():
        print("locate: file is empty")
        return 2
    return await _send(ExtractionRequest(html=html))


async def _send(request: ExtractionRequest) -> int:
    outcome = await ExtractorClient().dispatch(request)
    if outcome is None:
        print("dispatch failed")
        return 2
    print(f"status: {outcome.status_code}")
    print(outcome.payload)
    if outcome.result is not None:
        print(f"price_found: {outcome.result.price_found} price: {outcome.result.lowest_price}")
        for s in outcome.result.selectors:
            print(f"  [{s.type}/{s.confidence}] {s.selector} -> {s.price}")
    return 0 if outcome.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
