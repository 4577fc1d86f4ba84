import asyncio
import json

import structlog
from playwright.async_api import async_playwright

from pricelocator import config
from pricelocator.client import ExtractorClient
from pricelocator.domwalk import CONTAINER_TAG, INTERACTIVE_TAGS
from pricelocator.models import ExtractionRequest

logger = structlog.get_logger(__name__)

BINDING = "pricelocatorSubmit"

# Same rules as domwalk.select, run inside the page.
_SCRIPT_TEMPLATE = """
(() => {
  if (window.__pricelocatorInstalled) return;
  window.__pricelocatorInstalled = true;

  const INTERACTIVE = __INTERACTIVE__;
  const CONTAINER = __CONTAINER__;
  const STYLE = __STYLE__;
  const reset = () => document.querySelectorAll(CONTAINER).forEach(d => d.style.outline = '');

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', reset);
  } else {
    reset();
  }

  document.addEventListener('click', (event) => {
    if (INTERACTIVE.includes(event.target.tagName)) return;
    event.preventDefault();

    let node = event.target;
    while (node && node.tagName !== CONTAINER) {
      node = node.parentElement;
    }
    if (!node) {
      console.log('No parent <div> found.');
      return;
    }

    reset();
    node.style.outline = STYLE;
    window.__BINDING__(node.outerHTML);
  });
})()
"""

CONTENT_SCRIPT = (
    _SCRIPT_TEMPLATE
    .replace("__INTERACTIVE__", json.dumps(list(INTERACTIVE_TAGS)))
    .replace("__CONTAINER__", json.dumps(CONTAINER_TAG))
    .replace("__STYLE__", json.dumps(config.HIGHLIGHT_STYLE))
    .replace("__BINDING__", BINDING)
)


class BrowserSelector:
    """Installs the click handler in a page and forwards selections to the service."""

    def __init__(self, client: ExtractorClient | None = None):
        self.client = client or ExtractorClient()

    async def attach(self, page) -> None:
        await page.expose_binding(BINDING, self._on_submit)
        await page.add_init_script(CONTENT_SCRIPT)
        await page.evaluate(CONTENT_SCRIPT)
        if config.DEBUG:
            page.on("console", lambda msg: logger.debug("Page console", text=msg.text))

    async def _on_submit(self, source, html: str) -> None:
        if not html:
            logger.info("Empty container markup, nothing sent")
            return
        logger.info("Container selected", chars=len(html))
        self.client.submit(ExtractionRequest(html=html))


async def run_selector(url: str, client: ExtractorClient | None = None) -> None:
    selector = BrowserSelector(client)
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=not config.HEADFUL)
        try:
            ctx = await browser.new_context(user_agent=config.USER_AGENT, locale="en-US")
            page = await ctx.new_page()
            await selector.attach(page)

            closed = asyncio.Event()
            page.on("close", lambda _: closed.set())

            logger.info("Opening page", url=url, extractor=selector.client.url)
            await page.goto(url, wait_until="domcontentloaded")
            await closed.wait()

            await selector.client.drain()
        finally:
            await browser.close()
