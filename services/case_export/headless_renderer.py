"""
Headless Renderer

Prints HTML to PDF with headless Chromium via Playwright.

One browser session per call. The whole session runs under a wall-clock
bound (asyncio.wait_for); when it elapses the task is cancelled and the
browser is closed on the way out.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from markupsafe import escape
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .exceptions import CaseExportError, RenderEngineUnavailable, RenderFailed, RenderTimeout
from .types import PageOptions

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = (
    '<div style="font-size:10px; color:#6b7b93; padding-left:12mm; padding-right:12mm; width:100%;">'
    '<span>{title}</span></div>'
)

FOOTER_TEMPLATE = (
    '<div style="font-size:10px; color:#6b7b93; padding-left:12mm; padding-right:12mm; width:100%; '
    'display:flex; justify-content:space-between;">'
    '<span>Generated {generated}</span>'
    '<span>Page <span class="pageNumber"></span> of <span class="totalPages"></span></span>'
    '</div>'
)


class HeadlessRenderer:
    """
    HTML to PDF renderer.

    Usage:
        renderer = HeadlessRenderer(no_sandbox=True, timeout_seconds=30)
        pdf_bytes = renderer.render(html, PageOptions(header_title='Case Report'))
    """

    BASE_ARGS = ['--disable-dev-shm-usage', '--disable-gpu']
    SANDBOX_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']

    def __init__(self, no_sandbox: bool = False, timeout_seconds: float = 60):
        self.no_sandbox = no_sandbox
        self.timeout_seconds = timeout_seconds

    def launch_args(self) -> List[str]:
        args = list(self.BASE_ARGS)
        if self.no_sandbox:
            args.extend(self.SANDBOX_ARGS)
        return args

    def render(self, html: str, options: Optional[PageOptions] = None) -> bytes:
        """
        Render HTML to PDF bytes.

        Raises:
            RenderEngineUnavailable: Chromium could not be launched
            RenderTimeout: The session exceeded timeout_seconds
            RenderFailed: Any other engine error
        """
        options = options or PageOptions()
        session = asyncio.wait_for(self._render(html, options), timeout=self.timeout_seconds)

        try:
            pdf_bytes = asyncio.run(session)
        except asyncio.TimeoutError as e:
            logger.error(f"Headless render exceeded {self.timeout_seconds}s")
            raise RenderTimeout(f"PDF rendering timed out after {self.timeout_seconds}s", cause=e)
        except CaseExportError:
            raise
        except PlaywrightTimeoutError as e:
            logger.error(f"Headless render timed out inside the browser: {e}")
            raise RenderTimeout("PDF rendering timed out", cause=e)
        except PlaywrightError as e:
            logger.error(f"Headless render failed: {e}")
            raise RenderFailed(f"PDF rendering failed: {e}", cause=e)

        logger.info(f"Rendered PDF ({len(pdf_bytes)} bytes, {options.format}, landscape={options.landscape})")
        return pdf_bytes

    async def _render(self, html: str, options: PageOptions) -> bytes:
        async with async_playwright() as playwright:
            try:
                browser = await playwright.chromium.launch(headless=True, args=self.launch_args())
            except PlaywrightError as e:
                logger.error(f"Chromium could not be launched: {e}")
                raise RenderEngineUnavailable("PDF engine is not available", cause=e)

            try:
                page = await browser.new_page()
                await page.set_content(html, wait_until='domcontentloaded')
                await page.emulate_media(media='screen')
                return await page.pdf(**self.pdf_options(options))
            finally:
                await browser.close()

    @staticmethod
    def pdf_options(options: PageOptions, generated_on: Optional[str] = None) -> Dict[str, Any]:
        """Keyword arguments for Playwright's page.pdf()."""
        pdf_kwargs = {
            'format': options.format,
            'landscape': options.landscape,
            'print_background': True,
            'margin': dict(options.margin),
            'display_header_footer': options.display_header_footer,
        }
        if options.display_header_footer:
            generated_on = generated_on or datetime.now().strftime('%Y-%m-%d')
            pdf_kwargs['header_template'] = HEADER_TEMPLATE.format(title=escape(options.header_title))
            pdf_kwargs['footer_template'] = FOOTER_TEMPLATE.format(generated=escape(generated_on))
        return pdf_kwargs
