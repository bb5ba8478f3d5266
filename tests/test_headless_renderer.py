"""
Headless renderer tests.

Playwright is patched; these tests cover the session lifecycle, page
options and error mapping, not Chromium itself.

Run with: python -m pytest tests/test_headless_renderer.py -v
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from services.case_export import (
    HeadlessRenderer,
    PageOptions,
    RenderEngineUnavailable,
    RenderFailed,
    RenderTimeout,
)


class MockPlaywrightSession:
    """The async_playwright() context manager and the objects behind it."""

    def __init__(self, pdf_bytes=b'%PDF-1.7 rendered'):
        self.page = MagicMock()
        self.page.set_content = AsyncMock()
        self.page.emulate_media = AsyncMock()
        self.page.pdf = AsyncMock(return_value=pdf_bytes)

        self.browser = MagicMock()
        self.browser.new_page = AsyncMock(return_value=self.page)
        self.browser.close = AsyncMock()

        self.playwright = MagicMock()
        self.playwright.chromium.launch = AsyncMock(return_value=self.browser)

        self.context = MagicMock()
        self.context.__aenter__.return_value = self.playwright
        self.context.__aexit__.return_value = False

    def factory(self):
        return MagicMock(return_value=self.context)


@pytest.fixture
def session():
    session = MockPlaywrightSession()
    with patch('services.case_export.headless_renderer.async_playwright', session.factory()):
        yield session


class TestRender:

    def test_returns_pdf_bytes(self, session):
        pdf_bytes = HeadlessRenderer().render('<p>Hello</p>')
        assert pdf_bytes == b'%PDF-1.7 rendered'
        session.page.set_content.assert_awaited_once_with('<p>Hello</p>', wait_until='domcontentloaded')
        session.page.emulate_media.assert_awaited_once_with(media='screen')
        session.browser.close.assert_awaited_once()

    def test_page_options_passed_to_pdf(self, session):
        HeadlessRenderer().render('<p/>', PageOptions(format='Letter', landscape=True, header_title='Cases Summary'))
        kwargs = session.page.pdf.await_args.kwargs
        assert kwargs['format'] == 'Letter'
        assert kwargs['landscape'] is True
        assert kwargs['print_background'] is True
        assert 'Cases Summary' in kwargs['header_template']

    def test_sandbox_flags(self, session):
        HeadlessRenderer(no_sandbox=True).render('<p/>')
        args = session.playwright.chromium.launch.await_args.kwargs['args']
        assert '--no-sandbox' in args

        HeadlessRenderer(no_sandbox=False).render('<p/>')
        args = session.playwright.chromium.launch.await_args.kwargs['args']
        assert '--no-sandbox' not in args

    def test_launch_failure(self, session):
        session.playwright.chromium.launch.side_effect = PlaywrightError('Executable does not exist')
        with pytest.raises(RenderEngineUnavailable):
            HeadlessRenderer().render('<p/>')

    def test_engine_error(self, session):
        session.page.pdf.side_effect = PlaywrightError('Target closed')
        with pytest.raises(RenderFailed):
            HeadlessRenderer().render('<p/>')
        session.browser.close.assert_awaited_once()

    def test_timeout_closes_browser(self, session):
        async def never_finishes(**kwargs):
            await asyncio.sleep(10)

        session.page.pdf.side_effect = never_finishes
        with pytest.raises(RenderTimeout):
            HeadlessRenderer(timeout_seconds=0.05).render('<p/>')
        session.browser.close.assert_awaited_once()


class TestPdfOptions:

    def test_defaults(self):
        kwargs = HeadlessRenderer.pdf_options(PageOptions(), generated_on='2024-06-15')
        assert kwargs['format'] == 'A4'
        assert kwargs['landscape'] is False
        assert kwargs['margin'] == {'top': '16mm', 'right': '14mm', 'bottom': '18mm', 'left': '14mm'}
        assert 'Generated 2024-06-15' in kwargs['footer_template']
        assert 'pageNumber' in kwargs['footer_template']

    def test_header_title_escaped(self):
        kwargs = HeadlessRenderer.pdf_options(PageOptions(header_title='<b>Report</b>'))
        assert '&lt;b&gt;Report&lt;/b&gt;' in kwargs['header_template']

    def test_no_header_footer(self):
        kwargs = HeadlessRenderer.pdf_options(PageOptions(display_header_footer=False))
        assert kwargs['display_header_footer'] is False
        assert 'header_template' not in kwargs
