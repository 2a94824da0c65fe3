"""
Synchronous PDF renderer using Playwright.
Owns one Chromium instance and one shared page for the whole run.
"""

import os
import tempfile
from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from url2pdf import core
from url2pdf.core import logger
from url2pdf.rendering.engine import (
    ContextUnavailableError,
    ExportError,
    NavigationError,
    NavigationTimeoutError,
    RenderingBackend,
    SetupError,
    TeardownError,
)

# Read once: os.umask can only be queried by setting it
_UMASK = os.umask(0)
os.umask(_UMASK)
PDF_FILE_MODE = 0o666 & ~_UMASK


def _reason(exc: Exception) -> str:
    # Playwright appends a multi-line call log; the first line carries the cause
    text = str(exc).strip()
    return text.splitlines()[0] if text else exc.__class__.__name__


def _write_atomic(save_path: Path, data: bytes) -> None:
    """Write data next to save_path, then rename into place."""
    fd, tmp_name = tempfile.mkstemp(
        dir=str(save_path.parent), prefix=".", suffix=".pdf.part"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        # mkstemp creates 0600; give the PDF the mode a plain open() would
        os.chmod(tmp_name, PDF_FILE_MODE)
        os.replace(tmp_name, save_path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class PlaywrightBackend(RenderingBackend):
    def __init__(
        self,
        headless: bool = core.HEADLESS,
        pdf_format: str = core.PDF_FORMAT,
        print_background: bool = core.PRINT_BACKGROUND,
        media: str = core.EMULATED_MEDIA,
        wait_until: str = core.WAIT_UNTIL,
        user_agent=core.USER_AGENT,
        launch_args=None,
    ):
        self._headless = headless
        self._pdf_format = pdf_format
        self._print_background = print_background
        self._media = media
        self._wait_until = wait_until
        self._user_agent = user_agent
        self._launch_args = list(launch_args if launch_args is not None else core.CHROMIUM_ARGS)

        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None
        self._closed = False

    @classmethod
    def from_config(cls, config):
        return cls(
            headless=config.headless,
            pdf_format=config.pdf_format,
            print_background=config.print_background,
            media=config.media,
            wait_until=config.wait_until,
            user_agent=config.user_agent,
        )

    # ------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------
    def start(self) -> None:
        if self._closed:
            raise SetupError("Backend already closed")
        if self._browser is not None:
            return

        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(
                headless=self._headless,
                args=self._launch_args,
            )
            context_options = {}
            if self._user_agent:
                context_options["user_agent"] = self._user_agent
            self._context = self._browser.new_context(**context_options)
            self._page = self._context.new_page()
        except Exception as e:
            raise SetupError(f"Failed to launch browser: {_reason(e)}") from e

        logger.debug(f"[RENDER] Chromium started (headless={self._headless}).")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._shutdown()
        except TeardownError as e:
            logger.warning(f"[TEARDOWN] {e}")
        else:
            logger.debug("[RENDER] Chromium stopped.")

    def _shutdown(self) -> None:
        errors = []
        if self._browser is not None:
            try:
                self._browser.close()
            except Exception as e:
                errors.append(f"browser close failed: {_reason(e)}")
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as e:
                errors.append(f"playwright stop failed: {_reason(e)}")

        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        if errors:
            raise TeardownError("; ".join(errors))

    # ------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------
    def _check_alive(self) -> None:
        if self._browser is None or not self._browser.is_connected():
            raise ContextUnavailableError("Browser is not running")

    def _shared_page(self):
        self._check_alive()
        if self._page is None or self._page.is_closed():
            # A page may close itself (window.close()); the browser is still usable
            try:
                self._page = self._context.new_page()
            except PlaywrightError as e:
                raise ContextUnavailableError(f"Cannot open a new page: {_reason(e)}") from e
        return self._page

    def open(self, url: str, timeout_ms: int) -> None:
        page = self._shared_page()
        try:
            page.goto(url, wait_until=self._wait_until, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(_reason(e)) from e
        except PlaywrightError as e:
            self._check_alive()
            raise NavigationError(_reason(e)) from e

    def export_pdf(self, save_path: Path) -> None:
        page = self._shared_page()
        save_path = Path(save_path)
        try:
            page.emulate_media(media=self._media)
            pdf_bytes = page.pdf(
                format=self._pdf_format,
                print_background=self._print_background,
            )
        except PlaywrightError as e:
            self._check_alive()
            raise ExportError(_reason(e)) from e

        try:
            _write_atomic(save_path, pdf_bytes)
        except OSError as e:
            raise ExportError(f"Cannot write {save_path}: {e}") from e
