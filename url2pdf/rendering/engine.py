from abc import ABC, abstractmethod
from pathlib import Path


class Url2PdfError(Exception):
    """Base exception for the tool."""
    pass

class SetupError(Url2PdfError):
    """Output directory or browser could not be prepared. The run never starts."""
    pass

class TeardownError(Url2PdfError):
    """Browser could not be released cleanly."""
    pass

class RenderError(Url2PdfError):
    """Base per-URL rendering exception. Never aborts a batch."""
    pass

class NavigationTimeoutError(RenderError):
    """Raised when the page does not settle within the navigation timeout."""
    pass

class NavigationError(RenderError):
    """Raised when the page cannot be loaded (DNS, TLS, refused, aborted...)."""
    pass

class ExportError(RenderError):
    """Raised when the loaded page cannot be exported or written as PDF."""
    pass

class ContextUnavailableError(Url2PdfError):
    """Raised when the shared browser is gone and no further URL can be rendered."""
    pass


class RenderingBackend(ABC):
    """
    Abstraction for the underlying browser driver.
    Contractual Requirements for Implementers:
    - MUST hold one shared rendering context between start() and close().
    - MUST enforce the navigation timeout passed to open().
    - MUST NOT leave a partial file behind when export_pdf() fails.
    - close() MUST be idempotent and MUST NOT raise.
    """

    @abstractmethod
    def start(self) -> None:
        """Launch the browser. Raises SetupError."""
        pass

    @abstractmethod
    def open(self, url: str, timeout_ms: int) -> None:
        """
        Load url in the shared page and wait for the network to go idle.
        Raises NavigationTimeoutError, NavigationError or ContextUnavailableError.
        """
        pass

    @abstractmethod
    def export_pdf(self, save_path: Path) -> None:
        """
        Render the currently loaded page to save_path.
        Raises ExportError or ContextUnavailableError.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        pass

    def __enter__(self):
        try:
            self.start()
        except BaseException:
            # __exit__ is not called when __enter__ raises
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
