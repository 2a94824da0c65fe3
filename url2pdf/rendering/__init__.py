from url2pdf.rendering.engine import (
    RenderingBackend,
    Url2PdfError,
    SetupError,
    TeardownError,
    RenderError,
    NavigationTimeoutError,
    NavigationError,
    ExportError,
    ContextUnavailableError,
)
