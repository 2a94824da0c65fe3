"""
Batch pipeline: renders each URL to PDF, one after the other, against one shared backend.
Invariant: a failing URL never aborts the batch. Only loss of the backend itself
(or Ctrl-C) stops it early, and whatever was recorded so far is still returned.
"""

import time
from pathlib import Path
from typing import Callable, Iterable

from url2pdf.core import VERBOSE, logger
from url2pdf.models import BatchResult, OutcomeStatus, UrlOutcome
from url2pdf.naming import name_from_url
from url2pdf.rendering.engine import (
    ContextUnavailableError,
    ExportError,
    NavigationError,
    NavigationTimeoutError,
    RenderError,
    RenderingBackend,
)

_STATUS_BY_ERROR = (
    (NavigationTimeoutError, OutcomeStatus.NAVIGATION_TIMEOUT),
    (NavigationError, OutcomeStatus.NAVIGATION_FAILED),
    (ExportError, OutcomeStatus.EXPORT_FAILED),
)


def _status_for(exc: RenderError) -> OutcomeStatus:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return OutcomeStatus.RENDER_FAILED


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def save_path_for(url: str, out_dir: Path, name_fn: Callable[[str], str] = name_from_url) -> Path:
    return Path(out_dir) / f"{name_fn(url)}.pdf"


def render_url(
    backend: RenderingBackend,
    url: str,
    out_dir: Path,
    timeout_ms: int,
    name_fn: Callable[[str], str] = name_from_url,
) -> UrlOutcome:
    """
    Crawls a url and saves it as pdf in out_dir.

    Every failure is turned into a failed UrlOutcome, except
    ContextUnavailableError which is left to the batch loop.
    """
    save_path = save_path_for(url, out_dir, name_fn)
    start = time.monotonic()
    logger.log(VERBOSE, f"Crawling: {url}")

    try:
        backend.open(url, timeout_ms)
        backend.export_pdf(save_path)
    except ContextUnavailableError:
        raise
    except RenderError as e:
        status, reason = _status_for(e), str(e) or e.__class__.__name__
    except Exception as e:
        # Anything the backend did not classify still only fails this URL
        logger.debug(f"Unexpected render failure for {url}", exc_info=True)
        status, reason = OutcomeStatus.RENDER_FAILED, f"{e.__class__.__name__}: {e}"
    else:
        logger.debug(f"Saved: {url} -> {save_path}")
        return UrlOutcome(url, save_path, OutcomeStatus.SUCCESS, duration_ms=_elapsed_ms(start))

    logger.error(f"Url Failed: {url} | Reason: {reason}")
    return UrlOutcome(url, save_path, status, reason=reason, duration_ms=_elapsed_ms(start))


def run_batch(
    backend: RenderingBackend,
    urls: Iterable[str],
    out_dir: Path,
    timeout_ms: int,
    name_fn: Callable[[str], str] = name_from_url,
) -> BatchResult:
    """
    FLOW: For each URL in order -> render_url -> record outcome.
    On ContextUnavailableError or KeyboardInterrupt: record the current URL as failed
    (context loss only), list the rest as not attempted, return the partial result.
    """
    urls = list(urls)
    result = BatchResult()

    for index, url in enumerate(urls):
        try:
            outcome = render_url(backend, url, out_dir, timeout_ms, name_fn)
        except ContextUnavailableError as e:
            logger.critical(f"[BATCH] Rendering context lost while processing {url}: {e}")
            result.record(UrlOutcome(
                url,
                save_path_for(url, out_dir, name_fn),
                OutcomeStatus.CONTEXT_LOST,
                reason=str(e),
            ))
            result.not_attempted = urls[index + 1:]
            result.aborted = True
            break
        except KeyboardInterrupt:
            logger.warning(f"[BATCH] Interrupted while processing {url}.")
            result.not_attempted = urls[index:]
            result.interrupted = True
            break
        result.record(outcome)

    return result
