"""
Run summary: counts derived from the ResultMap and their terminal output.
"""

from typing import Dict, Iterable, Optional

from tabulate import tabulate

from url2pdf.core import logger
from url2pdf.models import RunSummary, UrlOutcome


def summarize(results: Dict[str, bool]) -> RunSummary:
    """Pure function of the ResultMap. failed_urls keeps crawl order."""
    failed_urls = [url for url, ok in results.items() if not ok]
    return RunSummary(
        succeeded=len(results) - len(failed_urls),
        failed=len(failed_urls),
        failed_urls=failed_urls,
    )


def failure_table(summary: RunSummary, outcomes: Iterable[UrlOutcome] = ()) -> str:
    # Last outcome wins when a URL was given twice, matching the ResultMap
    by_url = {outcome.url: outcome for outcome in outcomes}
    rows = []
    for url in summary.failed_urls:
        outcome = by_url.get(url)
        rows.append([
            url,
            outcome.status.value if outcome else "-",
            outcome.reason if outcome and outcome.reason else "-",
        ])
    return tabulate(rows, headers=["URL", "Status", "Reason"], tablefmt="simple")


def print_summary(
    summary: RunSummary,
    outcomes: Iterable[UrlOutcome] = (),
    not_attempted: Optional[Iterable[str]] = None,
) -> None:
    logger.info(f"Successes: {summary.succeeded}/{summary.total}")

    if summary.failed > 0:
        logger.warning("Failed:\n" + "\n".join(summary.failed_urls))
        logger.debug("Failure details:\n" + failure_table(summary, outcomes))
    else:
        logger.info("Yay! everything completed without any failure")

    skipped = list(not_attempted or [])
    if skipped:
        logger.warning(f"Not attempted ({len(skipped)}):\n" + "\n".join(skipped))
