from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from url2pdf import core


class OutcomeStatus(Enum):
    SUCCESS = "SUCCESS"
    NAVIGATION_TIMEOUT = "NAVIGATION_TIMEOUT"
    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    EXPORT_FAILED = "EXPORT_FAILED"
    RENDER_FAILED = "RENDER_FAILED"
    CONTEXT_LOST = "CONTEXT_LOST"


@dataclass(frozen=True)
class RunConfig:
    """
    Settings for one run. Built once at startup, never mutated.
    Invariant: out_dir is absolute.
    """
    out_dir: Path
    timeout_ms: int = core.DEFAULT_TIMEOUT
    auto_accept: bool = False
    strict: bool = False
    headless: bool = core.HEADLESS
    pdf_format: str = core.PDF_FORMAT
    print_background: bool = core.PRINT_BACKGROUND
    media: str = core.EMULATED_MEDIA
    wait_until: str = core.WAIT_UNTIL
    user_agent: Optional[str] = core.USER_AGENT

    def __post_init__(self):
        # frozen: bypass __setattr__ to normalize the path
        object.__setattr__(self, "out_dir", Path(self.out_dir).expanduser().resolve())
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")


@dataclass(frozen=True)
class UrlOutcome:
    """
    Result of processing a single URL.
    Invariant: reason is set iff status is not SUCCESS.
    """
    url: str
    save_path: Path
    status: OutcomeStatus
    reason: Optional[str] = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS


@dataclass
class BatchResult:
    """
    Everything one batch produced.
    results is the ResultMap: url -> succeeded, in crawl order.
    """
    results: Dict[str, bool] = field(default_factory=dict)
    outcomes: List[UrlOutcome] = field(default_factory=list)
    not_attempted: List[str] = field(default_factory=list)
    aborted: bool = False
    interrupted: bool = False

    def record(self, outcome: UrlOutcome) -> None:
        self.results[outcome.url] = outcome.succeeded
        self.outcomes.append(outcome)


@dataclass(frozen=True)
class RunSummary:
    succeeded: int
    failed: int
    failed_urls: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
