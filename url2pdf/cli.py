"""
Command line entry point.
FLOW: parse args -> configure logging -> confirm with the user -> create output dir ->
start browser -> run batch -> print summary -> close browser (always) -> exit code.
"""

import argparse
from pathlib import Path

from url2pdf import __version__, core
from url2pdf.core import logger, resolve_log_level, setup_logger
from url2pdf.models import RunConfig
from url2pdf.pipeline import run_batch
from url2pdf.reporting import print_summary, summarize
from url2pdf.rendering.engine import SetupError
from url2pdf.rendering.playwright_backend import PlaywrightBackend

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

BANNER = r"""
            _ ____            _  __
 _   _ _ __| |___ \ _ __   __| |/ _|
| | | | '__| | __) | '_ \ / _` | |_
| |_| | |  | |/ __/| |_) | (_| |  _|
 \__,_|_|  |_|_____| .__/ \__,_|_|
                   |_|
Render web-pages to pdf
"""

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="url2pdf",
        description=BANNER,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("urls", nargs="*", metavar="URL", help="Urls to crawl into pdfs")
    parser.add_argument("-u", "--urls", dest="extra_urls", nargs="+", action="extend", default=[],
                        metavar="URL", help="Urls to crawl into pdfs (may be repeated)")
    parser.add_argument("-o", "--out", default=core.DEFAULT_OUT,
                        help=f"Output directory path (default: {core.DEFAULT_OUT})")
    parser.add_argument("-t", "--timeout", type=int, default=core.DEFAULT_TIMEOUT,
                        help=f"Timeout for crawling, in milliseconds (default: {core.DEFAULT_TIMEOUT})")
    parser.add_argument("-y", "--auto-accept", action="store_true", help="Auto accepts all prompts")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Adds verbosity level")
    parser.add_argument("-s", "--silent", action="count", default=0, help="Removes verbosity level")
    parser.add_argument("-m", "--mute", action="store_true", help="Mutes all info")
    parser.add_argument("--log-file", default=None, help="Also write log lines to this file")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 1 when any url failed")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def confirm(question: str, input_fn=input) -> bool:
    """Ask until the answer is yes or no. End of input counts as no."""
    while True:
        try:
            answer = input_fn(f"{question} [y/n] ")
        except EOFError:
            return False
        answer = answer.strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print("Please answer yes or no.")


def verify(config: RunConfig, urls, input_fn=input) -> bool:
    """Show what is about to happen and let the user back out."""
    logger.info(f"{len(urls)} Urls")
    logger.info(f"Timeout is set to: {config.timeout_ms}")
    logger.info(f"Output is set to: {config.out_dir}")

    if config.auto_accept:
        return True
    return confirm("Do you wish to crawl?", input_fn)


def prepare_output_dir(out_dir: Path) -> None:
    try:
        Path(out_dir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SetupError(f"Cannot create output directory {out_dir}: {e}") from e


def exit_code_for(batch, summary, strict: bool) -> int:
    if batch.interrupted:
        return EXIT_INTERRUPTED
    if batch.aborted:
        return EXIT_FAILURE
    if strict and summary.failed > 0:
        return EXIT_FAILURE
    return EXIT_OK


def main(argv=None, input_fn=input, backend_factory=None) -> int:
    parser = build_parser()
    # URLs may appear before and after options
    args = parser.parse_intermixed_args(argv)

    urls = list(args.urls) + list(args.extra_urls)
    if not urls:
        parser.error("at least one URL is required")

    setup_logger(log_file=args.log_file, level=resolve_log_level(args.verbose, args.silent, args.mute))

    try:
        config = RunConfig(
            out_dir=args.out,
            timeout_ms=args.timeout,
            auto_accept=args.auto_accept,
            strict=args.strict,
        )
    except ValueError as e:
        parser.error(str(e))

    logger.debug(f"options: {config}")

    if not verify(config, urls, input_fn):
        logger.info("Exiting.")
        return EXIT_OK

    try:
        prepare_output_dir(config.out_dir)
    except SetupError as e:
        logger.error(f"[SETUP] {e}")
        return EXIT_FAILURE

    factory = backend_factory or PlaywrightBackend.from_config
    backend = factory(config)
    try:
        backend.start()
        batch = run_batch(backend, urls, config.out_dir, config.timeout_ms)
        summary = summarize(batch.results)
        print_summary(summary, batch.outcomes, batch.not_attempted)
        return exit_code_for(batch, summary, config.strict)
    except SetupError as e:
        logger.error(f"[SETUP] {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted before the batch started.")
        return EXIT_INTERRUPTED
    finally:
        logger.info("Exiting.")
        backend.close()
