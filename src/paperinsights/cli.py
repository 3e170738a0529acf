"""CLI entrypoint for paper insight extraction."""

from __future__ import annotations

import argparse
import json
import logging
import mimetypes
import sys
from contextlib import nullcontext
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from tqdm import tqdm

from .config import load_settings
from .exceptions import ConfigError, InvalidInputError, PaperInsightsError
from .models import AnalysisRequest, PdfUpload
from .pipeline import PaperInsightsPipeline, build_pmc_client
from .pmc_client import PmcClient
from .sdg import sdg_label

LOGGER = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Extract SDG-tagged lessons and challenges from research papers"
    )
    parser.add_argument("--dotenv", type=Path, default=None, help="Path to .env file")
    parser.add_argument("--model", type=str, default=None, help="Override OPENAI_MODEL")
    parser.add_argument(
        "--no-rich",
        action="store_true",
        default=False,
        help="Disable Rich output, use plain logging and tqdm instead",
    )
    parser.add_argument(
        "--verbose", action="store_true", default=False, help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Analyze a PDF, pasted text or PMC record")
    analyze.add_argument("--pdf", type=Path, default=None, help="PDF file to analyze")
    text_group = analyze.add_mutually_exclusive_group()
    text_group.add_argument("--text", type=str, default=None, help="Paper text")
    text_group.add_argument(
        "--text-file", type=Path, default=None, help="File containing paper text"
    )
    analyze.add_argument("--title", type=str, default=None, help="Known paper title")
    analyze.add_argument(
        "--pmcid",
        action="append",
        default=None,
        help="PubMed Central id (e.g. PMC1234567). Repeat to analyze several records.",
    )
    analyze.add_argument(
        "--output", type=Path, default=None, help="Write JSON output to this file"
    )

    search = subparsers.add_parser("search", help="Search open-access PMC papers by SDG")
    search.add_argument("--sdg", type=int, required=True, help="SDG number (1-17)")
    search.add_argument("--keywords", type=str, default="", help="Extra search keywords")
    search.add_argument(
        "--max-results", type=int, default=None, help="Override PMC_SEARCH_MAX_RESULTS"
    )
    return parser.parse_args(argv)


def configure_logging(verbose: bool, use_rich: bool, console: Console) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    if use_rich:
        logging.basicConfig(
            level=level,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def build_requests(args: argparse.Namespace) -> list[AnalysisRequest]:
    upload = None
    if args.pdf is not None:
        if not args.pdf.is_file():
            raise FileNotFoundError(f"PDF does not exist: {args.pdf}")
        content_type, _ = mimetypes.guess_type(args.pdf.name)
        upload = PdfUpload(
            data=args.pdf.read_bytes(),
            content_type=content_type or "application/octet-stream",
            filename=args.pdf.name,
        )

    text = args.text
    if args.text_file is not None:
        text = args.text_file.read_text(encoding="utf-8", errors="ignore")

    requests: list[AnalysisRequest] = []
    if upload is not None or (text or "").strip():
        requests.append(AnalysisRequest.from_inputs(pdf=upload, text=text, title=args.title))
    for pmcid in args.pmcid or []:
        requests.append(AnalysisRequest.from_inputs(pmcid=pmcid.strip()))

    if not requests:
        raise InvalidInputError("Provide --pdf, --text, --text-file or at least one --pmcid")
    return requests


def run_analyze(args: argparse.Namespace, console: Console) -> int:
    settings = load_settings(dotenv_path=args.dotenv)
    if args.model:
        settings = replace(settings, openai_model=args.model)

    requests = build_requests(args)
    use_rich = not args.no_rich

    status = console.status("Starting analysis...") if use_rich else nullcontext()
    with status as live_status:

        def _progress(step: str, details: str) -> None:
            if live_status is not None:
                live_status.update(f"[bold]{step}[/bold] {details}")

        pipeline = PaperInsightsPipeline.from_settings(settings, progress_callback=_progress)

        if len(requests) == 1:
            payload: object = pipeline.analyze(requests[0]).to_dict()
        else:
            iterable = requests if use_rich else tqdm(requests, desc="Analyzing", unit="paper")
            results = pipeline.analyze_many(iterable)
            payload = [
                {
                    "source": item.source,
                    "analyzed_at": item.analyzed_at,
                    "success": item.success,
                    "error": item.error,
                    "result": item.result.to_dict() if item.result else None,
                }
                for item in results
            ]

    rendered = json.dumps(payload, ensure_ascii=False, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(rendered + "\n", encoding="utf-8")
        LOGGER.info("Wrote %s", args.output)
    else:
        print(rendered)

    if isinstance(payload, list):
        failed = [item for item in payload if not item["success"]]
        print(
            f"Finished. total={len(payload)} success={len(payload) - len(failed)} "
            f"failed={len(failed)}",
            file=sys.stderr,
        )
        return 1 if failed else 0
    return 0


def run_search(args: argparse.Namespace, console: Console) -> int:
    try:
        settings = load_settings(dotenv_path=args.dotenv)
    except ConfigError:
        # Searching does not need the model credential.
        settings = None

    if settings is not None:
        client = build_pmc_client(settings)
        max_results = args.max_results or settings.pmc_search_max_results
    else:
        client = PmcClient()
        max_results = args.max_results or 10

    papers = client.search_by_sdg(args.sdg, keywords=args.keywords, max_results=max_results)

    if args.no_rich:
        print(json.dumps([paper.to_dict() for paper in papers], ensure_ascii=False, indent=2))
        return 0

    table = Table(title=f"SDG {args.sdg}: {sdg_label(args.sdg)}")
    table.add_column("PMCID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Authors")
    table.add_column("Journal")
    table.add_column("Date", no_wrap=True)
    for paper in papers:
        table.add_row(paper.pmcid, paper.title, paper.authors, paper.journal, paper.date)
    Console().print(table)
    if not papers:
        console.print("No open-access papers found for this SDG. Try another.")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    console = Console(stderr=True)
    configure_logging(args.verbose, use_rich=not args.no_rich, console=console)

    try:
        if args.command == "analyze":
            code = run_analyze(args, console)
        else:
            code = run_search(args, console)
    except PaperInsightsError as exc:
        LOGGER.error("%s", exc)
        raise SystemExit(1) from exc

    raise SystemExit(code)


if __name__ == "__main__":
    main()
