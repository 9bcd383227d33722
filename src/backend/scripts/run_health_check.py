from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.health_check.config import load_config  # noqa: E402
from common.health_check.reports import ReportFormat  # noqa: E402
from pipelines.data_source import get_data_source  # noqa: E402
from pipelines.health_check_service import FarmRecordsHealthCheck  # noqa: E402
from pipelines.state_store import InMemoryStateStore, LocalStateStore  # noqa: E402

_EXTENSIONS = {
    ReportFormat.STRUCTURED: "json",
    ReportFormat.TABULAR: "csv",
    ReportFormat.STYLED_DOCUMENT: "html",
    ReportFormat.PLAIN_TEXT: "txt",
}


def _write_payloads(out_path: Path, payloads) -> None:
    out_path.write_text(json.dumps([p.model_dump(mode="json") for p in payloads], indent=2))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Run the farm records health check against a JSON export and write report files."
    )
    parser.add_argument(
        "--data",
        required=True,
        help="Path to a farm records JSON export (animals, health_records, breeding_records, ...).",
    )
    parser.add_argument(
        "--output-dir",
        default=".",
        help="Output directory for report files (default: current directory).",
    )
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=[f.value for f in ReportFormat],
        help="Report format to write; repeat for several (default: all).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="YAML config file (defaults to $FARM_HEALTH_CONFIG).",
    )
    parser.add_argument(
        "--state-dir",
        default=None,
        help="Directory that keeps the last result and run history between invocations.",
    )
    parser.add_argument(
        "--integrations",
        action="store_true",
        help="Also write task, reminder and notification payloads as JSON.",
    )
    parser.add_argument(
        "--fail-on-critical",
        action="store_true",
        help="Exit with status 1 when any critical issue is found.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    state_store = LocalStateStore(Path(args.state_dir)) if args.state_dir else InMemoryStateStore()
    service = FarmRecordsHealthCheck(
        get_data_source("json", path=Path(args.data)),
        state_store=state_store,
        config=load_config(args.config),
    )
    result = service.run_full_health_check()

    output_dir = Path(args.output_dir).resolve()
    output_dir.mkdir(parents=True, exist_ok=True)
    base_name = f"health_check_{result.timestamp.strftime('%Y%m%dT%H%M%SZ')}"

    formats = [ReportFormat(f) for f in args.formats] if args.formats else list(ReportFormat)
    for fmt in formats:
        out_path = output_dir / f"{base_name}.{_EXTENSIONS[fmt]}"
        out_path.write_text(service.export_report(fmt), encoding="utf-8")
        print(f"Wrote {out_path}")

    if args.integrations:
        for name, payloads in (
            ("tasks", service.integrate_with_task_manager()),
            ("reminders", service.integrate_with_reminders()),
            ("notifications", service.integrate_with_notifications()),
        ):
            out_path = output_dir / f"{base_name}_{name}.json"
            _write_payloads(out_path, payloads)
            print(f"Wrote {out_path}")

    summary = result.summary
    print(
        f"Total issues: {summary.total_issues} "
        f"(critical={summary.critical_issues}, high={summary.high_issues}, "
        f"medium={summary.medium_issues}, low={summary.low_issues}, info={summary.info_issues})"
    )

    if args.fail_on_critical and summary.critical_issues > 0:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
