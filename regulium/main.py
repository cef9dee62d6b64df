"""Command line interface for the compliance checker.

Examples:
    regulium laws --jurisdiction EU
    regulium check --feature "Age verification" --law GDPR --json
    regulium check-feature "Live chat" "Real-time messaging between users"
    regulium serve --port 8000
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Sequence

from .common.config_loader import load_settings
from .engine.types import ComplianceReport, EvaluationOptions
from .services.container import build_services
from .services.errors import ServiceError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="regulium", description="Regulatory compliance checker")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    laws = sub.add_parser("laws", help="List laws in the catalog")
    laws.add_argument("--jurisdiction", default="", help="Substring filter on jurisdiction")

    sub.add_parser("features", help="List features in the catalog")

    check = sub.add_parser("check", help="Check catalog features against catalog laws")
    check.add_argument("--feature", action="append", dest="features", help="Feature name (repeatable; default: all)")
    check.add_argument("--law", action="append", dest="laws", help="Law title (repeatable; default: all)")
    _add_evaluation_flags(check)

    discover = sub.add_parser("check-feature", help="Screen and check one ad-hoc feature")
    discover.add_argument("name", help="Feature name")
    discover.add_argument("description", help="Feature description")
    _add_evaluation_flags(discover)

    serve = sub.add_parser("serve", help="Run the REST API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def _add_evaluation_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--no-corrections", action="store_true", help="Do not inject implemented corrections")
    parser.add_argument("--no-abbreviations", action="store_true", help="Do not inject glossary terms")
    parser.add_argument("--json", action="store_true", help="Print the full report as JSON")


def _options(args: argparse.Namespace) -> EvaluationOptions:
    return EvaluationOptions(
        include_corrections=not args.no_corrections,
        include_abbreviations=not args.no_abbreviations,
    )


def _print_report(report: ComplianceReport, as_json: bool) -> None:
    if as_json:
        print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
        return

    if report.screening is not None and report.screening.failed_open:
        print("(screening failed; all laws were checked)")
    for verdict in report.results:
        print(f"[{verdict.status.value}] {verdict.feature_name} / {verdict.law_title}")
        print(f"    {verdict.reasoning}")
        for rec in verdict.recommendations:
            print(f"    - {rec}")

    s = report.summary
    print(
        f"\n{len(report.results)} checks: {s.compliant_count} compliant, "
        f"{s.non_compliant_count} non-compliant, {s.review_required_count} requires review "
        f"(risk score {s.overall_risk_score})"
    )


def _serve(host: str, port: int) -> int:
    import uvicorn

    from backend.main import create_app

    uvicorn.run(create_app(), host=host, port=port)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _serve(args.host, args.port)

    services = build_services(load_settings())
    catalog = services.catalog

    try:
        if args.command == "laws":
            laws = catalog.laws_by_jurisdiction(args.jurisdiction) if args.jurisdiction else catalog.get_laws()
            for law in laws:
                suffix = f" ({law.jurisdiction})" if law.jurisdiction else ""
                print(f"{law.id}\t{law.title}{suffix}")
            return 0

        if args.command == "features":
            for feature in catalog.get_features():
                print(f"{feature.name}\t{feature.description}")
            return 0

        if args.command == "check":
            report = services.aggregator.check_compliance(
                feature_names=args.features,
                law_titles=args.laws,
                options=_options(args),
            )
        else:
            report = services.aggregator.check_feature(
                args.name, args.description, options=_options(args)
            )
    except ServiceError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _print_report(report, args.json)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
