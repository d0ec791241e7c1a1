#!/usr/bin/env python3
"""
Feasibility runner — scores a DPR JSON export from the command line.

Usage:
    python scripts/run_feasibility.py dpr.json               # Feasibility result
    python scripts/run_feasibility.py dpr.json --simulate    # + comprehensive what-if analysis

Environment: LOG_LEVEL, LOG_FORMAT (json | text), LOG_PERF, HISTORICAL_SIMILAR_PROJECTS_DEFAULT.
"""

import json
import os
import sys

_BACKEND_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

from dpr_engine.config import Settings  # noqa: E402
from dpr_engine.models.document import DPRDocument  # noqa: E402
from dpr_engine.services.errors import ContentUnavailable  # noqa: E402
from dpr_engine.services.feasibility_engine import CompletionFeasibilityEngine  # noqa: E402
from dpr_engine.services.feature_extractor import FeatureExtractor  # noqa: E402
from dpr_engine.services.historical_source import StaticHistoricalSource  # noqa: E402
from dpr_engine.services.logging_config import setup_logging  # noqa: E402
from dpr_engine.services.session_store import SessionStore  # noqa: E402
from dpr_engine.services.simulator_engine import ScenarioSimulator  # noqa: E402


KNOWN_OPTIONS = ("--simulate",)


def main() -> int:
    options = [a for a in sys.argv[1:] if a.startswith("--")]
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    unknown = [o for o in options if o not in KNOWN_OPTIONS]
    if unknown:
        print(f"Unknown option: {', '.join(unknown)}", file=sys.stderr)
        print(__doc__, file=sys.stderr)
        return 2
    if len(args) != 1:
        print(__doc__, file=sys.stderr)
        return 2

    settings = Settings.from_env()
    setup_logging(level=settings.log_level, json_output=settings.json_logs, perf=settings.perf_logs)

    with open(args[0], encoding="utf-8") as fh:
        document = DPRDocument.model_validate(json.load(fh))

    extractor = FeatureExtractor(StaticHistoricalSource(settings.similar_projects_default))
    try:
        output = {"feasibility": CompletionFeasibilityEngine(extractor=extractor).predict(document).to_dict()}
        if "--simulate" in options:
            store = SessionStore(extractor=extractor, idle_ttl_seconds=settings.session_ttl_seconds)
            output["whatIf"] = ScenarioSimulator(store).run_comprehensive_analysis(document).to_dict()
    except ContentUnavailable as e:
        print(f"DPR not ready for scoring: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
