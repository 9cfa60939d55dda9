#!/usr/bin/env python3
"""
Run the strategic analysis over a case-material JSON file and print the result.
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from litigation_intel import configure_logging
from litigation_intel.collaborators import Collaborators, StaticContradictionFinder
from litigation_intel.delta import compute_analysis_delta
from litigation_intel.engine import analyze_case, build_snapshot
from litigation_intel.schemas import AnalysisSnapshot, CaseMaterial, Contradiction


def main() -> int:
    parser = argparse.ArgumentParser(description="Analyse one case from a case-material JSON file.")
    parser.add_argument("path", help="Path to case material JSON")
    parser.add_argument("--contradictions", help="JSON list of contradiction records for the case bundle")
    parser.add_argument("--previous", help="Previous snapshot JSON; adds a 'delta' section to the output")
    parser.add_argument("--now", help="ISO timestamp to analyse as of (default: current time)")
    parser.add_argument("--log-level", default=None, help="Override LITIGATION_LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(args.log_level)

    path = Path(args.path)
    if not path.exists():
        print(json.dumps({"error": "file_not_found", "path": str(path)}))
        return 1

    try:
        material = CaseMaterial.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print(json.dumps({"error": "invalid_case_material", "details": e.errors(include_url=False)}, default=str))
        return 1

    collaborators = Collaborators.defaults()
    if args.contradictions and material.bundle_id:
        records = json.loads(Path(args.contradictions).read_text(encoding="utf-8"))
        collaborators.contradictions = StaticContradictionFinder(
            {material.bundle_id: [Contradiction.model_validate(r) for r in records]}
        )

    now = datetime.fromisoformat(args.now) if args.now else None
    analysis = asyncio.run(analyze_case(material, collaborators, now=now))

    output = analysis.model_dump(mode="json")
    snapshot = build_snapshot(analysis)
    output["snapshot"] = snapshot.model_dump(mode="json")
    if args.previous:
        previous = AnalysisSnapshot.model_validate_json(Path(args.previous).read_text(encoding="utf-8"))
        output["delta"] = compute_analysis_delta(previous, snapshot).model_dump(mode="json")

    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
