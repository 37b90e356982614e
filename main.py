"""Collection report entrypoint."""

from __future__ import annotations

import json
import logging

from collection_report.application.report_service import run_report_pipeline


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    result = run_report_pipeline()
    for record in result.summary["display"]:
        print(" | ".join(record.values()))
    if result.pending_extractions:
        print("Extractions awaiting a branch selection:")
        print(json.dumps(result.pending_extractions, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
