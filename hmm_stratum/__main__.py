"""Preview the mining.notify line for a saved getblocktemplate result."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config
from .errors import StratumJobError
from .job import build_mining_job, new_job_id

logger = logging.getLogger("hmm_stratum")


def _parse_payout(value: str) -> dict[str, str]:
    address, sep, percent = value.rpartition(":")
    if not sep or not address:
        raise argparse.ArgumentTypeError(f"expected ADDRESS:PERCENT, got {value!r}")
    return {"address": address, "percent": percent}


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Build a Stratum job from a block template JSON file")
    parser.add_argument("template", type=Path, help="getblocktemplate result saved as JSON")
    parser.add_argument(
        "--payout",
        action="append",
        type=_parse_payout,
        default=None,
        metavar="ADDRESS:PERCENT",
        help="Payout address and percentage (repeatable; overrides configured payouts)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Job builder JSON config path")
    parser.add_argument("--job-id", default=None, help="Job id (random if omitted)")
    parser.add_argument("--no-clean-jobs", action="store_true", help="Send clean_jobs=false")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        with open(args.template, "r", encoding="utf-8") as f:
            template = json.load(f)
        # bitcoin-cli output may be wrapped in a JSON-RPC envelope
        if isinstance(template, dict) and "result" in template and "previousblockhash" not in template:
            template = template["result"]

        config = load_config(args.config)
        job = build_mining_job(
            args.job_id or new_job_id(),
            template,
            args.payout,
            clean_jobs=not args.no_clean_jobs,
            config=config,
        )
    except (OSError, json.JSONDecodeError, StratumJobError) as exc:
        logger.error("Failed to build job: %s", exc)
        return 1

    print(job.notify_message())
    return 0


if __name__ == "__main__":
    sys.exit(main())
