"""
Run the allocation engine against a JSON data file.

Usage:
    # Assign employees to the open roles of a project
    python scripts/run_allocation.py --data scripts/sample_data.json assign --project proj-1

    # Optimize a learner's certificate path
    python scripts/run_allocation.py --data scripts/sample_data.json optimize \
        --user u1 --path path-data --levels 5 --max-per-level 4
"""

import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from talent_allocation.config import get_settings, setup_logging
from talent_allocation.engine import AllocationEngine
from talent_allocation.exceptions import AllocationError
from talent_allocation.models import OptimizationRequest
from talent_allocation.providers import InMemoryDataProvider

logger = logging.getLogger(__name__)


async def run_assign(engine: AllocationEngine, args) -> dict:
    assignments = await engine.assign_project_roles(args.project)
    report = engine.last_report
    return {
        "project_id": args.project,
        "assignments": [a.model_dump(mode="json") for a in assignments],
        "skipped_roles": report.skipped_roles if report else {},
    }


async def run_optimize(engine: AllocationEngine, args) -> dict:
    settings = engine.settings
    request = OptimizationRequest(
        user_id=args.user,
        path_id=args.path,
        num_levels=args.levels or settings.default_num_levels,
        max_per_level=args.max_per_level or settings.default_max_per_level,
        consider_time=not args.ignore_time,
        consider_cost=not args.ignore_cost,
    )
    result = await engine.optimize_certificate_path(request)
    output = result.model_dump(mode="json")
    output["summary"] = result.summary()
    return output


def main():
    parser = argparse.ArgumentParser(description="Run the talent allocation engine")
    parser.add_argument("--data", required=True, help="JSON document with the provider data")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("--verbose", action="store_true", help="Enable DEBUG logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    assign = subparsers.add_parser("assign", help="Assign employees to project roles")
    assign.add_argument("--project", required=True, help="Project identifier")

    optimize = subparsers.add_parser("optimize", help="Optimize a certificate path")
    optimize.add_argument("--user", required=True, help="Learner identifier")
    optimize.add_argument("--path", required=True, help="Career path identifier")
    optimize.add_argument("--levels", type=int, default=None, help="Number of learning levels (2-10)")
    optimize.add_argument("--max-per-level", type=int, default=None, help="Certificates per level")
    optimize.add_argument("--ignore-time", action="store_true", help="Skip the time estimate")
    optimize.add_argument("--ignore-cost", action="store_true", help="Skip the cost estimate")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings, verbose=args.verbose)

    provider = InMemoryDataProvider.from_json_file(args.data)
    engine = AllocationEngine(provider, settings=settings, seed=args.seed)

    try:
        if args.command == "assign":
            output = asyncio.run(run_assign(engine, args))
        else:
            output = asyncio.run(run_optimize(engine, args))
    except (AllocationError, ValidationError) as e:
        logger.error(str(e))
        sys.exit(1)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
