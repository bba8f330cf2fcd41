"""Speaking Agent - event lead finder

Simple CLI for running an event search.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from speaking_agent.errors import SpeakingAgentError
from speaking_agent.models.events import SearchRequest
from speaking_agent.pipeline.ranking import build_pipeline
from speaking_agent.services.export import records_to_csv


async def run_search(request: SearchRequest, csv_path: str | None = None) -> int:
    """Run the ranking pipeline and print or export the results."""
    print(f"Topics: {', '.join(request.topics) or '(defaults)'}")
    print("-" * 50)

    try:
        pipeline = build_pipeline()
        results = await pipeline.run(request)
    except SpeakingAgentError as e:
        print(f"\n[!] Error: {e}")
        return 1

    if csv_path:
        Path(csv_path).write_text(records_to_csv(results), encoding="utf-8")
        print(f"[+] Wrote {len(results)} events to {csv_path}")
        return 0

    print(f"[*] {len(results)} events\n")
    for record in results:
        dates = " - ".join(d for d in (record.start_date, record.end_date) if d)
        print(f"{record.score:>6.1f}  {record.event_name[:70]}")
        print(f"        {record.url}")
        if dates or record.location_text:
            print(f"        {dates}  {record.location_text}".rstrip())
    return 0


def main():
    parser = argparse.ArgumentParser(description="Speaking Agent event search")
    parser.add_argument("--topic", "-t", action="append", default=[], help="Topic (repeatable)")
    parser.add_argument("--no-healthcare", action="store_true", help="Disable the healthcare boost")
    parser.add_argument("--no-texas", action="store_true", help="Disable the Texas boost")
    parser.add_argument("--max-results", "-n", type=int, default=8, help="Results per query")
    parser.add_argument("--csv", help="Write results to this CSV file instead of printing")

    args = parser.parse_args()

    request = SearchRequest(
        topics=tuple(args.topic),
        prioritize_healthcare=not args.no_healthcare,
        prioritize_texas=not args.no_texas,
        max_results_per_query=max(args.max_results, 1),
    )
    sys.exit(asyncio.run(run_search(request, args.csv)))


if __name__ == "__main__":
    main()
