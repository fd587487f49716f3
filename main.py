# coalition/main.py
"""Inspect, reset or run the product write retry queue."""
import argparse
import asyncio
import json
import os
import sys
from typing import Optional, Sequence

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from services.context import AppContext, build_context


async def _run(ctx: AppContext, ticks: Optional[int]) -> None:
    # first pass right away, then on the timer
    await ctx.queue.process_once()
    ctx.queue.start()
    try:
        if ticks is None:
            while True:
                await asyncio.sleep(3600)
        else:
            await asyncio.sleep(ticks * ctx.queue.settings.tick_interval_sec)
    finally:
        await ctx.aclose()
    print(f"Retry queue stopped: {ctx.queue.pending_count()} writes still pending.")


async def _dispatch(args: argparse.Namespace, ctx: AppContext) -> None:
    if args.command == "status":
        print(json.dumps(ctx.products.status(), ensure_ascii=False, indent=2))
    elif args.command == "clear":
        count = ctx.queue.pending_count()
        ctx.queue.clear()
        print(f"Cleared {count} pending writes.")
    elif args.command == "run":
        await _run(ctx, args.ticks)
        return
    await ctx.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__ or "")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Print pending writes as JSON")
    sub.add_parser("clear", help="Drop every pending write")
    run = sub.add_parser("run", help="Retry pending writes until interrupted")
    run.add_argument(
        "--ticks",
        type=int,
        default=None,
        help="Stop after this many tick intervals (default: run forever)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    ctx = build_context()
    try:
        asyncio.run(_dispatch(args, ctx))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
