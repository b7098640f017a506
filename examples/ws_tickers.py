#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging

from ftxclient import Stream
from ftxclient.core import StreamConfig


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream FTX tickers for one or more markets")
    p.add_argument("symbols", nargs="*", default=["BTC-PERP", "ETH-PERP"])
    p.add_argument("--timeout", type=float, default=60.0, help="Read timeout in seconds")
    p.add_argument("--debug", action="store_true")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)

    stream = Stream(StreamConfig(timeout=args.timeout, debug=args.debug))
    async with await stream.subscribe_to_tickers(*args.symbols) as sub:
        async for event in sub:
            t = event.ticker
            print(f"{t.time.isoformat()} | {event.market} | bid={t.bid} ask={t.ask} last={t.last}")
    if sub.termination_error is not None:
        print(f"stream ended: {sub.termination_error}")


if __name__ == "__main__":
    asyncio.run(main())
