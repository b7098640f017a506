#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from ftxclient import Stream


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream FTX trades for a market")
    p.add_argument("symbol", nargs="?", default="BTC-PERP")
    p.add_argument("count", nargs="?", type=int, default=20, help="Stop after this many trades")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    cancel = asyncio.Event()
    sub = await Stream().subscribe_to_trades(args.symbol, cancel=cancel)

    seen = 0
    async for event in sub:
        trade = event.trade
        liq = " (liquidation)" if trade.liquidation else ""
        side = trade.side.value
        print(f"{trade.time.isoformat()} | {side:4} | {trade.price} x {trade.size}{liq}")
        seen += 1
        if seen >= args.count:
            cancel.set()
            break
    await sub.wait_closed()


if __name__ == "__main__":
    asyncio.run(main())
