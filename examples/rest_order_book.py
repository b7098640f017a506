#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from ftxclient import RESTClient


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch FTX Order Book via REST")
    p.add_argument("symbol", nargs="?", default="BTC/USD")
    p.add_argument("depth", nargs="?", type=int, default=20)
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    rest = RESTClient()
    ob = await rest.get_order_book(args.symbol, depth=args.depth)
    print(f"{args.symbol} Order Book (top {args.depth})")
    print("Bids:")
    for p, q in ob.bids[:10]:
        print(f"  {p:>12} x {q:>12}")
    print("Asks:")
    for p, q in ob.asks[:10]:
        print(f"  {p:>12} x {q:>12}")
    await rest.close()


if __name__ == "__main__":
    asyncio.run(main())
