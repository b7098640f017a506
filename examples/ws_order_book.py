#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from ftxclient import Stream


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Stream FTX order book snapshots and deltas")
    p.add_argument("symbol", nargs="?", default="BTC-PERP")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with await Stream().subscribe_to_order_books(args.symbol) as sub:
        async for event in sub:
            book = event.order_book
            if book.action == "partial":
                print(f"snapshot: {len(book.bids)} bids, {len(book.asks)} asks")
                print(f"  checksum={book.checksum}")
                print(f"  best bid={book.best_bid} best ask={book.best_ask}")
            else:
                print(f"update: {len(book.bids)} bid levels, {len(book.asks)} ask levels")


if __name__ == "__main__":
    asyncio.run(main())
