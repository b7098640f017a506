#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio

from ftxclient import RESTClient
from ftxclient.core import Region


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="List FTX markets via REST")
    p.add_argument("--type", default=None, choices=["spot", "future"], help="Filter by type")
    p.add_argument("--us", action="store_true", help="Use ftx.us")
    return p.parse_args()


async def main() -> None:
    args = parse_args()
    async with RESTClient(region=Region.US if args.us else Region.COM) as rest:
        markets = await rest.get_markets()
    for m in markets:
        if args.type and m.type != args.type:
            continue
        print(f"{m.name:20} bid={m.bid} ask={m.ask} vol24h=${m.volume_usd_24h}")


if __name__ == "__main__":
    asyncio.run(main())
