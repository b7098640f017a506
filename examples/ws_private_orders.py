#!/usr/bin/env python3
"""Stream account order updates. Reads FTX_KEY, FTX_SECRET and optional FTX_SUBACCOUNT."""

from __future__ import annotations

import asyncio
import os

from ftxclient import Client


async def main() -> None:
    async with Client(
        os.environ["FTX_KEY"],
        os.environ["FTX_SECRET"],
        subaccount=os.environ.get("FTX_SUBACCOUNT"),
    ) as client:
        await client.sync_server_time()
        async with await client.stream.subscribe_to_orders() as sub:
            async for event in sub:
                o = event.order
                print(f"{o.id} {o.market} {o.side.value} {o.status.value} {o.filled_size}/{o.size}")


if __name__ == "__main__":
    asyncio.run(main())
