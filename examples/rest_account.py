#!/usr/bin/env python3
"""Print account summary, balances and open orders. Reads FTX_KEY and FTX_SECRET."""

from __future__ import annotations

import asyncio
import os

from ftxclient import Client


async def main() -> None:
    async with Client(os.environ["FTX_KEY"], os.environ["FTX_SECRET"]) as client:
        await client.sync_server_time()
        account = await client.rest.get_account_information()
        print(f"{account.username}: collateral={account.collateral} leverage={account.leverage}")
        for b in await client.rest.get_balances():
            print(f"  {b.coin:8} free={b.free} total={b.total}")
        for o in await client.rest.get_open_orders():
            print(f"  open {o.id} {o.market} {o.side.value} {o.size} @ {o.price}")


if __name__ == "__main__":
    asyncio.run(main())
