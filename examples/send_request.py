"""Connect to the inventory API directly, remember the credentials, and search."""

import argparse
import asyncio

import httpx
from redis import asyncio as aioredis

from stockgate import (
    Catalog,
    CredentialStore,
    EntityKind,
    GatewayConfig,
    GatewaySettings,
    InventoryClient,
)


async def run(args: argparse.Namespace) -> None:
    settings = GatewaySettings()
    redis = aioredis.from_url(args.redis_url or settings.redis_url)
    async with httpx.AsyncClient() as http:
        client = InventoryClient(http, store=CredentialStore.from_settings(redis, settings))

        if args.username and args.password:
            config = GatewayConfig(username=args.username, password=args.password)
            if not await client.connect(config):
                print("connection failed, settings not saved")
                return
        elif not await client.restore():
            print("no saved settings, pass --username and --password")
            return

        catalog = Catalog(client)
        kinds = [EntityKind(kind) for kind in args.kind] or None
        for result in await catalog.search(args.query, kinds):
            names = [row.get("name") for row in result.page.rows]
            print(f"{result.kind.value}: {names}")

    await redis.aclose()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser()
    parser.add_argument("query")
    parser.add_argument("--kind", action="append", default=[])
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--redis-url", help="defaults to STOCKGATE_REDIS_URL")
    return parser.parse_args()


def main() -> None:
    asyncio.run(run(parse_args()))


if __name__ == "__main__":
    main()
