"""
Command line.

    python -m sellum serve --host 0.0.0.0 --port 8000
    python -m sellum init-db
    python -m sellum set-fee-rate st_3f9a0c1e2b4d 0.035
    python -m sellum set-fee-rate st_3f9a0c1e2b4d default

Per-store platform fee rates are an operator setting; the HTTP API has no
route for them.
"""

import argparse
import asyncio
from decimal import Decimal, InvalidOperation

import uvicorn

from sellum._types import StoreId
from sellum.api import create_app
from sellum.config import Settings
from sellum.domain import Store
from sellum.logging_config import get_logger, setup_logging
from sellum.storage import Repository, create_database

log = get_logger("sellum")


def fee_rate(text: str) -> Decimal | None:
    """`default` clears the override; anything else must be a rate in [0, 1]."""
    if text == "default":
        return None
    try:
        rate = Decimal(text)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal rate: {text!r}") from None
    if not Decimal(0) <= rate <= Decimal(1):
        raise argparse.ArgumentTypeError(f"rate must be within [0, 1], got {text}")
    return rate


async def _init_db(settings: Settings) -> None:
    _, engine = await create_database(settings.database_url)
    await engine.dispose()
    log.info("Database tables created")


async def set_fee_rate(settings: Settings, store_id: StoreId, rate: Decimal | None) -> Store:
    session_factory, engine = await create_database(settings.database_url)
    try:
        store = await Repository(session_factory).set_fee_rate(store_id, rate)
    finally:
        await engine.dispose()
    log.info(f"[Store: {store_id}] Platform fee rate set to {'default' if rate is None else rate}")
    return store


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="sellum", description="Sellum marketplace backend")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    commands.add_parser("init-db", help="create the database tables")

    fee = commands.add_parser("set-fee-rate", help="override a store's platform fee rate")
    fee.add_argument("store_id")
    fee.add_argument("rate", type=fee_rate, help="rate in [0, 1], or 'default'")

    args = parser.parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    match args.command:
        case "serve":
            uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)
        case "init-db":
            asyncio.run(_init_db(settings))
        case "set-fee-rate":
            asyncio.run(set_fee_rate(settings, StoreId(args.store_id), args.rate))


if __name__ == "__main__":
    main()
