"""
Command line entry point: stream one page of OKX tickers as JSON lines.

Usage:
    python -m market_price --market spot --page 1
    python -m market_price --market swap --page 2 --filter usdt --limit 20
    python -m market_price --market spot --page 1 --config config/config.json --quiet
"""

import argparse
import asyncio
import sys
from typing import Any, List, Optional

from pydantic import ValidationError

from .core.exceptions import MarketPriceError
from .core.logger import get_logger
from .domain.models.market_data import MarketType, TickerData
from .infrastructure.config.config_loader import get_settings_from_working_directory, load_app_settings_from_json
from .infrastructure.factories.market_price_factory import MarketPriceServiceFactory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="market_price",
        description="Stream live OKX tickers for one page of a market's instruments"
    )
    parser.add_argument("--market", default=MarketType.SPOT.value,
                        type=lambda v: MarketType.parse(v).value,
                        help="Market type: spot, margin, swap, futures or option")
    parser.add_argument("--page", type=int, default=1, help="1-based instrument page")
    parser.add_argument("--filter", dest="second_side_currency", default=None,
                        help="Only instruments containing this currency (case-insensitive)")
    parser.add_argument("--page-size", type=int, default=None, help="Instruments per page")
    parser.add_argument("--limit", type=int, default=None, help="Stop after this many tickers")
    parser.add_argument("--config", default=None, help="JSON config file")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def format_ticker(ticker: Any) -> str:
    if isinstance(ticker, dict):
        try:
            return TickerData.model_validate(ticker).model_dump_json(exclude_none=True)
        except ValidationError:
            pass
    return str(ticker)


async def run(args: argparse.Namespace) -> int:
    settings = load_app_settings_from_json(args.config) if args.config else get_settings_from_working_directory()
    logger = get_logger("market_price.cli")

    factory = MarketPriceServiceFactory(settings, logger)
    service = factory.create(page_size=args.page_size, verbose=False if args.quiet else None)

    received = 0
    async with service:
        stream = service.stream(args.page, args.market, args.second_side_currency)
        try:
            async for ticker in stream:
                print(format_ticker(ticker), flush=True)
                received += 1
                if args.limit is not None and received >= args.limit:
                    break
        finally:
            await stream.aclose()

    logger.info("cli.finished", {"tickers_received": received})
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 130
    except MarketPriceError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
