from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import uvloop
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from santa.bot import notify_draw
from santa.core.config import Settings, load_draw_config, load_settings
from santa.core.logging import setup_logging
from santa.db import get_session, init_engine
from santa.services import SantaError, SearchConfig
from santa.services.draw import DrawResult, run_draw
from santa.services.strategies import STRATEGIES


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Draw Secret Santa pairs from a JSON participant file."
    )
    parser.add_argument(
        "-c", "--config", default=settings.config_path,
        help="draw configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "-a", "--strategy", default=settings.strategy, choices=sorted(STRATEGIES),
        help="matching algorithm (default: %(default)s)",
    )
    parser.add_argument("-s", "--seed", type=int, default=settings.seed, help="random seed")
    parser.add_argument(
        "--history", action="store_true",
        help="avoid last draw's pairs and record this one in DATABASE_URL",
    )
    parser.add_argument(
        "--database-url", default=settings.database_url,
        help="SQLAlchemy URL for the draw history",
    )
    parser.add_argument(
        "--notify", action="store_true",
        help="message every giver on Telegram (needs BOT_TOKEN)",
    )
    return parser


def draw(args: argparse.Namespace) -> DrawResult:
    draw_config = load_draw_config(args.config)
    search_config = SearchConfig(seed=args.seed)

    if not args.history:
        return run_draw(draw_config, args.strategy, search_config)

    init_engine(args.database_url)
    with get_session() as session:
        return run_draw(draw_config, args.strategy, search_config, session=session)


def main(argv: Optional[Sequence[str]] = None) -> int:
    try:
        settings = load_settings()
    except ValueError as exc:
        logger.error("Invalid settings: {error}", error=str(exc))
        return 1

    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if args.notify and not settings.bot_token:
        parser.error("BOT_TOKEN is required to send notifications. Set it in the environment or .env file.")
    if args.history and not args.database_url:
        parser.error("--history needs DATABASE_URL or --database-url.")

    setup_logging(settings.log_level, settings.log_path)

    try:
        result = draw(args)
    except (SantaError, OSError, SQLAlchemyError) as exc:
        logger.error("Error in Secret Santa: {error}", error=str(exc))
        return 1

    for line in result.lines:
        print(line)

    if args.notify:
        uvloop.run(notify_draw(settings.bot_token, result))
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
