import json
import os
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, List, Optional

from dotenv import load_dotenv

from santa.services.errors import MalformedInputError
from santa.services.strategies import STRATEGIES

load_dotenv()


@dataclass(frozen=True)
class Settings:
    config_path: str
    strategy: str
    seed: Optional[int]
    log_level: str
    log_path: str
    database_url: Optional[str]
    bot_token: Optional[str]


@dataclass(frozen=True)
class DrawConfig:
    participants: List[Any]
    dont_pair: List[Any] = field(default_factory=list)
    dont_repeat: List[Any] = field(default_factory=list)
    budget: Optional[float] = None
    currency: Optional[str] = None


def load_settings() -> Settings:
    config_path = os.getenv("SANTA_CONFIG", "config.json")
    strategy = os.getenv("SANTA_STRATEGY", "graph_cycle")
    raw_seed = os.getenv("SANTA_SEED")
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/secret_santa.log")

    seed = None
    if raw_seed:
        try:
            seed = int(raw_seed)
        except ValueError:
            raise ValueError(f"SANTA_SEED must be an integer, got {raw_seed!r}.") from None

    if strategy not in STRATEGIES:
        choices = ", ".join(sorted(STRATEGIES))
        raise ValueError(f"SANTA_STRATEGY must be one of: {choices}; got {strategy!r}.")

    return Settings(
        config_path=config_path,
        strategy=strategy,
        seed=seed,
        log_level=log_level,
        log_path=log_path,
        database_url=os.getenv("DATABASE_URL") or None,
        bot_token=os.getenv("BOT_TOKEN") or None,
    )


def parse_draw_config(data: Any) -> DrawConfig:
    if not isinstance(data, dict):
        raise MalformedInputError("Draw configuration must be a JSON object.")

    participants = data.get("PARTICIPANTS")
    if not isinstance(participants, list):
        raise MalformedInputError("PARTICIPANTS must be a list.")

    lists = {}
    for key in ("DONT_PAIR", "DONT_REPEAT"):
        value = data.get(key)
        if value is None:
            value = []
        if not isinstance(value, list):
            raise MalformedInputError(f"{key} must be a list.")
        lists[key] = value

    budget = data.get("BUDGET")
    if budget is not None and (isinstance(budget, bool) or not isinstance(budget, Real)):
        raise MalformedInputError("BUDGET must be a number.")

    currency = data.get("CURRENCY")
    if currency is not None and not isinstance(currency, str):
        raise MalformedInputError("CURRENCY must be a string.")

    return DrawConfig(
        participants=participants,
        dont_pair=lists["DONT_PAIR"],
        dont_repeat=lists["DONT_REPEAT"],
        budget=budget,
        currency=currency,
    )


def load_draw_config(path: str) -> DrawConfig:
    try:
        with open(path, encoding="utf-8") as config_file:
            data = json.load(config_file)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"{path} is not valid UTF-8 JSON: {exc}") from exc
    return parse_draw_config(data)
