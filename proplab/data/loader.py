"""Loads game-log and market payloads from JSON files."""

import json
import logging
from typing import List

from ..models.game import GameRecord
from ..models.market import MarketQuote
from ..odds.markets import parse_market_rows
from .normalize import normalize_game_records
from .validators import (
    GAMELOG_ROW_KEYS,
    MARKET_ROW_KEYS,
    extract_rows,
    summarize_errors,
    validate_gamelogs_payload,
    validate_market_payload,
)

logger = logging.getLogger(__name__)


class PayloadError(ValueError):
    """Raised when an input file cannot be read or holds no usable rows."""


def _read_json(file_path: str):
    try:
        with open(file_path, "r") as f:
            return json.load(f)
    except OSError as exc:
        raise PayloadError(f"cannot read {file_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PayloadError(f"{file_path} is not valid JSON: {exc}") from exc


class DataLoader:
    """Loads raw rows from JSON files and hands them to the normalizers."""

    @staticmethod
    def load_gamelogs(file_path: str, tz=None, strict: bool = False) -> List[GameRecord]:
        """
        Load and normalize player game logs.

        Args:
            file_path: JSON file holding a list of rows or ``{"gamelogs": [...]}``
            tz: league timezone for date parsing
            strict: reject unknown fields instead of dropping them

        Returns:
            List of GameRecord objects, in file order
        """
        payload = _read_json(file_path)
        rows = extract_rows(payload, GAMELOG_ROW_KEYS)
        errors = validate_gamelogs_payload(payload)
        if not rows:
            raise PayloadError(summarize_errors(errors))
        if errors:
            logger.warning("Game-log rows with problems in %s: %s", file_path, summarize_errors(errors))
        return normalize_game_records(rows, tz=tz, strict=strict)

    @staticmethod
    def load_market_quotes(file_path: str) -> List[MarketQuote]:
        """
        Load sportsbook rows and flatten them into quotes.

        Args:
            file_path: JSON file holding a list of rows or ``{"props": [...]}``

        Returns:
            List of MarketQuote objects
        """
        payload = _read_json(file_path)
        rows = extract_rows(payload, MARKET_ROW_KEYS)
        errors = validate_market_payload(payload)
        if not rows:
            raise PayloadError(summarize_errors(errors))
        if errors:
            logger.warning("Market rows with problems in %s: %s", file_path, summarize_errors(errors))
        return parse_market_rows(rows)
