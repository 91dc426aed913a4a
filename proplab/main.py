"""Main CLI interface for the prop lab statistics engine."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Dict, List, Optional

from .analytics.derived import derive_records, to_frame
from .analytics.filters import FilterCriteria, apply_period, filter_records
from .analytics.insights import (
    calculate_insights,
    goal_share_season_average,
    shooting_pct_season_average,
    shot_quality_insights,
    shot_volume_insights,
    time_on_ice_insights,
)
from .analytics.rolling import build_rolling_series, goal_share_series, shooting_pct_series
from .config import EngineConfig
from .data.loader import DataLoader, PayloadError
from .odds.conversions import american_to_decimal, expected_value, implied_win_probability, kelly_stake
from .odds.markets import bookmaker_display_name, find_line, group_market_lines, prop_field
from .odds.value import value_comparison

TABLE_COLUMNS = [
    "game_date",
    "opponent_code",
    "venue",
    "goals",
    "assists",
    "points",
    "shots_on_goal",
    "corsi",
    "toi_seconds",
]


def _parse_bounds(pairs: Optional[List[str]]) -> Dict[str, str]:
    bounds: Dict[str, str] = {}
    for pair in pairs or []:
        name, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"expected STAT=VALUE, got {pair!r}")
        bounds[name.strip()] = value.strip()
    return bounds


def build_criteria(args) -> FilterCriteria:
    """Translate filter flags into FilterCriteria."""
    return FilterCriteria(
        opponent=args.opponent,
        venue=args.venue,
        date_from=args.date_from,
        date_to=args.date_to,
        rest_days=args.rest_days,
        time_bucket=args.time_bucket,
        day_of_week=args.day_of_week,
        season_id=args.season,
        stat_min=_parse_bounds(args.min),
        stat_max=_parse_bounds(args.max),
        toi_min_minutes=args.toi_min,
        toi_max_minutes=args.toi_max,
        search=args.search,
    )


def _load_window(args, config: EngineConfig):
    records = DataLoader.load_gamelogs(args.input, tz=config.timezone, strict=config.strict_schema)
    criteria = build_criteria(args)
    filtered = filter_records(records, criteria)
    window = apply_period(filtered, args.period, opponent=args.opponent)
    season = apply_period(records, None)
    return derive_records(window), derive_records(season), criteria


def show_gamelog(args, config: EngineConfig):
    """Print or export the filtered game log."""
    try:
        window, season, criteria = _load_window(args, config)
    except (PayloadError, argparse.ArgumentTypeError) as e:
        print(f"Error loading data: {e}")
        return 1

    print(f"{len(window)} of {len(season)} games match ({criteria.active_count()} active filters)")
    frame = to_frame(window)
    if args.csv:
        frame.to_csv(args.csv, index=False)
        print(f"Wrote {len(frame)} rows to {args.csv}")
    elif len(frame):
        print(frame[TABLE_COLUMNS].iloc[::-1].to_string(index=False))
    return 0


def run_insights(args, config: EngineConfig):
    """Hit rate, averages and chart overlays for one prop."""
    try:
        window, season, criteria = _load_window(args, config)
        quotes = DataLoader.load_market_quotes(args.odds) if args.odds else []
    except (PayloadError, argparse.ArgumentTypeError) as e:
        print(f"Error loading data: {e}")
        return 1

    field = prop_field(args.prop)
    if field is None:
        print(f"Error: unknown prop {args.prop!r}")
        return 1
    try:
        insight = calculate_insights(
            window, field, args.line, args.side, season=season, recent_games=config.recent_games
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    rolling = build_rolling_series(window, field, config.rolling_window, config.moving_window)
    lines = group_market_lines(quotes, args.prop, args.side, config.preferred_books)
    comparison = value_comparison(insight.hit_rate, find_line(lines, args.line))

    print(f"{args.prop} {insight.side} {args.line}: {insight.hits}/{insight.total} "
          f"({insight.hit_rate:.1f}%), L{config.recent_games} {insight.recent_hits}/{insight.recent_total}")
    print(f"  avg {insight.average:.2f} vs season {insight.season_average:.2f} ({insight.difference:+.2f})")
    print(f"  streak {insight.current_streak} (longest {insight.longest_streak})")
    if comparison.best_price is not None:
        print(f"  best {comparison.best_price:+d} @ {bookmaker_display_name(comparison.bookmaker)}: "
              f"implied {comparison.implied_win_pct:.1f}%, edge {comparison.edge:+.1f}")

    if args.output:
        report = {
            "filters_active": criteria.active_count(),
            "insight": insight.to_dict(),
            "shot_quality": asdict(shot_quality_insights(window, season)),
            "shot_volume": asdict(shot_volume_insights(window, season)),
            "time_on_ice": asdict(time_on_ice_insights(window, season)),
            "goal_share": {
                "season_average": goal_share_season_average(window, season),
                "series": goal_share_series(window, config.rolling_window, config.goal_share_min_team_goals),
            },
            "shooting_pct": {
                "season_average": shooting_pct_season_average(window, season),
                "series": shooting_pct_series(window, config.rolling_window),
            },
            "rolling": [asdict(p) for p in rolling],
            "lines": [line.to_dict() for line in lines],
            "value": comparison.to_dict(),
        }
        with open(args.output, "w") as f:
            json.dump(report, f, indent=2)
        print(f"Report saved to {args.output}")
    return 0


def show_lines(args, config: EngineConfig):
    """List offered lines and best prices for a prop."""
    try:
        quotes = DataLoader.load_market_quotes(args.odds)
    except PayloadError as e:
        print(f"Error loading data: {e}")
        return 1

    lines = group_market_lines(quotes, args.prop, args.side, config.preferred_books)
    if not lines:
        print(f"No {args.side} lines for {args.prop}")
        return 0
    for line in lines:
        books = ", ".join(f"{bookmaker_display_name(b.bookmaker)} {b.price_american:+d}" for b in line.books)
        best = f"{line.best_price:+d} @ {bookmaker_display_name(line.best_bookmaker)}" if line.best else "n/a"
        print(f"{line.line:g}: best {best} | {books}")
    return 0


def convert_odds(args, config: EngineConfig):
    """Convert one American price."""
    implied = implied_win_probability(args.price)
    if implied is None:
        print(f"Invalid American price: {args.price}")
        return 1
    print(f"American {args.price:+d}: decimal {american_to_decimal(args.price):.3f}, implied {implied:.1f}%")
    if args.win_pct is not None:
        probability = args.win_pct / 100.0
        ev = expected_value(probability, args.price, args.stake)
        kelly = kelly_stake(probability, args.price, args.bankroll)
        print(f"  EV {ev['expected_value']:+.2f} on {args.stake:g} ({ev['roi']:+.1f}% ROI)")
        print(f"  Kelly {kelly['bet_amount']:.2f} of {args.bankroll:g} ({kelly['percentage']:.1f}%)")
    return 0


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--input", "-i", required=True, help="Game-log JSON")
    parser.add_argument("--period", default=None, help="L10/L30/L50, a season id, or vsOpponent")
    parser.add_argument("--opponent", default=None, help="Opponent team code")
    parser.add_argument("--venue", default=None, help="Home or Away")
    parser.add_argument("--date-from", default=None, help="Earliest game date (inclusive)")
    parser.add_argument("--date-to", default=None, help="Latest game date (inclusive, whole day)")
    parser.add_argument("--rest-days", default=None, help="Exact rest days, or N+ for at least N")
    parser.add_argument("--time-bucket", default=None, help="Game time bucket")
    parser.add_argument("--day-of-week", default=None, help="Day of week")
    parser.add_argument("--season", default=None, help="Season id (e.g. 20242025)")
    parser.add_argument("--min", action="append", metavar="STAT=VALUE", help="Inclusive stat minimum")
    parser.add_argument("--max", action="append", metavar="STAT=VALUE", help="Inclusive stat maximum")
    parser.add_argument("--toi-min", default=None, help="Minimum time on ice (minutes)")
    parser.add_argument("--toi-max", default=None, help="Maximum time on ice (minutes)")
    parser.add_argument("--search", default=None, help="Match opponent or headline stat text")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Player prop statistics: game-log filters, hit rates and market prices"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    gamelog_parser = subparsers.add_parser("gamelog", help="Show the filtered game log")
    _add_filter_arguments(gamelog_parser)
    gamelog_parser.add_argument("--csv", default=None, help="Write the derived game log to CSV")

    insights_parser = subparsers.add_parser("insights", help="Hit rate and averages for a prop")
    _add_filter_arguments(insights_parser)
    insights_parser.add_argument("--prop", required=True, help="Prop name (e.g. Goals, SOG, Points)")
    insights_parser.add_argument("--line", type=float, required=True, help="Line value")
    insights_parser.add_argument("--side", default="Over", help="Over or Under")
    insights_parser.add_argument("--odds", default=None, help="Optional market odds JSON")
    insights_parser.add_argument("--output", "-o", default=None, help="Write a JSON report")

    lines_parser = subparsers.add_parser("lines", help="List lines and best prices for a prop")
    lines_parser.add_argument("--odds", required=True, help="Market odds JSON")
    lines_parser.add_argument("--prop", required=True, help="Prop name")
    lines_parser.add_argument("--side", default="Over", help="Over or Under")

    odds_parser = subparsers.add_parser("odds", help="Convert an American price")
    odds_parser.add_argument("price", type=int, help="American odds, e.g. -150 or 120")
    odds_parser.add_argument("--win-pct", type=float, default=None, help="Estimated win percentage for EV and Kelly")
    odds_parser.add_argument("--stake", type=float, default=100.0, help="Stake for expected value")
    odds_parser.add_argument("--bankroll", type=float, default=1000.0, help="Bankroll for Kelly sizing")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = EngineConfig.from_env()

    if args.command == "gamelog":
        return show_gamelog(args, config)
    elif args.command == "insights":
        return run_insights(args, config)
    elif args.command == "lines":
        return show_lines(args, config)
    elif args.command == "odds":
        return convert_odds(args, config)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
