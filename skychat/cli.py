"""CLI entry point for the forecast core."""

import argparse
import logging

from skychat.config.loader import get_config_value, load_config, set_config_value
from skychat.pipeline.forecast_pipeline import build_orchestrator
from skychat.reporting.weather_context import (
    format_forecast_json,
    format_weather_context,
)

DEFAULT_CONFIG = "config/skychat.yaml"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="skychat",
        description="Aggregated 5-day forecasts for the weather chat assistant",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )

    sub = parser.add_subparsers(dest="command")

    # forecast
    fc_p = sub.add_parser("forecast", help="Fetch an aggregated forecast")
    fc_p.add_argument("lat")
    fc_p.add_argument("lon")
    fc_p.add_argument("--lang", choices=["en", "ja"], default=None)
    fc_p.add_argument("--json", action="store_true", help="Print JSON")

    # context
    ctx_p = sub.add_parser("context", help="Print the chat WeatherContext block")
    ctx_p.add_argument("lat")
    ctx_p.add_argument("lon")
    ctx_p.add_argument("--lang", choices=["en", "ja"], default=None)

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Set a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    if args.command == "forecast":
        return _cmd_forecast(config, args)
    elif args.command == "context":
        return _cmd_context(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_forecast(config, args) -> int:
    orchestrator = build_orchestrator(config)
    result = orchestrator.get_forecast(args.lat, args.lon, language=args.lang)
    if result is None:
        print("No forecast available")
        return 1
    if args.json:
        print(format_forecast_json(result))
        return 0
    print(f"{result.location} ({result.lat}, {result.lon}) [{result.source}]")
    print(format_weather_context(result), end="")
    return 0


def _cmd_context(config, args) -> int:
    orchestrator = build_orchestrator(config)
    result = orchestrator.get_forecast(args.lat, args.lon, language=args.lang)
    # No forecast is not an error for the chat flow
    print(format_weather_context(result), end="")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1
