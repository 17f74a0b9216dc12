"""jsonconfig CLI — inspect a configuration file from the shell.

Usage:
    jsonconfig get server port              # value as text
    jsonconfig get server port --as int     # coerced like get_as_int
    jsonconfig show --format yaml           # whole file as YAML
    jsonconfig sections                     # one section per line
    jsonconfig -c /etc/app/config.json show

The file defaults to $JSONCONFIG_FILE, then ./config.json.
"""

import argparse
import json
import logging
import os
import sys
from typing import Optional

import yaml

from .errors import ConfigLoadError, JSONConfigError
from .store import ConfigStore, read_config
from .values import as_string

ENV_CONFIG_FILE = "JSONCONFIG_FILE"
DEFAULT_CONFIG_FILE = "config.json"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABSENT = 2

logger = logging.getLogger("jsonconfig.cli")


def resolve_config_path(explicit: Optional[str]) -> str:
    """Pick the config file: explicit flag, environment, then default."""
    if explicit:
        return explicit
    return os.environ.get(ENV_CONFIG_FILE, DEFAULT_CONFIG_FILE)


def _plain(value):
    """Make a snapshot value safe for json/yaml dumping."""
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    return as_string(value)


def cmd_get(store: ConfigStore, args: argparse.Namespace) -> int:
    if not store.has(args.section, args.key):
        print(f"{args.section}.{args.key} is not set", file=sys.stderr)
        return EXIT_ABSENT

    if args.as_type == "int":
        print(store.get_as_int(args.section, args.key))
    elif args.as_type == "float":
        print(repr(store.get_as_float(args.section, args.key)))
    else:
        print(store.get_as_string(args.section, args.key))
    return EXIT_OK


def cmd_show(store: ConfigStore, args: argparse.Namespace) -> int:
    data = _plain(store.snapshot())
    if args.format == "yaml":
        sys.stdout.write(yaml.safe_dump(data, sort_keys=True, allow_unicode=True))
    else:
        print(json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False))
    return EXIT_OK


def cmd_sections(store: ConfigStore, args: argparse.Namespace) -> int:
    for section in store.sections():
        print(section)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jsonconfig",
        description="Inspect a two-level JSON configuration file",
    )
    parser.add_argument("--config", "-c", type=str, default=None,
                        help=f"Config file (default: ${ENV_CONFIG_FILE} or {DEFAULT_CONFIG_FILE})")
    parser.add_argument("--log-level", type=str, default="warning",
                        choices=["debug", "info", "warning", "error"])
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # get
    get_parser = subparsers.add_parser("get", help="Print one value")
    get_parser.add_argument("section")
    get_parser.add_argument("key")
    get_parser.add_argument("--as", dest="as_type", default="string",
                            choices=["string", "int", "float"],
                            help="Coerce the value before printing (default: string)")

    # show
    show_parser = subparsers.add_parser("show", help="Print every section")
    show_parser.add_argument("--format", "-f", default="json",
                             choices=["json", "yaml"])

    # sections
    subparsers.add_parser("sections", help="List section names")

    return parser


COMMANDS = {
    "get": cmd_get,
    "show": cmd_show,
    "sections": cmd_sections,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return EXIT_ERROR

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    path = resolve_config_path(args.config)
    logger.debug("Using config file %s", path)
    try:
        store = read_config(path)
    except ConfigLoadError as e:
        print(f"❌ {path}: {e}", file=sys.stderr)
        return EXIT_ERROR

    try:
        return COMMANDS[args.command](store, args)
    except (JSONConfigError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
