import argparse
import logging
from .tree import tree
from .address import build
from .config_loader import render
from .models import DEFAULT_TIMEOUT
from .helpers import format_duration

# Set up basic logging
logging.basicConfig(level=logging.INFO)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="amcfg",
        description="Builds and inspects alertmanager client configurations",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable verbose output"
    )
    subparsers = parser.add_subparsers()

    # Tree command
    tree_parser = subparsers.add_parser(
        "tree", help="Displays the configured alertmanager clients"
    )
    tree_parser.add_argument("file_path", help="Path to the YAML file")
    tree_parser.set_defaults(func=tree)

    # Render command
    render_parser = subparsers.add_parser(
        "render", help="Renders the configuration with all defaults applied"
    )
    render_parser.add_argument("file_path", help="Path to the YAML file")
    render_parser.set_defaults(func=render)

    # Build command
    build_parser = subparsers.add_parser(
        "build", help="Builds a client configuration from a single address"
    )
    build_parser.add_argument(
        "address", help="Address such as dns+http://alertmanager:9093/prefix"
    )
    build_parser.add_argument(
        "--timeout",
        default=format_duration(DEFAULT_TIMEOUT),
        help="Request timeout, e.g. 10s",
    )
    build_parser.set_defaults(func=build)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if hasattr(args, "func"):
        return args.func(args)
    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
