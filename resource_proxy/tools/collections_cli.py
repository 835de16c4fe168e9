"""
Collections CLI for the Resource Proxy.

Inspects the local schema mirror without going through the HTTP API:
- list: Print collection names
- show: Print one collection config
- export: Dump every collection config as a JSON array
- check: Verify every config loads and has unique property orders

Usage:
    python -m resource_proxy.tools.collections_cli list
    python -m resource_proxy.tools.collections_cli show companies_1700000000000
    python -m resource_proxy.tools.collections_cli export --output configs.json
    python -m resource_proxy.tools.collections_cli check

Invariants:
    - Read-only: never writes to the resources directory
    - check exits non-zero when any config has problems
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from ..config import Settings
from ..errors import ProxyError
from ..schema import CollectionIndex, SchemaStore

logger = logging.getLogger(__name__)


class CollectionsCLI:
    """Read-only commands over a SchemaStore.

    Example:
        >>> cli = CollectionsCLI(SchemaStore("resources"))
        >>> cli.list()
        ['companies_1700000000000']
    """

    def __init__(self, store: SchemaStore) -> None:
        self.store = store
        self.index = CollectionIndex(store)

    def list(self) -> list[str]:
        """Names of all collections."""
        return self.index.names()

    def show(self, collection: str) -> dict[str, Any]:
        """Config of one collection with ``id`` attached."""
        return self.store.read(collection).to_dict(collection_id=collection)

    def export(self) -> str:
        """All configs as a JSON array, deterministic key order."""
        configs = [self.show(name) for name in self.index.names()]
        return json.dumps(configs, indent=2, sort_keys=True)

    def check(self) -> list[str]:
        """Problems found across all configs; empty when everything is valid."""
        problems = []
        for name in self.index.names():
            try:
                schema = self.store.read(name)
            except ProxyError as e:
                problems.append(f"{name}: {e.message}")
                continue

            seen: dict[int, str] = {}
            for prop in schema.properties.values():
                if prop.order in seen:
                    problems.append(
                        f"{name}: properties '{seen[prop.order]}' and '{prop.name}' "
                        f"share order {prop.order}"
                    )
                else:
                    seen[prop.order] = prop.name
        return problems


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = argparse.ArgumentParser(
        description="Inspect the Resource Proxy schema mirror",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--resources",
        help="Resources directory (default: PROXY_RESOURCES_DIRECTORY or ./resources)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="Print collection names")
    show_parser = subparsers.add_parser("show", help="Print one collection config")
    show_parser.add_argument("collection", help="Collection name")
    export_parser = subparsers.add_parser("export", help="Dump all configs as JSON")
    export_parser.add_argument("--output", "-o", help="Write to file instead of stdout")
    subparsers.add_parser("check", help="Verify all configs")

    args = parser.parse_args(argv)

    root = args.resources or Settings().resources_directory
    cli = CollectionsCLI(SchemaStore(root))

    try:
        if args.command == "list":
            for name in cli.list():
                print(name)

        elif args.command == "show":
            print(json.dumps(cli.show(args.collection), indent=2))

        elif args.command == "export":
            output = cli.export()
            if args.output:
                with open(args.output, "w") as f:
                    f.write(output)
                print(f"Configs exported to {args.output}", file=sys.stderr)
            else:
                print(output)

        elif args.command == "check":
            problems = cli.check()
            if problems:
                print(f"Found {len(problems)} problem(s):")
                for problem in problems:
                    print(f"  - {problem}")
                return 1
            print("All collection configs are valid")

    except ProxyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
