"""Command line entry point for operator tasks: ``petclaim-admin <operation>``."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Sequence

from petclaim.admin import AdminOperationError, list_operations, run_operation
from petclaim.core.log_config import configure_logging
from petclaim.db.session import dispose_engine

LOGGER = logging.getLogger("petclaim.admin")


def parse_params(pairs: Sequence[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a dict; pydantic coerces the values."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or not key:
            raise AdminOperationError(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def _render(result: dict[str, Any]) -> str:
    lines = []
    for key, value in result.items():
        if isinstance(value, (dict, list)):
            rendered = json.dumps(value, indent=2, default=str)
            lines.append(f"{key}:\n{rendered}" if value else f"{key}: {rendered}")
        else:
            lines.append(f"{key}: {value}")
    return "\n".join(lines)


def _print_operations() -> None:
    width = max(len(op.name) for op in list_operations())
    for op in list_operations():
        print(f"  {op.name:<{width}}  {op.summary}")


async def _run(name: str, params: dict[str, str]) -> dict[str, Any]:
    try:
        return await run_operation(name, params)
    finally:
        await dispose_engine()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="petclaim-admin", description="Run a Pet Claim Helper admin operation"
    )
    parser.add_argument("operation", help="Operation name, or 'list' to show them all")
    parser.add_argument("params", nargs="*", help="Operation input as key=value pairs")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)

    if args.operation == "list":
        _print_operations()
        return 0

    try:
        params = parse_params(args.params)
        result = asyncio.run(_run(args.operation, params))
    except AdminOperationError as exc:
        LOGGER.error("%s", exc)
        return 1
    except Exception as exc:  # pragma: no cover - environment specific
        LOGGER.exception("Operation %s failed: %s", args.operation, exc)
        return 1

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print(_render(result))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
