#!/usr/bin/env python3
"""Send a single event or profile update to Mixpanel from the command line.

Token sourcing: ``--token`` or ``MIXPANEL_TOKEN``. Connection settings and
the test/debug flags are read from ``MIXPANEL_*`` variables (see
``MixpanelConfig.from_env``) and can be overridden with flags.

Examples::

    scripts/send_event.py track "Signed Up" --prop plan=pro --distinct-id u1
    scripts/send_event.py engage --prop '$distinct_id=u1' --test
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pymixpanel import MixpanelClient, MixpanelConfig  # noqa: E402


def _parse_props(pairs: list[str]) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep:
            raise SystemExit(f"--prop expects key=value, got {pair!r}")
        try:
            props[key] = json.loads(raw)
        except json.JSONDecodeError:
            props[key] = raw
    return props


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--token", default=os.environ.get("MIXPANEL_TOKEN"), help="project token")
    parser.add_argument("--test", action="store_true", help="mark the request with test=1")
    parser.add_argument("--debug", action="store_true", help="log outgoing payloads")
    parser.add_argument("--prop", action="append", default=[], metavar="KEY=VALUE")
    sub = parser.add_subparsers(dest="command", required=True)

    track = sub.add_parser("track", help="send an event to /track")
    track.add_argument("event")
    track.add_argument("--distinct-id")
    track.add_argument("--name-tag")

    sub.add_parser("engage", help="send a profile update to /engage")
    return parser


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {}
    if args.test:
        overrides["test"] = True
    if args.debug:
        overrides["debug"] = True
    config = MixpanelConfig.from_env(**overrides)
    props = _parse_props(args.prop)

    async with MixpanelClient(args.token, config) as client:
        if args.command == "track":
            if args.distinct_id:
                client.identify(args.distinct_id)
            if args.name_tag:
                client.set_name_tag(args.name_tag)
            result = await client.track(args.event, props)
        else:
            result = await client.engage(props)

    if result.ok:
        print(f"{result.endpoint}: ok")
        return 0
    print(f"{result.endpoint}: {result.error}", file=sys.stderr)
    return 1


def main() -> int:
    args = _build_parser().parse_args()
    if not args.token:
        print("No token given (use --token or MIXPANEL_TOKEN)", file=sys.stderr)
        return 2
    logging.basicConfig(level=logging.INFO if args.debug else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
