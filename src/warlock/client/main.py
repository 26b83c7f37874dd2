from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from warlock.engine.match import new_game
from warlock.engine.types import Participant
from warlock.paths import get_paths
from warlock.services.content import ContentError, ContentService
from warlock.services.telemetry import TelemetryService

from .app import App, GameContext


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="warlock")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--auto", action="store_true", help="let the computer play both sides")
    parser.add_argument("--interlude", type=float, default=None, help="seconds to pause after each card")
    parser.add_argument("--telemetry", type=Path, default=None, help="JSONL file to append game events to")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    telemetry = TelemetryService(args.telemetry)
    try:
        content.validate_all()
        config = content.load_config()
        decks = content.load_decks()
    except ContentError as e:
        telemetry.log("boot", {"ok": False, "error": str(e)})
        print(e, file=sys.stderr)
        return 1
    telemetry.log("boot", {"ok": True})

    if args.interlude is not None:
        config = replace(config, turn_interlude=args.interlude)
    session = new_game(decks[Participant.PLAYER], decks[Participant.OPPO], seed=args.seed, config=config)

    ctx = GameContext(
        session=session,
        telemetry=telemetry,
        out=sys.stdout,
        read_line=input,
        auto=args.auto,
    )
    app = App(ctx)
    try:
        return app.run()
    except (EOFError, KeyboardInterrupt):
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
