from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from warlock.engine.deck import Deck, DeckParseError, parse_deck
from warlock.engine.match import GameConfig
from warlock.engine.types import Participant


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def _load_schema(path: Path) -> object:
    return _load_json(path)


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


@dataclass(frozen=True)
class RulesContent:
    config: GameConfig
    deck_paths: dict[Participant, str]


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_rules(self) -> RulesContent:
        path = self._data_dir / "rules.json"
        schema = _load_schema(self._schema_dir / "rules.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("rules.json must be an object")

        defaults = GameConfig()
        config = GameConfig(
            hand_size=int(raw.get("hand_size", defaults.hand_size)),
            turn_interlude=float(raw.get("turn_interlude", defaults.turn_interlude)),
            sleeve_capacity=int(raw.get("sleeve_capacity", defaults.sleeve_capacity)),
            initiative=str(raw.get("initiative", defaults.initiative)),
            first_initiative=Participant(raw.get("first_initiative", defaults.first_initiative.value)),
        )

        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, dict):
            raise ContentError("rules.json.decks must be an object")
        deck_paths = {who: _require_str(raw_decks, who.value) for who in Participant}
        return RulesContent(config=config, deck_paths=deck_paths)

    def load_config(self) -> GameConfig:
        return self.load_rules().config

    def load_deck(self, relative_path: str) -> Deck:
        path = self._data_dir / relative_path
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ContentError(f"Missing deck file: {path}") from e
        try:
            return parse_deck(text)
        except DeckParseError as e:
            raise ContentError(f"Invalid deck {path}: {e}") from e

    def load_decks(self) -> dict[Participant, Deck]:
        rules = self.load_rules()
        return {who: self.load_deck(p) for who, p in rules.deck_paths.items()}

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_rules()
        _ = self.load_decks()
