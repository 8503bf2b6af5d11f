from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dotenv import load_dotenv
from pydantic import ValidationError

from common.fee_rules.config import FeeRulesConfig
from common.fee_rules.errors import RuleSetLoadError

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "FEE_RULES_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path("config") / "fee_rules.json"


class RuleConfigStore(Protocol):
    def load(self) -> FeeRulesConfig:
        """Return the current rule parameters; called once at the start of every batch."""
        ...

    def save(self, config: FeeRulesConfig) -> None:
        ...


@dataclass
class InMemoryRuleConfigStore:
    config: FeeRulesConfig

    def load(self) -> FeeRulesConfig:
        return self.config.model_copy(deep=True)

    def save(self, config: FeeRulesConfig) -> None:
        self.config = config.model_copy(deep=True)


class JsonFileRuleConfigStore:
    """
    Rule parameters kept in a JSON document shaped like:

      {
        "rules": {
          "FEE-DEFAULT-SHARE": {"percentage": 0.6, "cap_amount": 120},
          "FEE-SEASONAL-PERIOD-PASS-THROUGH": {"start_date": "2024-06-15", "end_date": "2024-08-15"}
        },
        "reconciliation": {"similarity_threshold": 0.75}
      }

    The file is re-read on every `load()`, so edits apply to the next batch without a
    restart. A missing file means built-in defaults; an unreadable or invalid file
    raises `RuleSetLoadError`.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path else default_config_path()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> FeeRulesConfig:
        if not self._path.exists():
            logger.info("No rule config at %s; using rule defaults", self._path)
            return FeeRulesConfig()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise RuleSetLoadError(f"Could not read rule config {self._path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise RuleSetLoadError(f"Rule config {self._path} must be a JSON object.")
        try:
            return FeeRulesConfig.model_validate(raw)
        except ValidationError as exc:
            raise RuleSetLoadError(f"Invalid rule config {self._path}: {exc}") from exc

    def save(self, config: FeeRulesConfig) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self._path)


def default_config_path() -> Path:
    override = os.getenv(CONFIG_PATH_ENV, "").strip()
    return Path(override) if override else DEFAULT_CONFIG_PATH
