from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from models import (
    DEFAULT_DIFFICULTIES,
    BoardStyle,
    Difficulty,
    GameConfig,
    GenerationLimits,
    WindowConfig,
)
from utils import clamp_int, deep_get

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_difficulties(raw: Any) -> Dict[str, Difficulty]:
    """Parse difficulty presets; unknown keys add custom presets.

    Allows config like:
      "difficulties": { "hard": { "rows": 12, "cols": 12, "target_length": 120 } }
    """
    presets: Dict[str, Difficulty] = dict(DEFAULT_DIFFICULTIES)
    if not isinstance(raw, dict):
        return presets

    for name, entry in raw.items():
        key = str(name).strip().lower()
        if not key:
            continue
        base = presets.get(key, DEFAULT_DIFFICULTIES["medium"])
        default = Difficulty(key, base.rows, base.cols, base.target_length)
        try:
            presets[key] = Difficulty.from_dict(key, entry, default)
        except (TypeError, ValueError):
            logger.warning("ignoring malformed difficulty %r", key)
            continue
    return presets


def parse_generation_limits(raw: Any) -> GenerationLimits:
    try:
        return GenerationLimits.from_dict(raw)
    except (TypeError, ValueError):
        logger.warning("ignoring malformed generation settings")
        return GenerationLimits()


def _parse_seed(raw: Any) -> Optional[int]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _parse_log_level(raw: Any) -> str:
    if isinstance(raw, str) and raw.strip().upper() in LOG_LEVELS:
        return raw.strip().upper()
    return "WARNING"


def parse_window_config(cfg: Dict[str, Any]) -> WindowConfig:
    return WindowConfig(
        width=clamp_int(int(deep_get(cfg, "window.width", 760)), 320, 3840),
        height=clamp_int(int(deep_get(cfg, "window.height", 760)), 240, 2160),
        title=str(deep_get(cfg, "window.title", "Number Path")),
        fps=clamp_int(int(deep_get(cfg, "window.fps", 60)), 10, 240),
    )


def parse_game_config(cfg: Dict[str, Any]) -> GameConfig:
    """Parse the whole game config with defaults applied.

    Args:
        cfg: Raw config dict (usually from load_json_config).

    Returns:
        GameConfig ready for the session and the renderer.
    """
    difficulties = parse_difficulties(cfg.get("difficulties"))
    difficulty = str(cfg.get("difficulty", "medium")).strip().lower()
    if difficulty not in difficulties:
        logger.warning("unknown difficulty %r, using medium", difficulty)
        difficulty = "medium"

    return GameConfig(
        window=parse_window_config(cfg),
        board=BoardStyle.from_dict(cfg.get("board", {})),
        difficulties=difficulties,
        difficulty=difficulty,
        generation=parse_generation_limits(cfg.get("generation")),
        seed=_parse_seed(cfg.get("seed")),
        log_level=_parse_log_level(cfg.get("log_level")),
    )
