from __future__ import annotations

import logging
from pathlib import Path


def main() -> None:
    """Entrypoint for running the game from the command line."""
    import sys

    cfg_path = Path(sys.argv[1]) if len(sys.argv) >= 2 else Path("config.json")
    from config_io import load_json_config
    from config_parsing import parse_game_config

    cfg = parse_game_config(load_json_config(cfg_path))
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from game import Game  # local import keeps module load side effects minimal

    Game(cfg_path, cfg).run()


if __name__ == "__main__":
    main()
