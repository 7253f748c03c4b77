from __future__ import annotations

import logging

from bizdash.application.container import build_container
from bizdash.config import get_app_paths, init_settings, load_settings
from bizdash.logging_config import setup_logging
from bizdash.ui.app import App


def main() -> None:
    paths = get_app_paths()
    setup_logging(paths.logs_dir, level=logging.INFO)

    settings = init_settings(load_settings(paths.settings_path))
    container = build_container(settings)

    app = App(container, logs_dir=str(paths.logs_dir))
    app.mainloop()


if __name__ == "__main__":
    main()
