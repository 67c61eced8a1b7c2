"""Application entry point for Synopsis backend server."""

from synopsis.app import App
from synopsis.config import Config
from synopsis.logging import setup_logging
from synopsis.web.runner import run_server


def main() -> None:
    config = Config()  # type: ignore[call-arg]
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
