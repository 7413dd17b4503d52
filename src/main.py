import logging

from textual.logging import TextualHandler

from sjobs_config import LOG_LEVEL
from sjobs_dashboard import SlurmJobsDashboard


def setup_logging(level: str = LOG_LEVEL) -> None:
    # Records go to the textual devtools console; stderr would tear the screen.
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        handlers=[TextualHandler()],
        force=True,
    )


def main() -> None:
    setup_logging()
    SlurmJobsDashboard().run()


if __name__ == "__main__":
    main()
