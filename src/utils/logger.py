import logging

from rich.logging import RichHandler

from utils.config import load_config


class CenteredFormatter(logging.Formatter):
    longest_name_length = 16  # grows with the longest logger name seen

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=16):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        name = record.name
        record.name = name.center(CenteredFormatter.longest_name_length)
        try:
            return super().format(record)
        finally:
            record.name = name


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger writing through RichHandler.

    Config.debug (BOUTIQUE_DEBUG) switches the level to DEBUG. Config.log_file
    (BOUTIQUE_LOG_FILE) adds a plain file handler, which is the only way to
    read logs while the TUI owns the terminal.
    """
    if name is None:
        name = "boutique"
    logger = logging.getLogger(name)
    config = load_config()
    log_level = logging.DEBUG if config.debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)-8s [%(name)s] %(message)s")
            )
            file_handler.setLevel(log_level)
            logger.addHandler(file_handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized.")

    return logger
