# python
import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class Logger:
    """
    File logger used by every harness component.
    Writes to <project_root>/<dir_name>/<filename>, never propagates to the root logger.
    """
    def __init__(self, name="mobile_e2e", level=logging.INFO, filename="harness.log", dir_name="logs"):
        project_root = Path(__file__).resolve().parent.parent
        logs_dir = project_root / dir_name
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_path = logs_dir / filename
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        # several components share one logger name; attach the file handler once
        if not any(getattr(h, "baseFilename", None) == str(log_path) for h in self.logger.handlers):
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter(LOG_FORMAT))
            self.logger.addHandler(fh)
        self.logger.propagate = False
        self.log_path = log_path

    def info(self, msg):
        self.logger.info(msg)

    def warning(self, msg):
        self.logger.warning(msg)

    def error(self, msg):
        self.logger.error(msg)

    def debug(self, msg, exc_info=False):
        self.logger.debug(msg, exc_info=exc_info)

    def exception(self, msg):
        self.logger.exception(msg)
