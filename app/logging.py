import logging, sys
from app.settings import Settings

PIPELINE_LOGGER = "evaluation_pipeline"


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    for noisy_logger in ("httpx", "httpcore", "qdrant_client"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    if settings.EVAL_LOG_FILE:
        pipeline_logger = logging.getLogger(PIPELINE_LOGGER)
        if not any(isinstance(h, logging.FileHandler) for h in pipeline_logger.handlers):
            fh = logging.FileHandler(settings.EVAL_LOG_FILE, mode="a", encoding="utf-8")
            fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
            pipeline_logger.addHandler(fh)
