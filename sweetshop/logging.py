import logging

from uvicorn.logging import DefaultFormatter


def get_logger(name: str, log_level=None):
    """`name` 로거를 uvicorn 과 같은 포맷으로 출력하도록 설정해 리턴합니다."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        if log_level is None:
            from sweetshop.config import get_config

            log_level = get_config().get_log_level()
        logger.setLevel(log_level)
        ch = logging.StreamHandler()
        ch.setFormatter(DefaultFormatter(fmt="%(levelprefix)s %(message)s"))
        logger.addHandler(ch)

    return logger
