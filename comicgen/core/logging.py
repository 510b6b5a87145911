import logging
import sys


class ContextFormatter(logging.Formatter):
    """Formatter that tolerates records without job_id and step fields."""
    def format(self, record):
        if not hasattr(record, 'job_id'):
            record.job_id = '-'
        if not hasattr(record, 'step'):
            record.step = '-'
        return super().format(record)


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [job_id=%(job_id)s step=%(step)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
