"""
Logging configuration for precise_node.

Hosts embedding the gizmo core call setup_logging() once at startup:

    ```python
    from precise_node.logging_config import setup_logging
    setup_logging()
    ```

Without it the package only emits through whatever the host configured.
"""

import logging
import logging.config
from pathlib import Path


def setup_logging(default_level=logging.INFO, log_dir=None):
    """Configure the package logger.

    Args:
        default_level: Level of the package logger.
        log_dir: Directory for a rotating debug log. No file logging when None.

    Returns:
        The configuration passed to logging.config.dictConfig.
    """
    handlers = ['console']
    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'level': 'INFO',
                'formatter': 'standard',
                'stream': 'ext://sys.stdout',
            },
        },
        'loggers': {
            'precise_node': {
                'handlers': handlers,
                'level': default_level,
                'propagate': False
            },
        }
    }

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        config['handlers']['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': str(log_path / 'precise_node.log'),
            'maxBytes': 10485760,  # 10 MB
            'backupCount': 5,
            'encoding': 'utf8'
        }
        handlers.append('file')

    logging.config.dictConfig(config)

    logger = logging.getLogger(__name__)
    logger.debug("Logging configuration applied")
    return config
