"""
Logging configuration for Download Video as MP3.

Console output is kept short for interactive use, while the rotating log
file under the config directory keeps DEBUG detail, including the exact
yt-dlp command lines that were spawned.
"""

import logging
import logging.handlers
from pathlib import Path


# Log file location
LOG_DIR = Path.home() / ".config" / "download-video-as-mp3"
LOG_FILE = LOG_DIR / "app.log"


def setup_logger(name="videotomp3", level=logging.INFO):
    """
    Set up and configure the application logger.
    
    Args:
        name: Logger name (default: "videotomp3")
        level: Logging level (default: logging.INFO)
    
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    
    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger
    
    logger.setLevel(level)
    
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)
    
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        
        # 5 MB per file, 3 backups
        file_handler = logging.handlers.RotatingFileHandler(
            LOG_FILE,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # Console logging still works without the file handler
        logger.warning(f"Could not set up file logging: {e}")
    
    return logger


def get_logger(name="videotomp3"):
    """
    Get or create a logger instance.
    
    Module loggers ("videotomp3.download", ...) propagate to the
    package logger, so only the package logger gets handlers.
    """
    root_name = name.split(".", 1)[0]
    if not logging.getLogger(root_name).handlers:
        setup_logger(root_name)
    return logging.getLogger(name)
