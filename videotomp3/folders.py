import os

from .config import STORAGE_OUTPUT_DIR
from .exceptions import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

STORAGE_KEY = STORAGE_OUTPUT_DIR


class OutputDirectoryManager:
    """
    Keep the destination folder and its persisted copy in sync with disk.

    The stored path is checked against the filesystem on load, on every
    change and on every read; a folder that disappeared is cleared from
    both the live value and storage. Each clear bumps ``reset_key`` so the
    folder picker can drop its visible selection.
    """

    def __init__(self, storage, exists=os.path.isdir):
        self.storage = storage
        self.exists = exists
        self.reset_key = 0
        self._directory = ""

    @property
    def directory(self):
        if self._directory and not self.exists(self._directory):
            logger.warning(f"Output folder disappeared: {self._directory}")
            self.set_directory("")
        return self._directory

    def _persist(self, value):
        try:
            if value:
                self.storage.set_item(STORAGE_KEY, value)
            else:
                self.storage.remove_item(STORAGE_KEY)
        except ConfigurationError as e:
            # The live value stays usable for this session
            logger.error(f"Failed to persist output folder: {e}")

    def _reset_picker(self):
        self.reset_key += 1
        logger.debug(f"Folder picker reset (key {self.reset_key})")

    def load(self):
        """Restore the saved folder if it still exists, forget it otherwise."""
        saved = self.storage.get_item(STORAGE_KEY)
        if saved and not isinstance(saved, str):
            logger.warning(f"Ignoring saved output folder of type {type(saved).__name__}")
            self._persist("")
            return self._directory
        if saved and self.exists(saved):
            self._directory = saved
            logger.info(f"Restored output folder: {saved}")
        elif saved:
            logger.info(f"Saved output folder no longer exists: {saved}")
            self._persist("")
        return self._directory

    def set_directory(self, value):
        """
        Apply a folder chosen by the user.

        Returns:
            The live folder after validation ("" if it was rejected)
        """
        value = value or ""
        if not value:
            self._directory = ""
            self._persist("")
            self._reset_picker()
        elif self.exists(value):
            self._directory = os.path.abspath(value)
            self._persist(self._directory)
            logger.info(f"Output folder set: {self._directory}")
        else:
            logger.warning(f"Selected folder does not exist: {value}")
            self._directory = ""
            self._persist("")
            self._reset_picker()
        return self._directory
