"""
Form state and control flow, independent of GTK.

The window owns one FormController, forwards user input to it and
redraws from its properties whenever ``on_change`` fires. Work finished
on background threads comes back through ``dispatch``, which the window
points at ``GLib.idle_add``.
"""

from .config import Preferences
from .download import Downloader
from .folders import OutputDirectoryManager
from .locator import ExecutableLocator
from .logger import get_logger
from .metadata import TitleFetcher
from .notifications import Notifier, ToastStyle
from .utils import is_youtube_url, sanitize_url

logger = get_logger(__name__)

PLACEHOLDER_FETCHING = "Fetching title..."
PLACEHOLDER_EMPTY = "Paste the video link below"
FETCHING_TOAST_TITLE = "Fetching video info..."


def _call_now(func, *args):
    func(*args)


class FormController:
    def __init__(self, storage, notifier=None, locator=None, fetcher=None,
                 downloader=None, on_change=None, dispatch=_call_now):
        self.storage = storage
        self.preferences = Preferences(storage.data)
        self.notifier = notifier or Notifier()
        self.locator = locator or ExecutableLocator(self.preferences.ytdlp_path)
        self.executable = self.locator.locate()
        self.fetcher = fetcher or TitleFetcher(self.executable)
        self.downloader = downloader or Downloader(self.notifier)
        self.folders = OutputDirectoryManager(storage)
        self.on_change = on_change
        self.dispatch = dispatch

        self.url = ""
        self.title = None
        self._fetch_toast = None

        self.folders.load()

    def _changed(self):
        if self.on_change:
            self.on_change()

    @property
    def missing_executable(self):
        return not self.locator.is_available(self.executable)

    @property
    def title_text(self):
        if self.title:
            return self.title
        return PLACEHOLDER_FETCHING if is_youtube_url(self.url) else PLACEHOLDER_EMPTY

    @property
    def output_dir(self):
        return self.folders.directory

    @property
    def picker_reset_key(self):
        return self.folders.reset_key

    @property
    def can_submit(self):
        return not self.downloader.busy

    def _hide_fetch_toast(self):
        if self._fetch_toast is not None:
            self._fetch_toast.hide()
            self._fetch_toast = None

    def set_url(self, url):
        """
        Record new URL text and start a title fetch when it makes sense.

        Returns:
            The fetch thread, or None if no fetch was started
        """
        self.url = url or ""
        self.title = None
        self._hide_fetch_toast()

        if not is_youtube_url(self.url) or self.missing_executable:
            # A fetch still running for the previous URL must not land here
            self.fetcher.invalidate()
            self._changed()
            return None

        self._fetch_toast = self.notifier.show_toast(ToastStyle.ANIMATED, FETCHING_TOAST_TITLE)
        self._changed()
        logger.debug(f"Fetching title for {self.url}")
        url = self.url
        return self.fetcher.fetch_async(
            sanitize_url(url),
            lambda display: self.dispatch(self._title_fetched, url, display),
        )

    def _title_fetched(self, url, display):
        if url != self.url:
            return
        self._hide_fetch_toast()
        self.title = display
        self._changed()

    def set_output_dir(self, value):
        directory = self.folders.set_directory(value)
        self._changed()
        return directory

    def submit(self):
        """Start a download from the current form values."""
        thread = self.downloader.start(
            self.executable,
            self.url,
            self.output_dir,
            title=self.title,
            on_finished=lambda ok: self.dispatch(self._download_finished, ok),
        )
        self._changed()
        return thread

    def _download_finished(self, ok):
        logger.info(f"Download {'succeeded' if ok else 'failed'}")
        self._changed()
