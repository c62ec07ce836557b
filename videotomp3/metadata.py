import json
import subprocess
import threading

from .exceptions import MetadataError
from .logger import get_logger

logger = get_logger(__name__)

FETCH_TIMEOUT = 60

# Checked in this order; the first non-empty one names the uploader
UPLOADER_FIELDS = ("uploader", "uploader_id", "channel")


def format_title(title, uploader=None):
    """Compose the display string shown above the form."""
    if not title:
        return None
    return f"{uploader} - {title}" if uploader else title


def parse_info_json(stdout):
    """
    Extract (title, uploader) from `yt-dlp -j` output.

    Only the first line is parsed; with --no-playlist yt-dlp prints one
    JSON document per line and the first one is the video.

    Raises:
        MetadataError: If the first line is not a JSON object
    """
    lines = stdout.strip().splitlines()
    if not lines:
        raise MetadataError("yt-dlp printed no metadata")
    try:
        info = json.loads(lines[0])
    except ValueError as e:
        raise MetadataError(f"Invalid JSON from yt-dlp: {e}") from e
    if not isinstance(info, dict):
        raise MetadataError("yt-dlp metadata is not a JSON object")

    title = info.get("title") or None
    uploader = next((info[field] for field in UPLOADER_FIELDS if info.get(field)), None)
    return title, uploader


class TitleFetcher:
    """
    Fetch "uploader - title" for a URL by asking yt-dlp.

    The JSON query is tried first; when it exits non-zero, prints nothing
    or prints something unparsable, two plain-text queries (title, then
    uploader) are used instead. Every failure ends in None, never an
    exception.
    """

    def __init__(self, executable, runner=subprocess.run):
        self.executable = executable
        self.runner = runner
        self._generation = 0
        self._lock = threading.Lock()

    def _run(self, *args):
        cmd = [self.executable, *args]
        logger.debug(f"Executing command: {' '.join(cmd)}")
        return self.runner(
            cmd,
            capture_output=True,
            text=True,
            timeout=FETCH_TIMEOUT,
        )

    def _query_text(self, flag, url):
        try:
            result = self._run(flag, "--no-playlist", url)
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"yt-dlp {flag} failed: {e}")
            return None
        return (result.stdout or "").strip() or None

    def fetch_json(self, url):
        """Return (title, uploader) from the JSON query, raising MetadataError on failure."""
        try:
            result = self._run("-j", "--no-playlist", url)
        except (OSError, subprocess.SubprocessError) as e:
            raise MetadataError(f"Could not run yt-dlp: {e}") from e

        if result.returncode != 0 or not result.stdout:
            stderr = (result.stderr or "").strip()
            raise MetadataError(f"yt-dlp -j exited with code {result.returncode}: {stderr}")
        return parse_info_json(result.stdout)

    def fetch_fallback(self, url):
        title = self._query_text("--get-title", url)
        uploader = self._query_text("--get-uploader", url)
        return title, uploader

    def fetch_title(self, url):
        """
        Fetch the display title for url.

        Returns:
            "uploader - title", "title", or None if no title was obtained
        """
        try:
            title, uploader = self.fetch_json(url)
        except MetadataError as e:
            logger.info(f"Falling back to plain-text title query: {e}")
            title, uploader = self.fetch_fallback(url)

        display = format_title(title, uploader)
        if display is None:
            logger.info(f"No title available for {url}")
        return display

    def invalidate(self):
        """Make any in-flight fetch stale so its result is discarded."""
        with self._lock:
            self._generation += 1
            return self._generation

    def is_current(self, generation):
        with self._lock:
            return generation == self._generation

    def fetch_async(self, url, callback):
        """
        Fetch the title in a daemon thread and call callback(display).

        Starting a new fetch supersedes earlier ones: a superseded fetch
        still runs to completion, but its callback is never called.

        Returns:
            The started thread
        """
        generation = self.invalidate()

        def worker():
            display = self.fetch_title(url)
            if self.is_current(generation):
                callback(display)
            else:
                logger.debug(f"Discarding stale title for {url}")

        thread = threading.Thread(target=worker, daemon=True)
        thread.start()
        return thread
