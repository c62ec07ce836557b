import os
import re
import subprocess
import sys
import threading

from .exceptions import DownloadError, ValidationError
from .locator import TOOL_NAME
from .logger import get_logger
from .notifications import ToastStyle
from .utils import sanitize_url

logger = get_logger(__name__)

AUDIO_FORMAT = "mp3"
AUDIO_QUALITY = "320k"
OUTPUT_NAME_TEMPLATE = "%(title)s.%(ext)s"

# "12%", "45.0%", "100%"
PROGRESS_PATTERN = re.compile(r'(\d{1,3}(?:\.\d)?)%')

MSG_MISSING_EXECUTABLE = f"{TOOL_NAME} not found! Set the path in preferences."
MSG_MISSING_URL = "Paste the video link!"
MSG_INVALID_FOLDER = "Select a valid folder!"
MSG_INVALID_URL = "Invalid link!"
MSG_BUSY = "A download is already in progress!"

DEFAULT_TOAST_TITLE = "Downloading MP3..."
SUCCESS_TITLE = "Download complete!"
SUCCESS_MESSAGE = "MP3 saved!"
FAILURE_TITLE = "Download failed"


def parse_progress(chunk):
    """Return the first percentage found in a chunk of yt-dlp output, e.g. "45.0%"."""
    match = PROGRESS_PATTERN.search(chunk)
    if match:
        return f"{match.group(1)}%"
    return None


def build_command(executable, url, output_dir):
    output_template = os.path.join(os.path.abspath(output_dir), OUTPUT_NAME_TEMPLATE)
    return [
        executable,
        "--no-playlist",
        "-x",
        "--audio-format", AUDIO_FORMAT,
        "--audio-quality", AUDIO_QUALITY,
        "-o", output_template,
        url,
    ]


def _creation_flags():
    # Keep a console window from flashing up on Windows
    if sys.platform == "win32":
        return getattr(subprocess, "CREATE_NO_WINDOW", 0)
    return 0


class Downloader:
    """
    Run yt-dlp for one URL at a time and report through a Notifier.

    ``start`` validates the inputs on the calling (UI) thread and hands
    the process off to a daemon thread; ``run`` is the blocking part and
    can be called directly.
    """

    def __init__(self, notifier, popen=subprocess.Popen,
                 file_exists=os.path.isfile, dir_exists=os.path.isdir):
        self.notifier = notifier
        self.popen = popen
        self.file_exists = file_exists
        self.dir_exists = dir_exists
        self._busy = False
        self._lock = threading.Lock()

    @property
    def busy(self):
        with self._lock:
            return self._busy

    def validate(self, executable, url, output_dir):
        """
        Check everything that must hold before spawning.

        Returns:
            (sanitized_url, absolute_output_dir)

        Raises:
            ValidationError: With the message to show the user
        """
        if not executable or not self.file_exists(executable):
            raise ValidationError(MSG_MISSING_EXECUTABLE)
        if not url or not url.strip():
            raise ValidationError(MSG_MISSING_URL)
        if not output_dir or not self.dir_exists(output_dir):
            raise ValidationError(MSG_INVALID_FOLDER)
        safe_url = sanitize_url(url)
        if not safe_url:
            raise ValidationError(MSG_INVALID_URL)
        if self.busy:
            raise ValidationError(MSG_BUSY)
        return safe_url, os.path.abspath(output_dir)

    def start(self, executable, url, output_dir, title=None, on_finished=None):
        """
        Validate and launch a download.

        Args:
            executable: Resolved yt-dlp path
            url: URL as typed by the user
            output_dir: Destination folder
            title: Display title for the progress toast, if known
            on_finished: Called with True/False from the worker thread

        Returns:
            The worker thread, or None if a precondition failed
        """
        try:
            safe_url, safe_output = self.validate(executable, url, output_dir)
        except ValidationError as e:
            logger.warning(f"Download not started: {e}")
            self.notifier.show_hud(str(e))
            return None

        with self._lock:
            self._busy = True

        toast = self.notifier.show_toast(ToastStyle.ANIMATED, title or DEFAULT_TOAST_TITLE, "0%")

        def worker():
            ok = False
            try:
                ok = self.run(executable, safe_url, safe_output, toast)
            finally:
                with self._lock:
                    self._busy = False
                if on_finished:
                    on_finished(ok)

        thread = threading.Thread(target=worker, daemon=True)
        thread.start()
        logger.debug("Download thread started")
        return thread

    def spawn(self, cmd):
        try:
            return self.popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                creationflags=_creation_flags(),
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Failed to start {TOOL_NAME} process: {e}")
            raise DownloadError(str(e)) from e

    def run(self, executable, url, output_dir, toast):
        """
        Spawn yt-dlp and drive the toast until the process exits.

        Returns:
            True on exit code 0, False otherwise
        """
        cmd = build_command(executable, url, output_dir)
        logger.info(f"Downloading {url} to {output_dir}")
        logger.debug(f"Executing command: {' '.join(cmd)}")

        try:
            process = self.spawn(cmd)
        except DownloadError as e:
            toast.update(style=ToastStyle.FAILURE, title=FAILURE_TITLE, message=str(e))
            self.notifier.notify(FAILURE_TITLE, str(e), ToastStyle.FAILURE)
            return False

        logger.debug(f"Download process started with PID: {process.pid}")

        try:
            for chunk in process.stdout:
                progress = parse_progress(chunk)
                if progress:
                    toast.message = progress
        except OSError as e:
            logger.error(f"Lost {TOOL_NAME} output: {e}")
            process.kill()
            process.wait()
            toast.update(style=ToastStyle.FAILURE, title=FAILURE_TITLE, message=str(e))
            self.notifier.notify(FAILURE_TITLE, str(e), ToastStyle.FAILURE)
            return False

        returncode = process.wait()
        logger.info(f"Download process completed with return code: {returncode}")

        if returncode == 0:
            toast.update(style=ToastStyle.SUCCESS, title=SUCCESS_TITLE, message=SUCCESS_MESSAGE)
            self.notifier.notify(SUCCESS_TITLE, SUCCESS_MESSAGE, ToastStyle.SUCCESS)
            return True

        logger.error(f"Download failed with return code {returncode}")
        toast.update(style=ToastStyle.FAILURE, title=FAILURE_TITLE)
        self.notifier.notify(FAILURE_TITLE, f"{TOOL_NAME} exited with code {returncode}",
                             ToastStyle.FAILURE)
        return False
