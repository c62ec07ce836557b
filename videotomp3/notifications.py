"""
Toasts and HUD messages.

A Toast is a persistent status message with a style, a title and an
optional message line. The download code only ever mutates the toast it
was given; how a toast is drawn is left to ``Toast._render``, which the
GTK window overrides to marshal updates onto the main loop.
"""

import enum
import shutil
import subprocess

from .logger import get_logger

logger = get_logger(__name__)

APP_NAME = "Download Video as MP3"


class ToastStyle(enum.Enum):
    ANIMATED = "animated"
    SUCCESS = "success"
    FAILURE = "failure"


# Freedesktop icon per terminal style
STYLE_ICONS = {
    ToastStyle.ANIMATED: "dialog-information",
    ToastStyle.SUCCESS: "emblem-default",
    ToastStyle.FAILURE: "dialog-error",
}


class Toast:
    def __init__(self, style=ToastStyle.ANIMATED, title="", message=""):
        self._style = style
        self._title = title
        self._message = message
        self.visible = False

    @property
    def style(self):
        return self._style

    @style.setter
    def style(self, value):
        self._style = value
        self._changed()

    @property
    def title(self):
        return self._title

    @title.setter
    def title(self, value):
        self._title = value
        self._changed()

    @property
    def message(self):
        return self._message

    @message.setter
    def message(self, value):
        self._message = value
        self._changed()

    def _changed(self):
        if self.visible:
            self._render()

    def _render(self):
        logger.debug(f"Toast [{self._style.value}] {self._title}: {self._message}")

    def show(self):
        self.visible = True
        self._render()
        return self

    def hide(self):
        self.visible = False
        self._render()

    def update(self, style=None, title=None, message=None):
        """Change several fields at once with a single redraw."""
        if style is not None:
            self._style = style
        if title is not None:
            self._title = title
        if message is not None:
            self._message = message
        self._changed()


class Notifier:
    """
    Surface for user-facing messages.

    The base class only logs; the GTK window provides the real thing.
    """

    def show_toast(self, style, title, message=""):
        return Toast(style, title, message).show()

    def show_hud(self, message):
        logger.info(f"HUD: {message}")

    def notify(self, title, message, style=ToastStyle.SUCCESS):
        """Desktop notification for a finished operation."""
        send_notify_send(title, message, STYLE_ICONS[style])


def send_notify_send(title, message, icon="dialog-information"):
    """
    Send a desktop notification through notify-send.

    Returns:
        True if notify-send ran, False otherwise
    """
    if not shutil.which("notify-send"):
        logger.debug("notify-send not available")
        return False

    try:
        subprocess.run([
            "notify-send",
            "-a", APP_NAME,
            "-i", icon,
            title,
            message
        ], check=False, timeout=5,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL)
        logger.debug(f"Notification sent via notify-send: {title}")
        return True
    except subprocess.TimeoutExpired:
        logger.warning("notify-send timed out")
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"notify-send failed: {e}")
    return False
