import sys
import shutil

import gi
gi.require_version('Gtk', '3.0')
from gi.repository import Gtk, GLib, Gio

from .app_window import DownloadVideoAsMp3Window
from .config import LocalStorage, PREF_NOTIFICATIONS
from .exceptions import ConfigurationError
from .logger import get_logger

logger = get_logger(__name__)

# yt-dlp is located (and reported) when a download is requested; these
# are only needed for audio extraction and desktop notifications.
OPTIONAL_TOOLS = ("ffmpeg", "notify-send")


def check_dependencies():
    """
    Log a warning for each optional command-line tool that is missing.

    Returns:
        List of missing tool names
    """
    logger.info("Checking dependencies...")
    missing = [tool for tool in OPTIONAL_TOOLS if not shutil.which(tool)]
    for tool in missing:
        logger.warning(f"{tool} not found in PATH")
    if "ffmpeg" in missing:
        logger.warning("yt-dlp needs ffmpeg to convert audio to MP3; downloads will fail")
    if not missing:
        logger.info("All optional dependencies found")
    return missing


class Application(Gtk.Application):
    def __init__(self, storage=None):
        super().__init__(application_id="com.github.download-video-as-mp3")
        self.storage = storage
        self.window = None

    def do_activate(self):
        """Activate the application and create the main window."""
        if not self.window:
            if self.storage is None:
                self.storage = LocalStorage()
            logger.info("Creating application window...")
            self.window = DownloadVideoAsMp3Window(self.storage)
            self.window.set_application(self)
            self.add_window(self.window)

            toggle_notifications_action = Gio.SimpleAction.new_stateful(
                "toggle-notifications",
                None,
                GLib.Variant.new_boolean(self.window.notifications_enabled)
            )
            toggle_notifications_action.connect("activate", self.on_toggle_notifications)
            self.add_action(toggle_notifications_action)
            logger.debug("Notification toggle action registered")

        self.window.show_all()
        self.window.url_entry.grab_focus()
        logger.info("Application window shown")

    def on_toggle_notifications(self, action, parameter):
        """Handle notification toggle"""
        new_state = not action.get_state().get_boolean()
        action.set_state(GLib.Variant.new_boolean(new_state))
        self.window.notifications_enabled = new_state

        try:
            self.storage.set_item(PREF_NOTIFICATIONS, new_state)
            logger.info(f"Notifications {'enabled' if new_state else 'disabled'}")
        except ConfigurationError as e:
            logger.error(f"Failed to save notification setting: {e}")


def main():
    """Main entry point for the application."""
    logger.info("Download Video as MP3 starting...")
    check_dependencies()

    try:
        app = Application()
        return app.run(sys.argv)
    except Exception as e:
        logger.critical(f"Application crashed: {e}", exc_info=True)
        return 1
