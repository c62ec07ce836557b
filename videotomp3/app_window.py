import gi
gi.require_version('Gtk', '3.0')
gi.require_version('Gdk', '3.0')
gi.require_version('Pango', '1.0')
from gi.repository import Gtk, Gdk, GLib, Gio, Pango

from .config import PREF_NOTIFICATIONS, STORAGE_WINDOW_HEIGHT, STORAGE_WINDOW_WIDTH
from .controller import FormController
from .exceptions import ConfigurationError
from .logger import get_logger
from .notifications import Notifier, Toast, ToastStyle, STYLE_ICONS, send_notify_send

logger = get_logger(__name__)

AUDIO_QUALITY_TEXT = "320 kbps (Highest quality)"


class GtkToast(Toast):
    """Toast drawn in the window's status area; safe to update from any thread."""

    def __init__(self, window, style, title, message=""):
        super().__init__(style, title, message)
        self.window = window

    def _render(self):
        super()._render()
        GLib.idle_add(self.window.render_toast, self, self.visible,
                      self.style, self.title, self.message)


class WindowNotifier(Notifier):
    def __init__(self, window):
        self.window = window

    def show_toast(self, style, title, message=""):
        return GtkToast(self.window, style, title, message).show()

    def show_hud(self, message):
        logger.info(f"HUD: {message}")
        GLib.idle_add(self.window.show_error_dialog, message)

    def notify(self, title, message, style=ToastStyle.SUCCESS):
        GLib.idle_add(self.window.send_notification, title, message, STYLE_ICONS[style])


class DownloadVideoAsMp3Window(Gtk.Window):
    def __init__(self, storage):
        super().__init__(title="Download Video as MP3")
        self.set_border_width(10)

        self.storage = storage
        self.notifications_enabled = storage.get_item(PREF_NOTIFICATIONS, True)
        self._current_toast = None

        self.set_default_size(storage.get_item(STORAGE_WINDOW_WIDTH, 560),
                              storage.get_item(STORAGE_WINDOW_HEIGHT, 260))
        self.set_position(Gtk.WindowPosition.CENTER)
        self.connect("delete-event", self.on_delete_event)

        self.controller = FormController(
            storage,
            notifier=WindowNotifier(self),
            on_change=self.refresh,
            dispatch=GLib.idle_add,
        )
        self._picker_key = self.controller.picker_reset_key

        self.setup_headerbar()
        self.setup_ui()
        self.refresh()

    def setup_headerbar(self):
        """Set up the top bar with a menu"""
        headerbar = Gtk.HeaderBar()
        headerbar.set_show_close_button(True)
        headerbar.props.title = "Download Video as MP3"
        self.set_titlebar(headerbar)

        menu_button = Gtk.MenuButton()
        menu_icon = Gio.ThemedIcon(name="open-menu-symbolic")
        menu_button.add(Gtk.Image.new_from_gicon(menu_icon, Gtk.IconSize.BUTTON))
        menu_button.set_tooltip_text("Menu")

        menu = Gio.Menu()
        preferences_menu = Gio.Menu()
        preferences_menu.append("Enable notifications", "app.toggle-notifications")
        menu.append_section("Preferences", preferences_menu)

        popover = Gtk.Popover.new_from_model(menu_button, menu)
        menu_button.set_popover(popover)
        headerbar.pack_end(menu_button)

    def _row(self, grid, row, label_text, widget):
        label = Gtk.Label(label=label_text)
        label.set_xalign(1)
        grid.attach(label, 0, row, 1, 1)
        grid.attach(widget, 1, row, 1, 1)

    def setup_ui(self):
        vbox = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=10)
        self.add(vbox)

        grid = Gtk.Grid(column_spacing=10, row_spacing=8)
        vbox.pack_start(grid, False, False, 0)

        self.title_label = Gtk.Label()
        self.title_label.set_xalign(0)
        self.title_label.set_line_wrap(True)
        self.title_label.set_selectable(True)
        self._row(grid, 0, "Title", self.title_label)

        # URL input with paste and clear buttons
        url_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=5)
        self.url_entry = Gtk.Entry()
        self.url_entry.set_hexpand(True)
        self.url_entry.set_placeholder_text("https://www.youtube.com/watch?v=...")
        self.url_entry.connect("changed", self.on_url_changed)
        self.url_entry.connect("activate", self.on_download_clicked)

        self.paste_url_button = Gtk.Button()
        self.paste_url_button.add(Gtk.Image.new_from_gicon(
            Gio.ThemedIcon(name="edit-paste-symbolic"), Gtk.IconSize.BUTTON))
        self.paste_url_button.set_tooltip_text("Paste URL from clipboard")
        self.paste_url_button.connect("clicked", self.on_paste_url_clicked)

        self.clear_url_button = Gtk.Button()
        self.clear_url_button.add(Gtk.Image.new_from_gicon(
            Gio.ThemedIcon(name="edit-clear-symbolic"), Gtk.IconSize.BUTTON))
        self.clear_url_button.set_tooltip_text("Clear URL")
        self.clear_url_button.connect("clicked", self.on_clear_url_clicked)

        url_box.pack_start(self.url_entry, True, True, 0)
        url_box.pack_start(self.paste_url_button, False, False, 0)
        url_box.pack_start(self.clear_url_button, False, False, 0)
        self._row(grid, 1, "Video Link", url_box)

        quality_label = Gtk.Label(label=AUDIO_QUALITY_TEXT)
        quality_label.set_xalign(0)
        self._row(grid, 2, "Audio Quality", quality_label)

        self.folder_button = Gtk.FileChooserButton(
            title="Select destination folder",
            action=Gtk.FileChooserAction.SELECT_FOLDER,
        )
        self.folder_button.set_hexpand(True)
        if self.controller.output_dir:
            self.folder_button.set_filename(self.controller.output_dir)
        self.folder_button.connect("file-set", self.on_folder_selected)
        self._row(grid, 3, "Destination Folder", self.folder_button)

        hint = Gtk.Label()
        hint.set_markup("<small>The selected folder is saved automatically.</small>")
        hint.set_xalign(0)
        grid.attach(hint, 1, 4, 1, 1)

        self.download_button = Gtk.Button(label="⬇ Download MP3")
        self.download_button.connect("clicked", self.on_download_clicked)
        self.download_button.get_style_context().add_class("suggested-action")
        vbox.pack_start(self.download_button, False, False, 5)

        # Toast area: spinner or status icon, title and message
        self.toast_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        self.toast_spinner = Gtk.Spinner()
        self.toast_icon = Gtk.Image()
        self.toast_title = Gtk.Label()
        self.toast_title.set_xalign(0)
        self.toast_title.set_ellipsize(Pango.EllipsizeMode.END)
        self.toast_message = Gtk.Label()
        self.toast_box.pack_start(self.toast_spinner, False, False, 0)
        self.toast_box.pack_start(self.toast_icon, False, False, 0)
        self.toast_box.pack_start(self.toast_title, True, True, 0)
        self.toast_box.pack_end(self.toast_message, False, False, 0)
        self.toast_title.show()
        self.toast_message.show()
        self.toast_box.set_no_show_all(True)
        vbox.pack_start(self.toast_box, False, False, 0)

        self.progress_bar = Gtk.ProgressBar()
        self.progress_bar.set_no_show_all(True)
        vbox.pack_start(self.progress_bar, False, False, 0)

    def refresh(self):
        """Redraw the form from the controller state."""
        self.title_label.set_text(self.controller.title_text)
        self.download_button.set_sensitive(self.controller.can_submit)

        if self.controller.picker_reset_key != self._picker_key:
            self._picker_key = self.controller.picker_reset_key
            self.folder_button.unselect_all()
            logger.debug("Folder picker selection cleared")

    def render_toast(self, toast, visible, style, title, message):
        """Draw a toast snapshot; runs on the GTK main loop."""
        if toast is not self._current_toast:
            if not visible:
                return False
            self._current_toast = toast

        if not visible:
            self._current_toast = None
            self.toast_box.hide()
            self.toast_spinner.stop()
            return False

        animated = style is ToastStyle.ANIMATED
        self.toast_spinner.set_visible(animated)
        if animated:
            self.toast_spinner.start()
        else:
            self.toast_spinner.stop()
        self.toast_icon.set_visible(not animated)
        if not animated:
            self.toast_icon.set_from_icon_name(STYLE_ICONS[style], Gtk.IconSize.BUTTON)

        self.toast_title.set_text(title or "")
        self.toast_message.set_text(message or "")
        self.toast_box.show()

        percent = message[:-1] if message and message.endswith("%") else None
        if percent is not None:
            try:
                self.progress_bar.set_fraction(min(float(percent), 100.0) / 100)
                self.progress_bar.show()
            except ValueError:
                pass
        elif style is ToastStyle.SUCCESS:
            self.progress_bar.set_fraction(1.0)
        return False

    def on_url_changed(self, entry):
        self.controller.set_url(entry.get_text().strip())

    def on_paste_url_clicked(self, button):
        """Paste URL from clipboard"""
        clipboard = Gtk.Clipboard.get(Gdk.SELECTION_CLIPBOARD)
        text = clipboard.wait_for_text()
        if text:
            self.url_entry.set_text(text.strip())
            self.url_entry.grab_focus()
            logger.debug("URL pasted from clipboard")
        else:
            logger.debug("Clipboard is empty")

    def on_clear_url_clicked(self, button):
        self.url_entry.set_text("")
        self.url_entry.grab_focus()

    def on_folder_selected(self, chooser):
        self.controller.set_output_dir(chooser.get_filename() or "")

    def on_download_clicked(self, widget):
        logger.info("Download requested")
        self.progress_bar.set_fraction(0.0)
        self.controller.submit()

    def on_delete_event(self, widget, event):
        """Save window size before closing"""
        width, height = self.get_size()
        try:
            self.storage.set_item(STORAGE_WINDOW_WIDTH, width)
            self.storage.set_item(STORAGE_WINDOW_HEIGHT, height)
            logger.info("Window configuration saved")
        except ConfigurationError as e:
            logger.error(f"Failed to save window configuration: {e}")
        return False

    def send_notification(self, title, message, icon="dialog-information"):
        """Send system notification if enabled"""
        if not self.notifications_enabled:
            logger.debug("Notifications disabled, skipping")
            return False

        app = self.get_application()
        if app:
            notification = Gio.Notification.new(title)
            notification.set_body(message)
            notification.set_icon(Gio.ThemedIcon.new(icon))
            app.send_notification(None, notification)
            logger.debug(f"Notification sent via Gio: {title}")
            return False

        send_notify_send(title, message, icon)
        return False

    def show_error_dialog(self, message):
        """Short modal message for a request that could not be started"""
        dialog = Gtk.MessageDialog(
            transient_for=self,
            modal=True,
            destroy_with_parent=True,
            message_type=Gtk.MessageType.WARNING,
            buttons=Gtk.ButtonsType.OK,
            text=message
        )
        dialog.run()
        dialog.destroy()
        return False
