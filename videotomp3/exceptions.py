"""
Custom exception classes for Download Video as MP3.

This module defines specific exception types for better error categorization
and handling throughout the application. None of them is allowed to reach
the GTK main loop: callers turn them into a HUD message, a toast, or a
silent fallback.
"""


class VideoToMp3Error(Exception):
    """Base exception for all Download Video as MP3 errors."""
    pass


class ConfigurationError(VideoToMp3Error):
    """Exception raised for configuration loading/saving issues."""
    pass


class MetadataError(VideoToMp3Error):
    """Exception raised when yt-dlp metadata output cannot be used."""
    pass


class DownloadError(VideoToMp3Error):
    """Exception raised when the download process cannot be started."""
    pass


class ValidationError(VideoToMp3Error):
    """Exception raised for invalid URLs, paths, or other validation failures."""
    pass
