"""
Locate the yt-dlp executable.

The lookup is an ordered chain, first hit wins:

1. the path configured in the preferences,
2. the well-known install location for the current platform,
3. a PATH lookup (``where`` on Windows, ``which`` elsewhere) run as a
   separate process.

Filesystem and process access are injectable so that each step can be
exercised on its own.
"""

import os
import subprocess
import sys

from .logger import get_logger

logger = get_logger(__name__)

TOOL_NAME = "yt-dlp"

LOOKUP_TIMEOUT = 10


def is_windows(platform=None):
    return (platform or sys.platform).startswith("win")


def known_install_path(platform=None):
    """Return the well-known yt-dlp location for a platform, or ""."""
    platform = platform or sys.platform
    if platform == "darwin":
        return "/opt/homebrew/bin/yt-dlp"
    if is_windows(platform):
        local_app_data = os.environ.get("LOCALAPPDATA")
        if not local_app_data:
            return ""
        return os.path.join(local_app_data, "Microsoft", "WinGet", "Links", "yt-dlp.exe")
    return "/usr/bin/yt-dlp"


def lookup_command(platform=None):
    return ["where" if is_windows(platform) else "which", TOOL_NAME]


def validate_executable(path, exists=os.path.isfile):
    """Normalize path and return it if it points to an existing file, else None."""
    if not path:
        return None
    resolved = os.path.abspath(os.path.expanduser(path))
    if exists(resolved):
        return resolved
    return None


class ExecutableLocator:
    """Resolve the yt-dlp executable through the priority chain."""

    def __init__(self, preferred_path="", platform=None,
                 exists=os.path.isfile, runner=subprocess.run):
        self.preferred_path = preferred_path or ""
        self.platform = platform or sys.platform
        self.exists = exists
        self.runner = runner

    def from_preferences(self):
        return validate_executable(self.preferred_path, self.exists)

    def from_known_location(self):
        return validate_executable(known_install_path(self.platform), self.exists)

    def from_path_lookup(self):
        cmd = lookup_command(self.platform)
        try:
            result = self.runner(
                cmd,
                capture_output=True,
                text=True,
                timeout=LOOKUP_TIMEOUT,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning(f"PATH lookup '{' '.join(cmd)}' failed: {e}")
            return None

        if result.returncode != 0 or not result.stdout:
            logger.debug(f"PATH lookup returned code {result.returncode}, no candidate")
            return None

        lines = result.stdout.strip().splitlines()
        if not lines:
            return None
        return validate_executable(lines[0].strip(), self.exists)

    def locate(self):
        """
        Run the chain.

        Returns:
            Absolute path of the executable, or "" if none was found
        """
        steps = (
            ("preferences", self.from_preferences),
            ("known location", self.from_known_location),
            ("PATH lookup", self.from_path_lookup),
        )
        for source, step in steps:
            path = step()
            if path:
                logger.info(f"{TOOL_NAME} found via {source}: {path}")
                return path

        logger.warning(f"{TOOL_NAME} could not be located")
        return ""

    def is_available(self, path):
        """Re-check, at call time, that a resolved path still exists."""
        return bool(path) and self.exists(path)
