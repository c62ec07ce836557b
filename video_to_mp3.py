#!/usr/bin/env python3
"""
Download Video as MP3 - GTK GUI Application
Paste a YouTube link, pick a folder, and get a 320kbps MP3
extracted by yt-dlp
"""

import sys
from videotomp3.main import main

if __name__ == "__main__":
    sys.exit(main())
