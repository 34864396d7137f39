"""Configuration constants for library scanning."""

from __future__ import annotations

import re

SIDECAR_FILENAME = "metadata.json"

# Directory names starting with any of these prefixes are hidden/system entries.
SKIPPED_PREFIXES = (".", "_")

AUDIO_SUFFIXES = {
    ".m4b",
    ".mp3",
    ".m4a",
    ".aac",
    ".ogg",
    ".flac",
}

EBOOK_SUFFIXES = {
    ".epub",
    ".pdf",
    ".mobi",
    ".azw3",
}

COVER_PATTERN = re.compile(r"^(cover|folder)\.(jpg|jpeg|png|webp)$", re.IGNORECASE)
EXACT_COVER_FILENAME = "cover.jpg"

# Highest priority first; anything else resolves to UNKNOWN_FORMAT.
FORMAT_PRIORITY = ("m4b", "mp3", "m4a", "flac")
UNKNOWN_FORMAT = "unknown"

DEFAULT_LANGUAGE = "en"
