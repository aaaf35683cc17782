"""
Default ignore rules for resource resolution.

These patterns use gitignore syntax. Directory patterns end with `/`.
They are layered underneath any repository ignore file, so a `!pattern`
in `.thisismyignore` or `.gitignore` can re-include something excluded here.
"""

from __future__ import annotations

# Names of repository ignore files, in priority order. Only the first one found is used.
IGNORE_FILENAMES: list[str] = [".thisismyignore", ".gitignore"]

# Dotfiles and dot-directories at any depth.
DOTFILE_IGNORES: list[str] = [
    ".*",
    "**/.*",
]

# Dependency directories and lock files.
DEPENDENCY_IGNORES: list[str] = [
    "node_modules/",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "__pycache__/",
]

# File extensions that almost never hold text worth aggregating.
DEFAULT_BINARY_EXTENSIONS: list[str] = [
    # Images
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".tif",
    ".tiff",
    ".webp",
    ".ico",
    # Audio and video
    ".mp3",
    ".wav",
    ".flac",
    ".ogg",
    ".mp4",
    ".mov",
    ".avi",
    ".mkv",
    ".webm",
    # Archives and disk images
    ".zip",
    ".rar",
    ".7z",
    ".tar",
    ".gz",
    ".tgz",
    ".xz",
    ".bz2",
    ".dmg",
    ".iso",
    ".img",
    # Executables and libraries
    ".exe",
    ".dll",
    ".so",
    ".dylib",
    ".bin",
    ".apk",
    ".ipa",
    ".pyc",
    ".class",
    # Fonts
    ".ttf",
    ".otf",
    ".woff",
    ".woff2",
    ".eot",
    # Documents
    ".pdf",
    ".doc",
    ".docx",
    ".ppt",
    ".pptx",
    ".xls",
    ".xlsx",
    # Design files
    ".psd",
    ".ai",
    ".sketch",
    ".fig",
    # Databases
    ".db",
    ".sqlite",
    ".sqlite3",
    # Backups
    ".bak",
]


def extension_patterns(extensions: list[str]) -> list[str]:
    """Turn `.ext` entries into `*.ext` ignore patterns, tolerating a missing dot."""
    patterns: list[str] = []
    for ext in extensions:
        ext = ext.strip()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        patterns.append(f"*{ext}")
    return patterns
