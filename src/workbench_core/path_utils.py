"""Path classification and normalization utilities for project search."""

import os
from pathlib import Path, PurePath

from .models.process import WORKSPACE_FOLDER_PLACEHOLDER

# Extensions never scanned as text. No content sniffing is done, so a renamed
# binary is still read and simply fails to decode.
BINARY_EXTENSIONS = frozenset(
    {
        # Executables and libraries
        "exe",
        "dll",
        "so",
        "dylib",
        "bin",
        "o",
        "obj",
        "a",
        "lib",
        "class",
        "pyc",
        "pyo",
        "wasm",
        # Archives
        "zip",
        "tar",
        "gz",
        "tgz",
        "bz2",
        "xz",
        "7z",
        "rar",
        "jar",
        "war",
        # Images
        "png",
        "jpg",
        "jpeg",
        "gif",
        "bmp",
        "ico",
        "webp",
        "tif",
        "tiff",
        "psd",
        # Documents and media
        "pdf",
        "mp3",
        "mp4",
        "wav",
        "ogg",
        "avi",
        "mov",
        "mkv",
        "flac",
        # Fonts
        "ttf",
        "otf",
        "woff",
        "woff2",
        "eot",
        # Databases
        "db",
        "sqlite",
        "sqlite3",
    }
)


def is_binary(path: str | os.PathLike[str]) -> bool:
    """
    Check whether a file should be treated as binary based on its extension.

    Args:
        path: File path to classify

    Returns:
        True if the lower-cased extension is in the binary denylist
    """
    suffix = PurePath(path).suffix
    if not suffix:
        return False
    return suffix[1:].lower() in BINARY_EXTENSIONS


def relativize(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    """
    Get a display path relative to the project root.

    Args:
        path: File path, usually below ``root``
        root: Project root

    Returns:
        ``path`` with ``root`` stripped when it is a leading prefix, otherwise
        ``path`` unchanged, with every separator converted to ``/``
    """
    try:
        relative = str(PurePath(path).relative_to(PurePath(root)))
    except ValueError:
        relative = str(path)
    return relative.replace("\\", "/")


def resolve_working_directory(cwd: str, project_path: str) -> str:
    """
    Substitute the workspace folder placeholder in a command working directory.

    Args:
        cwd: Configured working directory
        project_path: Project root to substitute

    Returns:
        Working directory with every placeholder replaced
    """
    return cwd.replace(WORKSPACE_FOLDER_PLACEHOLDER, project_path)


def path_contains_any(path: Path, patterns: frozenset[str] | set[str]) -> bool:
    """
    Check whether a path string contains any of the given raw substrings.

    Args:
        path: Full path of a candidate entry
        patterns: Substrings to look for (not globs or regexes)

    Returns:
        True if any pattern occurs in the path
    """
    path_str = str(path)
    return any(pattern in path_str for pattern in patterns)
