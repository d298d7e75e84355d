"""
Path normalization shared by every storage backend.

Both backends key entries by the same normalized slash-separated path, which
is what keeps their listings identical.
"""

from typing import Tuple

from appforge.core.exceptions import InvalidPathError


ROOT = "/"

# Suffix of in-flight native write files; never valid in a stored name
TEMP_SUFFIX = ".appforge.tmp"


def normalize_path(path: str) -> str:
    """
    Collapse repeated separators, drop "." segments and strip a trailing
    separator. The empty result is the degenerate root "/".

    Raises:
        InvalidPathError: if the path contains a ".." segment
    """
    if path is None:
        raise InvalidPathError("None", "path is required")

    raw = str(path).replace("\\", "/")
    absolute = raw.startswith("/")

    segments = []
    for segment in raw.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise InvalidPathError(raw, "parent directory references are not allowed")
        segments.append(segment)

    normalized = "/".join(segments)
    if absolute:
        normalized = "/" + normalized
    return normalized or ROOT


def join_path(directory: str, *parts: str) -> str:
    """Join path parts onto a directory and normalize the result"""
    return normalize_path("/".join([directory, *parts]))


def split_path(path: str) -> Tuple[str, str]:
    """Split a normalized path into (parent, name)"""
    if path == ROOT or "/" not in path:
        return "", path
    parent, _, name = path.rpartition("/")
    return parent or ROOT, name


def parent_path(path: str) -> str:
    return split_path(path)[0]


def is_within(path: str, ancestor: str) -> bool:
    """True when path equals ancestor or lies beneath it"""
    if path == ancestor:
        return True
    prefix = ancestor if ancestor.endswith("/") else ancestor + "/"
    return path.startswith(prefix)


def relative_to(path: str, ancestor: str) -> str:
    if path == ancestor:
        return ""
    prefix = ancestor if ancestor.endswith("/") else ancestor + "/"
    return path[len(prefix):]


def validate_project_name(name: str) -> str:
    """Project names are a single path segment"""
    candidate = (name or "").strip()
    if not candidate or candidate in (".", ".."):
        raise InvalidPathError(name or "", "project name must not be empty")
    if "/" in candidate or "\\" in candidate:
        raise InvalidPathError(name, "project name must not contain path separators")
    return check_reserved_names(candidate)


def check_reserved_names(path: str) -> str:
    """
    Reject paths with a segment ending in TEMP_SUFFIX.

    The native backend hides such names from listings, so storing them would
    make the backends disagree.

    Raises:
        InvalidPathError: if any segment uses the reserved suffix
    """
    for segment in path.split("/"):
        if segment.endswith(TEMP_SUFFIX):
            raise InvalidPathError(path, f"names ending in '{TEMP_SUFFIX}' are reserved")
    return path
