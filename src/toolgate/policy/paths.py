"""
Lexical path resolution for the Directory Guard.

resolve_path() turns whatever an agent put in a path argument into a
normalized absolute path, using only string operations:
    - absolute input is used as-is, relative input is joined onto cwd
    - "." and ".." segments are collapsed
    - no disk access and no symlink resolution

It never raises. Garbage in is treated as a path relative to cwd.

Security Note:
    Containment must be checked on the resolved form, and with a separator
    boundary. "/home/user/project-other" is NOT inside "/home/user/project".
"""

import os
from typing import Any


def _normalize(path: str) -> str:
    normalized = os.path.normpath(path)
    # POSIX keeps a leading "//" as implementation-defined; collapse it
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def normalize_dir(directory: str) -> str:
    """
    Normalize an allowed directory.

    Relative directories are made absolute against the process cwd,
    which is the only case that consults the environment.
    """
    if not os.path.isabs(directory):
        directory = os.path.abspath(directory)
    return _normalize(directory)


def resolve_path(raw: Any, cwd: str) -> str:
    """
    Resolve a raw path argument against cwd.

    Args:
        raw: The path as supplied by the agent (any type)
        cwd: Absolute base directory

    Returns:
        Normalized absolute path

    Examples:
        resolve_path("src/index.ts", "/home/user/project")
            -> "/home/user/project/src/index.ts"
        resolve_path("/home/user/project/../../../etc/passwd", "/home/user/project")
            -> "/etc/passwd"
        resolve_path("", "/home/user/project")
            -> "/home/user/project"
    """
    if raw is None:
        text = ""
    elif isinstance(raw, bytes):
        text = raw.decode("utf-8", errors="replace")
    else:
        text = str(raw)

    if not text:
        return _normalize(cwd)

    # os.path.join discards cwd when text is absolute
    return _normalize(os.path.join(cwd, text))


def is_within(path: str, directory: str) -> bool:
    """
    Check containment with a separator boundary.

    True when path equals directory or lies beneath it.
    """
    if path == directory:
        return True
    prefix = directory if directory.endswith(os.sep) else directory + os.sep
    return path.startswith(prefix)
