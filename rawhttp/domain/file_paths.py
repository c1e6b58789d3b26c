"""Resolution of file-route names against the served directory."""

from pathlib import Path


class ForbiddenPath(Exception):
    """Raised when a requested path escapes the configured directory."""


def resolve_file_path(directory: Path, name: str, confine: bool = False) -> Path:
    """Join a file-route name with the served directory.

    Without ``confine`` the name is joined as-is, so ``..`` components are
    honoured. With ``confine`` the resolved target must stay inside the
    directory or ForbiddenPath is raised.
    """
    if not confine:
        return directory / name

    if "\x00" in name or not name:
        raise ForbiddenPath

    directory_root = directory.resolve()
    target = (directory_root / name).resolve()
    if directory_root not in target.parents:
        raise ForbiddenPath
    return target
