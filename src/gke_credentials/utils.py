"""Shared utility functions for writing the generated kubeconfig."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

from gke_credentials.errors import ConfigurationError, FileWriteError

KUBECONFIG_FILE_PREFIX = "gke_kubeconfig_"


def write_secure_file(directory: str | os.PathLike[str] | None, content: str) -> Path:
    """Write ``content`` to a new, uniquely named, owner-only file in ``directory``.

    The file is created exclusively with mode 0600 since it can embed a bearer token.

    Raises:
        ConfigurationError: If no directory is configured.
        FileWriteError: If the file cannot be created or written.
    """
    if not directory:
        msg = "Missing GITHUB_WORKSPACE!"
        raise ConfigurationError(msg)

    path = Path(directory).resolve() / f"{KUBECONFIG_FILE_PREFIX}{uuid.uuid4().hex}"
    created = False
    try:
        # O_EXCL fails rather than reusing an existing file; the mode applies at creation.
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        created = True
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        # A partially written kubeconfig is removed; a file this call did not create is left alone.
        if created:
            path.unlink(missing_ok=True)
        msg = f"Failed to write kubeconfig to {path}: {e.strerror or e}"
        raise FileWriteError(msg) from e
    return path
