"""
Thin wrapper around the tarsnap command line tool.

Each client is bound to one key file and one cache directory, so separate
targets never share tarsnap cache state.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from loguru import logger


class TarsnapError(RuntimeError):
    """Raised when a tarsnap invocation fails."""

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr


class TarsnapClient:
    """
    Runs tarsnap against a single key file and cache directory.

    Usage:
        client = TarsnapClient("/root/.tarsnap/web.cleanup.key", "/tmp/tarsnap/cache/web")
        client.refresh_cache()
        for name in client.list_archives():
            ...
    """

    def __init__(
        self,
        key_file: Path | str,
        cache_dir: Path | str,
        executable: str = "tarsnap",
        timeout: float | None = None,
    ):
        """
        Initialize the client.

        Args:
            key_file: Tarsnap key file (a delete-capable key)
            cache_dir: Cache directory dedicated to this key
            executable: tarsnap binary name or path
            timeout: Optional per-command timeout in seconds
        """
        self.key_file = Path(key_file)
        self.cache_dir = Path(cache_dir)
        self.executable = executable
        self.timeout = timeout

    def _command(self, *args: str) -> list[str]:
        return [
            self.executable,
            "--cachedir",
            str(self.cache_dir),
            "--keyfile",
            str(self.key_file),
            *args,
        ]

    def run(self, *args: str) -> str:
        """
        Run tarsnap with the client's key and cache options.

        Args:
            *args: Additional tarsnap arguments

        Returns:
            Captured stdout

        Raises:
            TarsnapError: If tarsnap is missing, times out or exits non-zero
        """
        command = self._command(*args)
        logger.debug(f"Running: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TarsnapError(
                f"tarsnap executable not found: {self.executable}", command=command
            ) from e
        except subprocess.TimeoutExpired as e:
            raise TarsnapError(
                f"tarsnap timed out after {self.timeout}s: {' '.join(args)}", command=command
            ) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise TarsnapError(
                f"tarsnap {' '.join(args)} failed with exit code {result.returncode}: {stderr}",
                command=command,
                returncode=result.returncode,
                stderr=stderr,
            )

        return result.stdout or ""

    def refresh_cache(self) -> None:
        """Bring the local cache up to date with the server (tarsnap --fsck)."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.run("--fsck")

    def list_archives(self) -> list[str]:
        """List archive names known for this key."""
        output = self.run("--list-archives")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def delete_archive(self, name: str) -> None:
        """Delete a single archive."""
        self.run("-d", "-f", name)
