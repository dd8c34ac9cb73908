"""Credential storage for persistent remote-channel authorization.

One JSON file per device, keyed by the TV's device id:

    <storage_dir>/samsung-tv-<device id>.json   {"version": 1, "token": "..."}

A record with another version is ignored so the TV prompts for access again.
"""

import errno
import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from ..models import Credential
from .constants import CREDENTIAL_FILE_PREFIX, CREDENTIAL_VERSION

_LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class CredentialStore:
    """Manages persistent storage of remote-channel tokens per device."""

    DEFAULT_STORAGE_DIR = Path.home() / ".config" / "samsung_tv"

    def __init__(self, storage_dir: Optional[Path] = None):
        """Initialize credential storage.

        Args:
            storage_dir: Directory holding credential files.
                Defaults to ~/.config/samsung_tv
        """
        self.storage_dir = Path(storage_dir) if storage_dir else self.DEFAULT_STORAGE_DIR

    def path_for(self, device_id: str) -> Path:
        """Return the credential file path for a device."""
        safe_id = _UNSAFE_CHARS.sub("_", device_id)
        return self.storage_dir / f"{CREDENTIAL_FILE_PREFIX}{safe_id}.json"

    def load(self, device_id: str) -> Optional[Credential]:
        """Load the stored credential for a device.

        Args:
            device_id: Device ID from the TV status document

        Returns:
            Credential, or None if nothing usable is stored.
        """
        path = self.path_for(device_id)
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as e:
            _LOGGER.warning("Failed to load credential from %s: %s", path, e)
            self._discard(path)
            return None

        if not isinstance(data, dict) or not isinstance(data.get("token"), str):
            _LOGGER.warning("Discarding malformed credential file %s", path)
            self._discard(path)
            return None

        if data.get("version") != CREDENTIAL_VERSION:
            _LOGGER.info(
                "Ignoring credential version %s for %s (expected %s)",
                data.get("version"), device_id, CREDENTIAL_VERSION,
            )
            return None

        _LOGGER.debug("Loaded credential for %s", device_id)
        return Credential(token=data["token"], version=data["version"])

    def save(self, device_id: str, credential: Credential) -> bool:
        """Persist a credential for a device. Last write wins.

        Returns:
            True if saved, False on I/O failure (logged, never raised).
        """
        path = self.path_for(device_id)
        data = {"version": CREDENTIAL_VERSION, "token": credential.token}
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.storage_dir), suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_path, path)
            except BaseException:
                _remove_quietly(tmp_path)
                raise
        except OSError as e:
            _LOGGER.error("Failed to save credential to %s: %s", path, e)
            return False

        _LOGGER.info("Saved credential for %s", device_id)
        return True

    def delete(self, device_id: str) -> bool:
        """Delete the stored credential for a device.

        Returns:
            True if a file was removed.
        """
        path = self.path_for(device_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            _LOGGER.error("Failed to delete credential %s: %s", path, e)
            return False
        return True

    def list_devices(self) -> List[str]:
        """List the (sanitized) device ids that have a stored credential file."""
        if not self.storage_dir.is_dir():
            return []
        prefix_len = len(CREDENTIAL_FILE_PREFIX)
        return sorted(
            p.stem[prefix_len:]
            for p in self.storage_dir.glob(f"{CREDENTIAL_FILE_PREFIX}*.json")
        )

    def _discard(self, path: Path):
        """Remove an unreadable record; failures are ignored."""
        try:
            path.unlink()
        except OSError as e:
            if e.errno != errno.ENOENT:
                _LOGGER.debug("Could not remove %s: %s", path, e)


def _remove_quietly(path: str):
    try:
        os.unlink(path)
    except OSError:
        pass
