"""Calendar credential file.

The token file is written by the OAuth bootstrap and by the calendar
connector after a refresh. Writes go through a temporary file in the same
directory followed by `os.replace`, so a reader sees either the old or the
new document, never a partial one.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger("contentflow-core.token_store")


class TokenStore:
    """Load and persist the Google OAuth token document."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[dict]:
        """Return the stored tokens, or None when the file is absent or unreadable."""
        if not self.path.exists():
            logger.warning(f"Token file not found: {self.path}")
            return None
        try:
            tokens = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Could not read token file {self.path}: {e}")
            return None
        if not isinstance(tokens, dict):
            logger.error(f"Token file {self.path} does not hold a JSON object")
            return None
        logger.info(f"Loaded calendar tokens from {self.path} (fields: {sorted(tokens)})")
        return tokens

    def save(self, tokens: dict) -> None:
        """Atomically replace the token file with `tokens`."""
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(tokens, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.info(f"Saved calendar tokens to {self.path}")

    def exists(self) -> bool:
        return self.path.exists()
