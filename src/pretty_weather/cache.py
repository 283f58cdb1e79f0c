"""Per-instance on-disk cache of the last validated weather snapshot."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .exceptions import CacheError
from .weather.models import WeatherSnapshot


def cache_filename(instance_id: str) -> str:
    """Return the cache file name for a widget instance."""
    safe_id = "".join(ch if ch.isalnum() or ch in {"-", "_"} else "_" for ch in instance_id)
    return f"data-{safe_id}.json"


class WeatherCache:
    """Loads and saves snapshots as ``<cache_dir>/data-<instance>.json``.

    Loading never raises: a missing, unreadable or incomplete file is reported
    as ``None`` so the caller refreshes. Saving replaces the whole file through
    a rename, so concurrent readers see either the old or the new content.
    There is no locking; the last writer wins.
    """

    def __init__(self, cache_dir: Path, logger: logging.Logger) -> None:
        self.cache_dir = cache_dir
        self.logger = logger

    def path_for(self, instance_id: str) -> Path:
        return self.cache_dir / cache_filename(instance_id)

    def load(self, instance_id: str) -> WeatherSnapshot | None:
        path = self.path_for(instance_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.logger.debug("No cached weather for instance %s", instance_id)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            self.logger.warning("Unreadable weather cache %s: %s", path, exc)
            return None

        try:
            return WeatherSnapshot.from_cache_payload(json.loads(raw))
        except (ValueError, ValidationError, OverflowError, OSError) as exc:
            self.logger.warning("Discarding invalid weather cache %s: %s", path, exc)
            return None

    def save(self, instance_id: str, snapshot: WeatherSnapshot) -> Path:
        """Write the snapshot and return the cache path; raises CacheError on failure."""
        path = self.path_for(instance_id)
        tmp_name: str | None = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=self.cache_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(snapshot.to_cache_payload(), fh)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise CacheError(f"Failed writing weather cache {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
        return path
