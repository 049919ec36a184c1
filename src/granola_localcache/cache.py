"""Cache file loading and double-JSON decoding."""

import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import SourceCorruptError, SourceNotFoundError
from .types import CacheEnvelope, CacheState

logger = logging.getLogger(__name__)


class CacheReader:
    """Reads and decodes Granola's ``cache-v3.json``.

    The file is decoded in two stages: the outer ``{"cache": "<json>"}``
    envelope, then the inner JSON string into a :class:`CacheState`.
    Every failure is raised as :class:`SourceNotFoundError` or
    :class:`SourceCorruptError`; nothing is retried and no partial state
    is returned.
    """

    def __init__(self, path: str | Path):
        self._path = str(path)

    @property
    def path(self) -> str:
        return self._path

    def read(self) -> CacheState:
        try:
            raw = Path(self._path).read_bytes()
        except FileNotFoundError as e:
            raise SourceNotFoundError(self._path) from e
        except OSError as e:
            raise SourceCorruptError(self._path, "read", str(e)) from e

        try:
            envelope = CacheEnvelope.model_validate_json(raw)
        except ValidationError as e:
            raise SourceCorruptError(self._path, "envelope", str(e)) from e

        if not envelope.cache:
            raise SourceCorruptError(self._path, "empty", "empty cache field")

        try:
            state = CacheState.model_validate_json(envelope.cache)
        except ValidationError as e:
            raise SourceCorruptError(self._path, "state", str(e)) from e

        logger.debug(
            "Loaded cache %s: %d documents, %d transcripts",
            self._path,
            len(state.state.documents),
            len(state.state.transcripts),
        )
        return state
