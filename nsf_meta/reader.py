from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .config import DecoderSettings
from .decoder import decode_header
from .layout import HEADER_SIZE
from .models import HeaderIOError, SongMetadata, TruncatedHeaderError

logger = logging.getLogger(__name__)

Source = Union[str, Path, bytes, bytearray, memoryview]


def read_song(source: Source, settings: Optional[DecoderSettings] = None) -> SongMetadata:
    """Decode the NSF header of a file path or an in-memory buffer.

    Raises HeaderIOError when the file cannot be read and
    TruncatedHeaderError when the data ends before the header does.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return decode_header(source, settings)
    path = Path(source)
    data = read_header_bytes(path)
    try:
        return decode_header(data, settings)
    except TruncatedHeaderError as exc:
        raise exc.with_path(path) from exc


def read_header_bytes(path: Path) -> bytes:
    try:
        with path.open("rb") as fh:
            data = fh.read(HEADER_SIZE)
    except OSError as exc:
        raise HeaderIOError(path, exc) from exc
    logger.debug("Read %d header byte(s) from %s", len(data), path)
    return data
