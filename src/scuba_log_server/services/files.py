"""File access for imports and exports.

OS-level failures become ``FileAccessError`` so they are reported separately
from problems with a file's contents.
"""

from pathlib import Path

import structlog

from scuba_log_server.interchange.errors import FileAccessError, TextEncodingError

logger = structlog.get_logger()


def read_import_file(path: Path, max_bytes: int | None = None) -> bytes:
    """Read a picked file.

    Raises:
        FileAccessError: File is missing, unreadable or larger than max_bytes
    """
    try:
        with path.open("rb") as handle:
            data = handle.read() if max_bytes is None else handle.read(max_bytes + 1)
    except OSError as exc:
        raise FileAccessError(str(path), exc.strerror or str(exc)) from exc

    if max_bytes is not None and len(data) > max_bytes:
        raise FileAccessError(str(path), f"file is larger than {max_bytes} bytes")
    logger.debug("Read import file", path=str(path), size=len(data))
    return data


def decode_text(data: bytes) -> str:
    """Decode UTF-8 text, dropping a leading byte order mark.

    Raises:
        TextEncodingError: Bytes are not valid UTF-8
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise TextEncodingError(str(exc)) from exc


def write_export(directory: Path, filename: str, content: bytes) -> Path:
    """Write an export buffer where it can be shared from.

    Raises:
        FileAccessError: Directory cannot be created or file cannot be written
    """
    target = directory / filename
    try:
        directory.mkdir(parents=True, exist_ok=True)
        with target.open("wb") as handle:
            handle.write(content)
    except OSError as exc:
        raise FileAccessError(str(target), exc.strerror or str(exc)) from exc

    logger.info("Wrote export file", path=str(target), size=len(content))
    return target
