from typing import TYPE_CHECKING

from ._buffer import ByteWindow
from ._encoding import Encoding, detect_encoding
from ._exceptions import RemoteFetchError, TextFileOpenError
from ._stream import FileStream
from ._textfile import TEXTFILE_BUFFER_SIZE, TextFile
from ._typing import LineResult, RawLineResult

if TYPE_CHECKING:
    from ._web import FetchedResource, WebTextFile, fetch_to_temp


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name in ("WebTextFile", "FetchedResource", "fetch_to_temp"):
        from ._web import FetchedResource, WebTextFile, fetch_to_temp

        globals()["WebTextFile"] = WebTextFile
        globals()["FetchedResource"] = FetchedResource
        globals()["fetch_to_temp"] = fetch_to_temp
        return globals()[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "TextFile",
    "Encoding",
    "LineResult",
    "RawLineResult",
    "ByteWindow",
    "FileStream",
    "TextFileOpenError",
    "RemoteFetchError",
    "TEXTFILE_BUFFER_SIZE",
    "detect_encoding",
    "WebTextFile",
    "FetchedResource",
    "fetch_to_temp",
]
__version__ = "0.1.0"
