from typing import NamedTuple


class LineResult(NamedTuple):
    text: str
    ok: bool


class RawLineResult(NamedTuple):
    data: bytes
    ok: bool
