import pytest
from enctextfile import Encoding, TextFile
from enctextfile._pytest_plugin import make_text_file  # noqa: F401


@pytest.fixture
def tf():
    """TextFile with a deterministic platform text codec (latin-1)."""
    f = TextFile(Encoding.SYSTEM_TEXT, platform_encoding="latin-1")
    yield f
    f.close()
