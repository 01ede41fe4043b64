from io import BytesIO

import pytest
from PIL import Image

from favicon_resolver.extract.transparency import clear_cache


class DummyResponse:
    def __init__(self, content=b"", status_code=200, headers=None, url="", reason="OK"):
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self.url = url
        self.reason = reason
        self.encoding = "utf-8"
        self.apparent_encoding = "utf-8"

    @property
    def ok(self):
        return self.status_code < 400

    @property
    def text(self):
        return self.content.decode(self.encoding)

    def close(self):
        pass


def png_bytes(size=(8, 8), color=(255, 0, 0, 255), mode="RGBA", transparent=()):
    image = Image.new(mode, size, color)
    for xy in transparent:
        image.putpixel(xy, (0, 0, 0, 0))
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def _fresh_transparency_cache():
    clear_cache()
    yield
    clear_cache()
