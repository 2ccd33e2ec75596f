import pytest
from PIL import Image


def make_image(width, height):
    """RGBA gradient with a translucent corner, so resizes are not trivially uniform."""
    img = Image.new("RGBA", (width, height))
    for y in range(height):
        for x in range(width):
            alpha = 128 if x < width // 4 and y < height // 4 else 255
            img.putpixel((x, y), (x * 255 // width, y * 255 // height, 90, alpha))
    return img


@pytest.fixture
def source_png(tmp_path):
    path = tmp_path / "input.png"
    make_image(64, 64).save(path)
    return path


@pytest.fixture
def image_factory():
    return make_image
