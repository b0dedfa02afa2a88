from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

from coloring_book.errors import DecodeError
from coloring_book.repositories.image_repository import ImageRepository


@pytest.fixture
def repo():
    return ImageRepository()


def _png_bytes(array):
    buffer = BytesIO()
    PILImage.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


def test_decode_png(repo, gradient_photo):
    bmp = repo.decode(_png_bytes(gradient_photo.pixels))
    assert bmp.channels == 3
    np.testing.assert_array_equal(bmp.pixels, gradient_photo.pixels)


def test_decode_keeps_alpha(repo):
    rgba = np.zeros((4, 5, 4), dtype=np.uint8)
    rgba[..., 3] = 128
    bmp = repo.decode(_png_bytes(rgba))
    assert (bmp.width, bmp.height, bmp.channels) == (5, 4, 4)


def test_decode_grayscale_becomes_rgb(repo):
    gray = np.full((3, 3), 90, dtype=np.uint8)
    bmp = repo.decode(_png_bytes(gray))
    assert bmp.channels == 3
    assert (bmp.pixels == 90).all()


def test_encode_png_round_trip(repo, gradient_photo):
    again = repo.decode(repo.encode_png(gradient_photo))
    np.testing.assert_array_equal(again.pixels, gradient_photo.pixels)


@pytest.mark.parametrize("data", [b"", b"definitely not an image"])
def test_unreadable_input_raises_decode_error(repo, data):
    with pytest.raises(DecodeError) as info:
        repo.decode(data)
    assert info.value.stage == "decode"


def test_load_missing_file(repo, tmp_path):
    with pytest.raises(DecodeError):
        repo.load(tmp_path / "missing.jpg")


def test_save_and_iter_dir(repo, tmp_path, gradient_photo):
    repo.save(gradient_photo, tmp_path / "b.png")
    repo.save(gradient_photo, tmp_path / "a.png")
    (tmp_path / "notes.txt").write_text("skip me")
    (tmp_path / "sub").mkdir()
    repo.save(gradient_photo, tmp_path / "sub" / "c.png")

    assert [p.name for p in repo.iter_dir(tmp_path)] == ["a.png", "b.png"]
    assert [p.name for p in repo.iter_dir(tmp_path, recursive=True)] == ["a.png", "b.png", "c.png"]
    with pytest.raises(NotADirectoryError):
        list(repo.iter_dir(tmp_path / "a.png"))
