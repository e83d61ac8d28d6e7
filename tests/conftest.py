"""Shared fixtures: synthetic LUTs, images and a scripted RAW converter."""

import os

import cv2
import numpy as np
import pytest
from PIL import Image

from core.raster import LutSpec
from core.raw_converters import RawConverter


def identity_lut_pixels(level: int, width: int = None) -> np.ndarray:
    """Identity cube, red fastest then green then blue, packed row-major."""
    entries = []
    for b in range(level):
        for g in range(level):
            for r in range(level):
                scale = 255.0 / (level - 1) if level > 1 else 0.0
                entries.append([round(r * scale), round(g * scale), round(b * scale)])
    flat = np.array(entries, dtype=np.uint8)
    width = width or level * level
    return flat.reshape(-1, width, 3)


def identity_lut(level: int, width: int = None) -> LutSpec:
    return LutSpec(pixels=identity_lut_pixels(level, width), level=level)


def write_png(path, pixels: np.ndarray) -> str:
    Image.fromarray(pixels).save(str(path), "PNG")
    return str(path)


@pytest.fixture
def identity_lut_png(tmp_path):
    """Level-4 identity LUT as an 8x8 PNG."""
    return write_png(tmp_path / "identity_lut.png", identity_lut_pixels(4, width=8))


@pytest.fixture
def red_png(tmp_path):
    """10x10 solid red RGB image."""
    pixels = np.zeros((10, 10, 3), dtype=np.uint8)
    pixels[..., 0] = 255
    return write_png(tmp_path / "input.png", pixels)


@pytest.fixture
def random_rgb():
    rng = np.random.default_rng(1234)
    return rng.integers(0, 256, size=(16, 24, 3), dtype=np.uint8)


class FakeConverter(RawConverter):
    """Converter that writes a fixed image to a registered temp path."""

    def __init__(self, pixels_bgr: np.ndarray = None, fail_with: Exception = None, write_garbage: bool = False):
        self.pixels_bgr = pixels_bgr if pixels_bgr is not None else np.full((20, 30, 3), 128, dtype=np.uint8)
        self.fail_with = fail_with
        self.write_garbage = write_garbage
        self.calls = []
        self.created = []
        super().__init__("testos")

    def default_binary(self):
        return "fake-convert"

    def convert(self, source_path, artifacts, max_dimension=None):
        self.calls.append((source_path, max_dimension))
        output_path = artifacts.new_path("temp", ".png")
        self.created.append(output_path)
        if self.write_garbage:
            with open(output_path, "wb") as f:
                f.write(b"not an image")
        else:
            cv2.imwrite(output_path, self.pixels_bgr)
        if self.fail_with is not None:
            raise self.fail_with
        return output_path


@pytest.fixture
def fake_converter():
    return FakeConverter()


@pytest.fixture
def raw_file(tmp_path):
    """File with a camera RAW extension and bytes no codec understands."""
    path = tmp_path / "photo.orf"
    path.write_bytes(os.urandom(256))
    return str(path)
