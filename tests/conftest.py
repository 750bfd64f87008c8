"""Shared test fixtures for the logo gallery upload pipeline."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, Any

import pytest
from PIL import Image, ImageDraw

from logo_gallery.models.config import Config
from logo_gallery.repositories.logo_repository import LogoRepository
from logo_gallery.services.database import Database

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


def image_to_bytes(img: Image.Image, fmt: str = "PNG", **save_options: Any) -> bytes:
    """Convert a PIL Image to raw bytes."""
    buf = io.BytesIO()
    img.save(buf, format=fmt, **save_options)
    return buf.getvalue()


def draw_logo(
    background: tuple[int, int, int] = (255, 255, 255),
    foreground: tuple[int, int, int] = (220, 20, 60),
    shape: str = "circle",
    size: tuple[int, int] = (128, 96),
    tweak: bool = False,
) -> Image.Image:
    """Draw a simple two-color logo.

    ``tweak`` nudges one corner pixel so the encoded bytes differ while the
    picture stays visually identical.
    """
    width, height = size
    img = Image.new("RGB", size, color=background)
    draw = ImageDraw.Draw(img)
    box = (width // 4, height // 4, width * 3 // 4, height * 3 // 4)
    if shape == "circle":
        draw.ellipse(box, fill=foreground)
    elif shape == "square":
        draw.rectangle(box, fill=foreground)
    elif shape == "stripes":
        for x in range(0, width, 8):
            draw.rectangle((x, 0, x + 3, height), fill=foreground)
    else:
        msg = f"unknown shape {shape}"
        raise ValueError(msg)
    if tweak:
        r, g, b = background
        img.putpixel((width - 1, height - 1), (max(r - 3, 0), max(g - 3, 0), max(b - 3, 0)))
    return img


@pytest.fixture
def logo_factory() -> Callable[..., bytes]:
    """Build encoded logo images on demand."""

    def _factory(
        background: tuple[int, int, int] = (255, 255, 255),
        foreground: tuple[int, int, int] = (220, 20, 60),
        shape: str = "circle",
        size: tuple[int, int] = (128, 96),
        fmt: str = "PNG",
        tweak: bool = False,
        quality: int | None = None,
    ) -> bytes:
        img = draw_logo(background, foreground, shape, size, tweak)
        if quality is None:
            return image_to_bytes(img, fmt)
        return image_to_bytes(img, fmt, quality=quality)

    return _factory


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> str:
    """Provide a temporary database file path."""
    return str(tmp_path / "test.db")


@pytest.fixture
def db(tmp_db_path: str) -> Iterator[Database]:
    """Provide an initialized temporary database."""
    database = Database(db_path=tmp_db_path)
    database.init_db()
    yield database
    database.close()


@pytest.fixture
def logo_repo(db: Database) -> LogoRepository:
    """Logo repository backed by the temporary database."""
    return LogoRepository(db)


@pytest.fixture
def config(tmp_db_path: str) -> Config:
    """Configuration pointing at the temporary database, defaults otherwise."""
    return Config(database_path=tmp_db_path)
