"""
Pytest configuration and shared fixtures for test suite.
"""

import random

import pytest
import tempfile
import shutil
from pathlib import Path
from PIL import Image


def make_noise_image(seed: int, size: int = 64) -> Image.Image:
    """Deterministic grayscale noise image; different seeds give different fingerprints."""
    rng = random.Random(seed)
    data = bytes(rng.randrange(256) for _ in range(size * size))
    return Image.frombytes('L', (size, size), data)


def make_checkerboard(size: int = 128, squares: int = 8) -> Image.Image:
    img = Image.new('L', (size, size), 0)
    step = size // squares
    white = Image.new('L', (step, step), 255)
    for row in range(squares):
        for col in range(squares):
            if (row + col) % 2 == 0:
                img.paste(white, (col * step, row * step))
    return img


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Point user config at an empty directory and clear IMGPHASH_* overrides."""
    from imgphash.user_config import get_user_config

    for var in ('IMGPHASH_WORKERS', 'IMGPHASH_THRESHOLD', 'IMGPHASH_MAX_PIXELS'):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv('IMGPHASH_CONFIG_DIR', str(tmp_path / 'imgphash-config'))

    config = get_user_config()
    config.reload()
    yield config
    config.reload()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sample_images(temp_dir):
    """
    Create a set of sample images for testing.

    Returns:
        dict with paths to:
        - gradient, gradient_copy (byte-identical files)
        - gradient_jpeg (same content, lossy format)
        - checkerboard (unrelated content)
        - rgba (RGBA mode image, needs conversion before hashing)
        - corrupted (text with an image extension)
        - empty (zero-byte file)
        - missing (path that does not exist)
    """
    images = {}

    gradient = Image.linear_gradient('L').resize((128, 128))
    path = temp_dir / "gradient.png"
    gradient.save(path, 'PNG')
    images['gradient'] = str(path)

    path = temp_dir / "gradient_copy.png"
    gradient.save(path, 'PNG')
    images['gradient_copy'] = str(path)

    path = temp_dir / "gradient.jpg"
    gradient.convert('RGB').save(path, 'JPEG', quality=90)
    images['gradient_jpeg'] = str(path)

    path = temp_dir / "checkerboard.png"
    make_checkerboard().save(path, 'PNG')
    images['checkerboard'] = str(path)

    rgba = Image.merge('RGBA', [gradient, gradient.rotate(90), gradient.rotate(180), gradient])
    path = temp_dir / "rgba.png"
    rgba.save(path, 'PNG')
    images['rgba'] = str(path)

    path = temp_dir / "corrupted.png"
    path.write_text("not an image")
    images['corrupted'] = str(path)

    path = temp_dir / "empty.jpg"
    path.write_bytes(b"")
    images['empty'] = str(path)

    images['missing'] = str(temp_dir / "does_not_exist.png")

    return images


@pytest.fixture
def noise_images(temp_dir):
    """Eight distinct noise images."""
    paths = []
    for seed in range(8):
        path = temp_dir / f"noise_{seed}.png"
        make_noise_image(seed).save(path, 'PNG')
        paths.append(str(path))
    return paths
