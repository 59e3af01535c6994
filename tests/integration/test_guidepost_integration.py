import asyncio
import json
from pathlib import Path
from typing import Any, List

import pytest
from PIL import Image

from tileview.assets import AssetLoadError, load_images
from tileview.extensions.guidepost import (
    GUIDEPOST_LAYER_NAME,
    GuidepostClient,
    parse_watermarks,
)
from tests.test_utils import BLUE, GREEN, RED, make_renderer, pixel


def write_watermarks(tmp_path: Path, entries: List[Any]) -> Path:
    path = tmp_path / "guideposts.json"
    path.write_text(json.dumps(entries))
    return path


def save_image(tmp_path: Path, name: str, color: Any, size: int = 16) -> str:
    Image.new("RGBA", (size, size), color).save(tmp_path / name)
    return name


def test_load_images_all_or_nothing(tmp_path: Path) -> None:
    save_image(tmp_path, "a.png", RED)
    save_image(tmp_path, "b.png", BLUE)
    images = asyncio.run(load_images([("a", "a.png"), ("b", "b.png")], base_dir=tmp_path))
    assert set(images) == {"a", "b"}
    assert images["b"].getpixel((0, 0)) == BLUE

    with pytest.raises(AssetLoadError):
        asyncio.run(load_images([("a", "a.png"), ("c", "missing.png")], base_dir=tmp_path))


def test_load_images_rejects_non_images(tmp_path: Path) -> None:
    (tmp_path / "notes.png").write_text("definitely not a png")
    with pytest.raises(AssetLoadError):
        asyncio.run(load_images([("notes", "notes.png")], base_dir=tmp_path))


def test_guidepost_registers_layer_and_draws(tmp_path: Path) -> None:
    save_image(tmp_path, "sign.png", BLUE)
    path = write_watermarks(
        tmp_path, [{"assetName": "sign", "src": "sign.png", "x": 10, "y": 8}]
    )
    renderer, _, _, _ = make_renderer()
    client = GuidepostClient(renderer, path)

    assert asyncio.run(client.game_start()) is True
    assert renderer.layers.names() == ["ground", GUIDEPOST_LAYER_NAME, "players"]

    renderer.viewport.set_camera_position(10, 8)
    assert renderer.draw() is True
    assert pixel(renderer, 85, 70) == BLUE
    assert pixel(renderer, 75, 70) == GREEN


def test_guidepost_abandons_registration_on_any_failure(tmp_path: Path) -> None:
    save_image(tmp_path, "sign.png", BLUE)
    path = write_watermarks(
        tmp_path,
        [
            {"assetName": "sign", "src": "sign.png"},
            {"assetName": "lost", "src": "lost.png"},
        ],
    )
    renderer, _, _, _ = make_renderer()
    client = GuidepostClient(renderer, path)
    assert asyncio.run(client.game_start()) is False
    assert GUIDEPOST_LAYER_NAME not in renderer.layers


def test_guidepost_missing_list(tmp_path: Path) -> None:
    renderer, _, _, _ = make_renderer()
    client = GuidepostClient(renderer, tmp_path / "nope.json")
    assert asyncio.run(client.game_start()) is False
    assert len(renderer.layers) == 2


def test_parse_watermarks_validation() -> None:
    parsed = parse_watermarks([{"assetName": "a", "src": "a.png"}])
    assert parsed[0].x == 0.0 and parsed[0].y == 0.0
    with pytest.raises(ValueError):
        parse_watermarks({"assetName": "a"})
    with pytest.raises(ValueError):
        parse_watermarks([{"assetName": "a"}])


def test_guidepost_entries_sharing_a_name_keep_their_own_image(tmp_path: Path) -> None:
    save_image(tmp_path, "a.png", RED)
    save_image(tmp_path, "b.png", BLUE)
    path = write_watermarks(
        tmp_path,
        [
            {"assetName": "sign", "src": "a.png", "x": 2, "y": 2},
            {"assetName": "sign", "src": "b.png", "x": 6, "y": 2},
        ],
    )
    renderer, _, _, _ = make_renderer()
    assert asyncio.run(GuidepostClient(renderer, path).game_start()) is True

    layer = renderer.layers.get(GUIDEPOST_LAYER_NAME)
    assert layer is not None
    assert [w.image.getpixel((0, 0)) for w in layer.data] == [RED, BLUE]
    assert [w.watermark.src for w in layer.data] == ["a.png", "b.png"]


def test_guidepost_oversized_image_is_a_load_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    save_image(tmp_path, "sign.png", BLUE)
    path = write_watermarks(tmp_path, [{"assetName": "sign", "src": "sign.png"}])
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    with pytest.raises(AssetLoadError):
        asyncio.run(load_images([("sign", "sign.png")], base_dir=tmp_path))

    renderer, _, _, _ = make_renderer()
    assert asyncio.run(GuidepostClient(renderer, path).game_start()) is False
    assert GUIDEPOST_LAYER_NAME not in renderer.layers
