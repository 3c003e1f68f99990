from __future__ import annotations

import io
import uuid

from PIL import Image

from gitnest.avatar import hash_avatar, hash_email, random_image


def test_hash_email_normalizes_case_and_whitespace() -> None:
    assert hash_email(" Alice@Example.com ") == hash_email("alice@example.com")
    assert len(hash_email("alice@example.com")) == 32


def test_hash_avatar_changes_with_content() -> None:
    user_id = uuid.uuid4()
    assert hash_avatar(user_id, b"one") != hash_avatar(user_id, b"two")
    assert hash_avatar(user_id, b"one") == hash_avatar(user_id, b"one")


def test_random_image_is_deterministic_and_square() -> None:
    first = random_image(b"alice@example.com", size=50)
    assert first == random_image(b"alice@example.com", size=50)
    assert first != random_image(b"bob@example.com", size=50)

    with Image.open(io.BytesIO(first)) as img:
        assert img.format == "PNG"
        assert img.size == (50, 50)


def test_random_image_is_mirrored() -> None:
    with Image.open(io.BytesIO(random_image(b"carol@example.com", size=50))) as img:
        rgb = img.convert("RGB")
        width, height = rgb.size
        for y in range(0, height, 10):
            for x in range(width // 2):
                assert rgb.getpixel((x, y)) == rgb.getpixel((width - 1 - x, y))
