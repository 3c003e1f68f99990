from __future__ import annotations

import hashlib
import io
import uuid

from PIL import Image, ImageDraw

DEFAULT_AVATAR_SIZE = 290
_GRID = 5
_BACKGROUND = (240, 240, 240)


def hash_email(email: str) -> str:
    return hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()


def hash_avatar(user_id: uuid.UUID, data: bytes) -> str:
    """Storage key for an uploaded avatar; changes whenever the image does."""
    data_digest = hashlib.md5(data).hexdigest()
    return hashlib.md5(f"{user_id}-{data_digest}".encode()).hexdigest()


def _identicon_cells(digest: bytes) -> list[list[bool]]:
    half = (_GRID + 1) // 2
    cells: list[list[bool]] = []
    for y in range(_GRID):
        left = [bool(digest[y * half + x] & 1) for x in range(half)]
        # Mirror the left half so the pattern is symmetric.
        cells.append(left + left[: _GRID - half][::-1])
    return cells


def random_image(seed: bytes, size: int = DEFAULT_AVATAR_SIZE) -> bytes:
    """Render a deterministic identicon PNG for ``seed``."""
    digest = hashlib.sha256(seed).digest()
    foreground = (digest[-3] // 2 + 64, digest[-2] // 2 + 64, digest[-1] // 2 + 64)

    block = max(size // _GRID, 1)
    width = block * _GRID
    img = Image.new("RGB", (width, width), _BACKGROUND)
    draw = ImageDraw.Draw(img)
    for y, row in enumerate(_identicon_cells(digest)):
        for x, filled in enumerate(row):
            if filled:
                left, top = x * block, y * block
                draw.rectangle((left, top, left + block - 1, top + block - 1), fill=foreground)

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
