"""Windows .ico container encoder.

Layout, all fields little-endian with no padding:

    ICONDIR        6 bytes    reserved, type, image count
    ICONDIRENTRY  16 bytes    one per image, in payload order
    payloads                  PNG data, contiguous, in directory order
"""

import io
import logging
import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from PIL import Image

from iconsmith.errors import IcoEncodeError, IcoFormatError

logger = logging.getLogger(__name__)

ICONDIR_FORMAT = "<HHH"
ICONDIRENTRY_FORMAT = "<BBBBHHII"
ICONDIR_SIZE = struct.calcsize(ICONDIR_FORMAT)
ICONDIRENTRY_SIZE = struct.calcsize(ICONDIRENTRY_FORMAT)

ICO_TYPE = 1
COLOR_PLANES = 1
# Payloads are PNG, which may be 24-bit; readers only use this as a hint.
BITS_PER_PIXEL = 32
MAX_DIMENSION = 256
MAX_IMAGES = 0xFFFF
MAX_OFFSET = 0xFFFFFFFF


@dataclass(frozen=True)
class IconDir:
    """ICONDIR header record."""

    count: int
    image_type: int = ICO_TYPE
    reserved: int = 0

    def pack(self) -> bytes:
        return struct.pack(ICONDIR_FORMAT, self.reserved, self.image_type, self.count)

    @classmethod
    def unpack(cls, data: bytes) -> "IconDir":
        reserved, image_type, count = struct.unpack_from(ICONDIR_FORMAT, data, 0)
        return cls(count=count, image_type=image_type, reserved=reserved)


@dataclass(frozen=True)
class IconDirEntry:
    """ICONDIRENTRY record. ``width``/``height`` hold real pixel sizes (1-256)."""

    width: int
    height: int
    size: int
    offset: int
    color_count: int = 0
    reserved: int = 0
    color_planes: int = COLOR_PLANES
    bits_per_pixel: int = BITS_PER_PIXEL

    def pack(self) -> bytes:
        return struct.pack(
            ICONDIRENTRY_FORMAT,
            _dimension_byte(self.width, "width"),
            _dimension_byte(self.height, "height"),
            self.color_count,
            self.reserved,
            self.color_planes,
            self.bits_per_pixel,
            self.size,
            self.offset,
        )

    @classmethod
    def unpack(cls, data: bytes, pos: int) -> "IconDirEntry":
        (width, height, color_count, reserved,
         planes, bpp, size, offset) = struct.unpack_from(ICONDIRENTRY_FORMAT, data, pos)
        return cls(
            width=width or MAX_DIMENSION,
            height=height or MAX_DIMENSION,
            size=size,
            offset=offset,
            color_count=color_count,
            reserved=reserved,
            color_planes=planes,
            bits_per_pixel=bpp,
        )


def _dimension_byte(value: int, axis: str) -> int:
    """Map a pixel dimension to its one-byte field (256 is stored as 0)."""
    if value == MAX_DIMENSION:
        return 0
    if not 1 <= value < MAX_DIMENSION:
        raise IcoEncodeError(
            f"Image {axis} {value} does not fit an icon entry (1-{MAX_DIMENSION})"
        )
    return value


def directory_size(count: int) -> int:
    """Bytes taken by the header plus ``count`` directory entries."""
    return ICONDIR_SIZE + count * ICONDIRENTRY_SIZE


def layout_offsets(sizes: Sequence[int]) -> list[int]:
    """Return the file offset of each payload, packed back to back.

    The first payload starts right after the directory; every later one
    starts where the previous one ends.
    """
    offsets = []
    offset = directory_size(len(sizes))
    for size in sizes:
        offsets.append(offset)
        offset += size
    if offset > MAX_OFFSET + 1:
        raise IcoEncodeError(f"Icon container would be {offset} bytes, over the 4 GiB limit")
    return offsets


def build_container(payloads: Sequence[tuple[int, int, bytes]]) -> bytes:
    """Pack already-encoded ``(width, height, data)`` payloads into .ico bytes."""
    if len(payloads) > MAX_IMAGES:
        raise IcoEncodeError(f"Too many images for one icon: {len(payloads)}")

    offsets = layout_offsets([len(data) for _, _, data in payloads])

    directory = io.BytesIO()
    directory.write(IconDir(count=len(payloads)).pack())
    images = io.BytesIO()
    for (width, height, data), offset in zip(payloads, offsets):
        entry = IconDirEntry(width=width, height=height, size=len(data), offset=offset)
        directory.write(entry.pack())
        images.write(data)

    return directory.getvalue() + images.getvalue()


def encode_png(image: Image.Image) -> bytes:
    """Encode one image as PNG in memory."""
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def encode(images: Sequence[Image.Image]) -> bytes:
    """Encode images, in the given order, into a single .ico container.

    Raises IcoEncodeError if any image cannot be encoded; nothing is
    returned for the images that did succeed.
    """
    payloads = []
    for index, image in enumerate(images):
        width, height = image.size
        try:
            data = encode_png(image)
        except Exception as e:
            raise IcoEncodeError(
                f"Failed to encode image #{index} ({width}x{height}, {image.mode}) as PNG: {e}"
            ) from e
        logger.debug("Image #%d: %dx%d, %d bytes", index, width, height, len(data))
        payloads.append((width, height, data))
    return build_container(payloads)


def write_ico(images: Sequence[Image.Image], path: Path | str) -> Path:
    """Encode ``images`` and write the container to ``path``.

    The file only appears once encoding has fully succeeded.
    """
    path = Path(path)
    data = encode(images)
    tmp_path = path.with_name(path.name + ".part")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.info("Wrote %s (%d images, %d bytes)", path, len(images), len(data))
    return path


def read_directory(data: bytes) -> tuple[IconDir, list[IconDirEntry]]:
    """Parse and validate the header and directory of an .ico container."""
    if len(data) < ICONDIR_SIZE:
        raise IcoFormatError(f"Truncated header: {len(data)} bytes")
    header = IconDir.unpack(data)
    if header.reserved != 0:
        raise IcoFormatError(f"Reserved header field is {header.reserved}, expected 0")
    if header.image_type != ICO_TYPE:
        raise IcoFormatError(f"Unsupported image type {header.image_type}")
    if len(data) < directory_size(header.count):
        raise IcoFormatError(
            f"Truncated directory: {header.count} entries need "
            f"{directory_size(header.count)} bytes, got {len(data)}"
        )

    entries = []
    for i in range(header.count):
        entry = IconDirEntry.unpack(data, ICONDIR_SIZE + i * ICONDIRENTRY_SIZE)
        if entry.offset + entry.size > len(data):
            raise IcoFormatError(
                f"Entry {i} payload [{entry.offset}, {entry.offset + entry.size}) "
                f"runs past end of data ({len(data)} bytes)"
            )
        entries.append(entry)
    return header, entries


def extract_payloads(data: bytes) -> list[bytes]:
    """Return each entry's payload bytes, in directory order."""
    _, entries = read_directory(data)
    return [data[e.offset:e.offset + e.size] for e in entries]
