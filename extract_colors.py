#!/usr/bin/env python3
"""
Build a frequency-weighted color pool from a decoded pixel grid.

Each pixel is quantized to `bits` per channel and counted. Alpha is ignored:
every decoded pixel counts toward the total, transparent or not.

Rows can be split into chunks and counted independently (optionally on a
thread pool); partial counts merge by summing per color, so the pool does
not depend on how the grid was partitioned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from color_model import Color
from theme_errors import EmptyImageError

logger = logging.getLogger(__name__)


# =============================================================================
# Quantization
# =============================================================================

def quantize(pixels: np.ndarray, bits: int = 5) -> np.ndarray:
    """
    Quantize RGB(A) samples to `bits` per channel.

    level = round(channel / step) * step with step = 256 / 2**bits, rounded
    half up and clamped to 255. Alpha (if present) is dropped.

    Returns:
        uint8 array of shape (n, 3)
    """
    if not 1 <= bits <= 8:
        raise ValueError(f"quantization bits must be in 1..8, got {bits}")

    rgb = pixels.reshape(-1, pixels.shape[-1])[:, :3]
    if bits == 8:
        return rgb.astype(np.uint8)

    step = 256.0 / (1 << bits)
    levels = np.floor(rgb.astype(np.float64) / step + 0.5) * step
    return np.clip(levels, 0, 255).astype(np.uint8)


def _pack(rgb: np.ndarray) -> np.ndarray:
    """Pack (n, 3) uint8 RGB into one int per color."""
    rgb = rgb.astype(np.int64)
    return (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]


def _unpack(keys: np.ndarray) -> np.ndarray:
    return np.column_stack([(keys >> 16) & 0xFF, (keys >> 8) & 0xFF, keys & 0xFF]).astype(np.uint8)


def count_colors(pixels: np.ndarray, bits: int = 5) -> tuple:
    """Quantize and count one block of pixels.

    Returns:
        (packed_keys, counts) with keys sorted ascending
    """
    keys = _pack(quantize(pixels, bits))
    return np.unique(keys, return_counts=True)


def merge_counts(partials) -> tuple:
    """Sum per-color counts of several (keys, counts) partials.

    Order of the partials does not affect the result.
    """
    partials = list(partials)
    if not partials:
        return np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64)

    all_keys = np.concatenate([keys for keys, _ in partials])
    all_counts = np.concatenate([counts for _, counts in partials]).astype(np.int64)
    keys, inverse = np.unique(all_keys, return_inverse=True)
    counts = np.zeros(len(keys), dtype=np.int64)
    np.add.at(counts, inverse.ravel(), all_counts)
    return keys, counts


# =============================================================================
# Color Pool
# =============================================================================

@dataclass(frozen=True, eq=False)
class ColorPool:
    """
    Unique quantized colors with their pixel counts.

    Entries are stored in dominance order: count descending, then RGB
    ascending. Invariant: sum(counts) == total_pixels.
    """
    colors: tuple  # Color, dominance order
    counts: np.ndarray  # int64, aligned with colors
    total_pixels: int
    quantization_bits: int = 8
    _index: dict = field(init=False, repr=False)

    def __post_init__(self):
        if len(self.colors) != len(self.counts):
            raise ValueError("colors and counts must have the same length")
        if int(self.counts.sum()) != self.total_pixels:
            raise ValueError(
                f"pool counts sum to {int(self.counts.sum())}, expected {self.total_pixels}"
            )
        self.counts.setflags(write=False)
        object.__setattr__(self, '_index', {c: i for i, c in enumerate(self.colors)})

    @classmethod
    def from_arrays(cls, keys: np.ndarray, counts: np.ndarray, bits: int = 8) -> "ColorPool":
        """Build from packed keys and counts (as produced by count_colors)."""
        rgb = _unpack(keys)
        counts = np.asarray(counts, dtype=np.int64)
        # Keys are ascending, i.e. RGB ascending; a stable sort on -count
        # keeps that order among equal counts.
        order = np.argsort(-counts, kind='stable')
        colors = tuple(Color(int(r), int(g), int(b)) for r, g, b in rgb[order])
        return cls(colors=colors, counts=counts[order].copy(),
                   total_pixels=int(counts.sum()), quantization_bits=bits)

    @classmethod
    def from_counts(cls, counts, bits: int = 8) -> "ColorPool":
        """Build from a mapping (or iterable of pairs) of Color/RGB tuple -> count."""
        items = counts.items() if hasattr(counts, 'items') else counts
        merged = {}
        for color, count in items:
            if not isinstance(color, Color):
                color = Color(*color)
            if count <= 0:
                raise ValueError(f"count for {color.hex} must be positive")
            merged[color] = merged.get(color, 0) + int(count)

        if not merged:
            raise EmptyImageError()

        keys = _pack(np.array([c.rgb for c in merged], dtype=np.int64))
        values = np.array(list(merged.values()), dtype=np.int64)
        order = np.argsort(keys)
        return cls.from_arrays(keys[order], values[order], bits)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(zip(self.colors, (int(c) for c in self.counts)))

    def __contains__(self, color) -> bool:
        return color in self._index

    @property
    def unique_colors(self) -> int:
        return len(self.colors)

    @property
    def weights(self) -> np.ndarray:
        """Per-entry share of the total pixel count."""
        return self.counts / self.total_pixels

    def count(self, color: Color) -> int:
        index = self._index.get(color)
        return 0 if index is None else int(self.counts[index])

    def weight(self, color: Color) -> float:
        return self.count(color) / self.total_pixels

    def dominant(self, k: Optional[int] = None) -> list:
        """Top-k (Color, count) pairs by count, ties broken by RGB ascending."""
        end = len(self.colors) if k is None else max(0, k)
        return [(c, int(n)) for c, n in zip(self.colors[:end], self.counts[:end])]

    def hsl_array(self) -> np.ndarray:
        """(n, 3) array of hue, saturation, lightness in dominance order."""
        if not self.colors:
            return np.empty((0, 3))
        return np.array([c.hsl for c in self.colors], dtype=np.float64)

    def merge(self, other: "ColorPool") -> "ColorPool":
        """Pool over the union of both pixel sets."""
        if other.quantization_bits != self.quantization_bits:
            raise ValueError("cannot merge pools with different quantization depths")
        keys, counts = merge_counts([self._packed(), other._packed()])
        return ColorPool.from_arrays(keys, counts, self.quantization_bits)

    def _packed(self) -> tuple:
        keys = _pack(np.array([c.rgb for c in self.colors], dtype=np.int64).reshape(-1, 3))
        order = np.argsort(keys)
        return keys[order], self.counts[order]


# =============================================================================
# Pool Construction
# =============================================================================

def _row_chunks(pixels: np.ndarray, chunk_rows: int) -> list:
    return [pixels[start:start + chunk_rows] for start in range(0, pixels.shape[0], chunk_rows)]


def build_pool(pixels: np.ndarray, bits: int = 5,
               chunk_rows: Optional[int] = None, workers: int = 1) -> ColorPool:
    """
    Quantize a pixel grid and count unique colors.

    Args:
        pixels: uint8 array of shape (h, w, 3|4) or (n, 3|4)
        bits: Bits per channel after quantization (5 = 32 levels)
        chunk_rows: Split the grid into blocks of this many rows
        workers: Thread count used to count blocks concurrently

    Returns:
        ColorPool whose counts sum to h * w (or n)

    Raises:
        EmptyImageError: If the grid holds no pixels
    """
    pixels = np.asarray(pixels)
    if pixels.ndim not in (2, 3) or pixels.shape[-1] not in (3, 4):
        raise ValueError(f"Expected (h, w, 3|4) or (n, 3|4) pixel array, got shape {pixels.shape}")
    if pixels.size == 0:
        raise EmptyImageError()

    if chunk_rows is None or chunk_rows >= pixels.shape[0]:
        partials = [count_colors(pixels, bits)]
    else:
        chunks = _row_chunks(pixels, chunk_rows)
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                partials = list(executor.map(lambda chunk: count_colors(chunk, bits), chunks))
        else:
            partials = [count_colors(chunk, bits) for chunk in chunks]

    keys, counts = merge_counts(partials)
    pool = ColorPool.from_arrays(keys, counts, bits)

    logger.debug(
        f"Built pool: {pool.unique_colors:,} unique colors from "
        f"{pool.total_pixels:,} pixels ({bits} bits, {len(partials)} block(s))"
    )
    return pool
