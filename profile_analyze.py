#!/usr/bin/env python3
"""Profile the extraction pipeline to identify performance bottlenecks."""

import cProfile
import io
import pstats
import sys
import time
from pathlib import Path

from analyze import ExtractionResult, render
from color_groups import group_colors
from color_profile import analyze_profile
from extract_colors import build_pool
from image_loader import load_image
from role_extraction import extract_roles
from theme_settings import ThemeSettings, load_settings


def time_stages(image_path: str, settings: ThemeSettings, verbose: bool = True) -> dict:
    """Time each pipeline stage for one image."""

    if verbose:
        print(f"\n{'='*60}")
        print(f"Profiling: {Path(image_path).name}")
        print(f"{'='*60}")

    timings = {}
    extraction = settings.extraction

    start = time.perf_counter()
    image = load_image(image_path, settings)
    timings['load_image'] = time.perf_counter() - start

    start = time.perf_counter()
    pool = build_pool(image.pixels, extraction.quantization_bits,
                      extraction.pool_chunk_rows, extraction.pool_workers)
    timings['build_pool'] = time.perf_counter() - start

    if verbose:
        print(f"  Pixels: {pool.total_pixels:,}")
        print(f"  Unique colors: {len(pool):,}")

    start = time.perf_counter()
    profile = analyze_profile(pool, settings)
    timings['analyze_profile'] = time.perf_counter() - start

    start = time.perf_counter()
    groupings = group_colors(pool, settings)
    timings['group_colors'] = time.perf_counter() - start

    start = time.perf_counter()
    assignment = extract_roles(pool, profile, settings)
    timings['extract_roles'] = time.perf_counter() - start

    if verbose:
        print(f"  Classification: {profile.mode.value} {profile.classification}")
        print(f"  Fallback roles: {len(assignment.fallbacks)}")

    start = time.perf_counter()
    render(ExtractionResult(pool, profile, groupings, assignment, image.path))
    timings['render'] = time.perf_counter() - start

    total = sum(timings.values())
    timings['total'] = total

    if verbose:
        print(f"\nStage timings:")
        for stage, t in timings.items():
            pct = (t / total * 100) if stage != 'total' and total > 0 else 100
            print(f"  {stage:20s}: {t:6.3f}s ({pct:5.1f}%)")

    return timings


def detailed_profile(image_path: str, settings: ThemeSettings, top: int = 30) -> str:
    """cProfile report for pool construction plus role extraction."""
    image = load_image(image_path, settings)

    profiler = cProfile.Profile()
    profiler.enable()
    pool = build_pool(image.pixels, settings.extraction.quantization_bits)
    extract_roles(pool, analyze_profile(pool, settings), settings)
    profiler.disable()

    stream = io.StringIO()
    stats = pstats.Stats(profiler, stream=stream)
    stats.sort_stats('cumulative')
    stats.print_stats(top)
    return stream.getvalue()


def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description='Time the extraction stages on one or more images.')
    parser.add_argument('images', nargs='+', help='Image files to profile')
    parser.add_argument('--config', '-c', default=None, help='Settings JSON file')
    parser.add_argument('--detailed', action='store_true', help='Print a cProfile report for the first image')
    args = parser.parse_args(argv)

    settings = load_settings(args.config)

    all_timings = [(Path(path).name, time_stages(path, settings)) for path in args.images]

    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    print(f"{'Image':<35} {'Pool':>8} {'Roles':>8} {'Total':>8}")
    print("-" * 60)
    for name, timings in all_timings:
        print(f"{name:<35} {timings['build_pool']:>7.3f}s {timings['extract_roles']:>7.3f}s {timings['total']:>7.3f}s")

    if args.detailed:
        print(f"\n{'='*60}")
        print("Detailed profile of build_pool() + extract_roles()")
        print(f"{'='*60}")
        print(detailed_profile(args.images[0], settings))

    return 0


if __name__ == "__main__":
    sys.exit(main())
