#!/usr/bin/env python3
"""
Theme profile extraction pipeline.

Derives a color profile and a role-based UI palette from an image.
Four stages: Color Pool → Profile → Groupings → Role Extraction, then Render
(prose for the terminal, HTML swatches, JSON for theme-file writers).
"""

import json
import logging
import sys
from dataclasses import dataclass
from html import escape
from pathlib import Path
from typing import Optional

import numpy as np

from color_groups import LIGHTNESS_LABELS, SATURATION_LABELS, Groupings, group_colors
from color_model import Color, color_name, contrast_ratio, wcag_level
from color_profile import ImageProfile, analyze_profile
from extract_colors import ColorPool, build_pool
from image_loader import load_image
from role_categories import ACCENT_ROLES, CORE_ROLES, SEMANTIC_ROLES, TERMINAL_ROLES, Role, ansi_index
from role_extraction import RoleAssignment, extract_roles
from theme_errors import ThemeProfileError
from theme_settings import ThemeSettings, default_settings, load_settings

logger = logging.getLogger(__name__)

PALETTE_STRIP_COLORS = 12

ROLE_SECTIONS = (
    ("CORE", (Role.BACKGROUND,) + CORE_ROLES),
    ("TERMINAL", TERMINAL_ROLES),
    ("ACCENTS", ACCENT_ROLES),
    ("SEMANTIC", SEMANTIC_ROLES),
)


@dataclass(frozen=True)
class ExtractionResult:
    pool: ColorPool
    profile: ImageProfile
    groupings: Groupings
    assignment: RoleAssignment
    source: Optional[str] = None

    @property
    def background(self) -> Color:
        return self.assignment[Role.BACKGROUND]


# =============================================================================
# Main Pipeline
# =============================================================================

def run_pipeline(pixels: np.ndarray, settings: Optional[ThemeSettings] = None,
                 source: Optional[str] = None) -> ExtractionResult:
    """Run every stage on an already decoded pixel grid."""
    settings = settings or default_settings()
    extraction = settings.extraction

    # Stage 1: Color Pool
    pool = build_pool(
        pixels,
        bits=extraction.quantization_bits,
        chunk_rows=extraction.pool_chunk_rows,
        workers=extraction.pool_workers,
    )

    # Stage 2: Profile
    profile = analyze_profile(pool, settings)

    # Stage 3: Groupings
    groupings = group_colors(pool, settings)

    # Stage 4: Role Extraction
    assignment = extract_roles(pool, profile, settings)

    logger.info(
        f"Extracted {profile.mode.value} {profile.classification} theme "
        f"from {pool.total_pixels:,} pixels ({len(assignment.fallbacks)} fallback roles)"
    )
    return ExtractionResult(pool, profile, groupings, assignment, source)


def analyze_image(image_path, settings: Optional[ThemeSettings] = None) -> ExtractionResult:
    """Load an image file and run the full pipeline on it."""
    settings = settings or default_settings()
    image = load_image(image_path, settings)
    return run_pipeline(image.pixels, settings, source=image.path)


# =============================================================================
# Render
# =============================================================================

def _role_title(role: Role) -> str:
    return role.value.replace('_', ' ').title()


def _percent(weight: float) -> str:
    return f"{weight * 100:.1f}%" if weight >= 0.001 else "<0.1%"


def describe_scheme(profile: ImageProfile) -> str:
    if profile.is_grayscale:
        return "Almost no hue information; the palette is built from grays and fallbacks."
    if profile.is_monochromatic:
        return f"A single hue family around {profile.dominant_hue:.0f}° carries nearly all color."
    return (f"Several hue families, centred on {profile.dominant_hue:.0f}° "
            f"with a spread of ±{profile.hue_variance:.0f}°.")


def render(result: ExtractionResult) -> str:
    """Render the extraction result as prose."""
    profile = result.profile
    stats = result.groupings.statistics
    assignment = result.assignment
    background = result.background
    lines = []

    # Header
    lines.append(f"SCHEME: {profile.mode.value} {profile.classification}")
    lines.append(describe_scheme(profile))
    lines.append(f"Average lightness: {profile.average_luminance:.2f} | "
                 f"Average saturation: {profile.average_saturation:.2f} | "
                 f"Chromatic: {_percent(profile.chromatic_fraction)}")
    lines.append(f"Unique colors: {len(result.pool):,} from {result.pool.total_pixels:,} pixels | "
                 f"Diversity: {result.groupings.chromatic_diversity:.2f}")
    lines.append("")

    # Roles
    for title, roles in ROLE_SECTIONS:
        lines.append(f"{title}:")
        lines.append("")
        for role in roles:
            color = assignment[role]
            marker = " (fallback)" if assignment.is_fallback(role) else ""
            slot = ansi_index(role)
            if slot is not None:
                marker = f" (ANSI {slot})" + marker
            lines.append(f"[{_role_title(role)}] {color_name(color)}{marker}")
            lines.append(f"  Hex: {color.hex} | RGB: {color.rgb} | "
                         f"HSL: ({color.hue:.0f}, {color.saturation * 100:.0f}%, {color.lightness * 100:.0f}%)")
            if role == Role.BACKGROUND:
                lines.append(f"  Coverage: {_percent(result.pool.weight(color))}")
            else:
                ratio = contrast_ratio(color, background)
                lines.append(f"  Coverage: {_percent(result.pool.weight(color))} | "
                             f"Contrast: {ratio:.1f}:1 (WCAG {wcag_level(ratio)})")
        lines.append("")

    # Statistics
    lightness = stats.lightness_histogram
    lines.append("STATISTICS:")
    lines.append("")
    lines.append("  Lightness: " + " / ".join(
        f"{label} {_percent(sum(w for _, w in result.groupings.by_lightness[label]))}" for label in LIGHTNESS_LABELS))
    lines.append("  Saturation: " + " / ".join(
        f"{label} {_percent(stats.saturation_fractions[label])}" for label in SATURATION_LABELS))
    hues = [h for h in (stats.primary_hue, stats.secondary_hue, stats.tertiary_hue) if h is not None]
    if hues:
        lines.append("  Leading hues: " + ", ".join(f"{h:.0f}°" for h in hues))
    lines.append(f"  Hue entropy: {stats.hue_entropy:.2f} | Contrast range: {stats.contrast_range:.2f} | "
                 f"Lightness spread: {stats.lightness_spread:.2f}")
    lines.append(f"  Darkest tenth: {_percent(lightness[0])} | Lightest tenth: {_percent(lightness[-1])}")

    return "\n".join(lines)


def text_color_for_background(color: Color) -> str:
    """Return black or white text color based on background lightness."""
    return "#000" if color.lightness > 0.5 else "#fff"


def render_html(result: ExtractionResult, image_path: Optional[str] = None) -> str:
    """Render the extraction result as an HTML swatch report."""
    safe_path = escape(image_path or result.source or "pixels")
    profile = result.profile
    assignment = result.assignment
    background = result.background
    foreground = assignment[Role.FOREGROUND]

    css = """
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body {
            font-family: system-ui, -apple-system, sans-serif;
            background: #f5f5f5;
            color: #333;
            line-height: 1.5;
            padding: 2rem;
            max-width: 900px;
            margin: 0 auto;
        }
        h1 { font-size: 1.5rem; margin-bottom: 0.5rem; }
        h2 { font-size: 1.2rem; margin: 2rem 0 1rem; border-bottom: 1px solid #ddd; padding-bottom: 0.5rem; }
        .meta { color: #666; font-size: 0.9rem; margin-bottom: 1rem; }
        .palette-strip {
            display: flex;
            height: 60px;
            border-radius: 8px;
            overflow: hidden;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            margin: 1.5rem 0;
        }
        .palette-strip .swatch {
            display: flex;
            align-items: flex-end;
            justify-content: center;
            padding: 0.4rem;
            font-size: 0.65rem;
        }
        .terminal {
            font-family: monospace;
            padding: 1rem;
            border-radius: 8px;
            font-size: 0.9rem;
            box-shadow: 0 2px 8px rgba(0,0,0,0.15);
        }
        .terminal span { margin-right: 0.75rem; }
        .role-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 0.75rem; }
        .role-card {
            background: #fff;
            border-radius: 8px;
            padding: 0.75rem;
            box-shadow: 0 1px 3px rgba(0,0,0,0.08);
            display: grid;
            grid-template-columns: 48px 1fr;
            gap: 0.75rem;
        }
        .role-card .swatch { width: 48px; height: 48px; border-radius: 6px; }
        .role-card .role { font-weight: 600; }
        .role-card .name { color: #666; font-size: 0.85rem; }
        .role-card .values { font-family: monospace; color: #555; font-size: 0.75rem; }
        .fallback { color: #b45309; font-size: 0.7rem; font-weight: 600; margin-left: 0.25rem; }
        .contrast-badge {
            display: inline-block;
            padding: 0.1rem 0.35rem;
            border-radius: 4px;
            font-size: 0.7rem;
            font-weight: 600;
            margin-left: 0.35rem;
        }
        .badge-aaa { background: #22c55e; color: #fff; }
        .badge-aa { background: #3b82f6; color: #fff; }
        .badge-aa-large { background: #f59e0b; color: #fff; }
        .badge-fail { background: #ef4444; color: #fff; }
        .stats { font-size: 0.9rem; color: #555; }
        .stats td { padding: 0.15rem 1rem 0.15rem 0; }
    """

    lines = [
        '<!DOCTYPE html>',
        '<html lang="en">',
        '<head>',
        '  <meta charset="UTF-8">',
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">',
        f'  <title>Theme profile: {safe_path}</title>',
        f'  <style>{css}</style>',
        '</head>',
        '<body>',
    ]

    # Header
    lines.append(f'<h1>{profile.mode.value} {profile.classification}</h1>')
    lines.append(f'<p class="meta">{escape(describe_scheme(profile))}</p>')
    lines.append(f'<p class="meta">Source: {safe_path}</p>')
    lines.append(f'<p class="meta">Average lightness {profile.average_luminance:.2f} · '
                 f'Average saturation {profile.average_saturation:.2f} · '
                 f'{len(result.pool):,} unique colors</p>')

    # Dominant colors
    lines.append('<div class="palette-strip">')
    dominant = result.pool.dominant(PALETTE_STRIP_COLORS)
    total_weight = sum(count for _, count in dominant) or 1
    for color, count in dominant:
        width_pct = max(4, count / total_weight * 100)  # min 4% for visibility
        lines.append(f'  <div class="swatch" style="background:{color.hex}; '
                     f'color:{text_color_for_background(color)}; flex:{width_pct:.1f}">{color.hex}</div>')
    lines.append('</div>')

    # Terminal preview
    lines.append('<h2>Terminal</h2>')
    lines.append(f'<div class="terminal" style="background:{background.hex}; color:{foreground.hex}">')
    for row in (TERMINAL_ROLES[:8], TERMINAL_ROLES[8:]):
        spans = ''.join(f'<span style="color:{assignment[role].hex}">{escape(_role_title(role))}</span>'
                        for role in row)
        lines.append(f'  <div>{spans}</div>')
    lines.append(f'  <div>$ theme-profile <span style="color:{assignment[Role.ACCENT_PRIMARY].hex}">--input</span> '
                 f'<span style="color:{assignment[Role.DIM_FOREGROUND].hex}">{safe_path}</span></div>')
    lines.append('</div>')

    # Role cards
    for title, roles in ROLE_SECTIONS:
        lines.append(f'<h2>{title.title()}</h2>')
        lines.append('<div class="role-grid">')
        for role in roles:
            color = assignment[role]
            lines.append('<div class="role-card">')
            lines.append(f'  <div class="swatch" style="background:{color.hex}"></div>')
            lines.append('  <div>')
            fallback = '<span class="fallback">fallback</span>' if assignment.is_fallback(role) else ''
            lines.append(f'    <span class="role">{_role_title(role)}</span>{fallback}')
            lines.append(f'    <div class="name">{color_name(color)}</div>')
            if role == Role.BACKGROUND:
                lines.append(f'    <div class="values">{color.hex} · {_percent(result.pool.weight(color))}</div>')
            else:
                ratio = contrast_ratio(color, background)
                level = wcag_level(ratio)
                badge_class = {
                    'AAA': 'badge-aaa',
                    'AA': 'badge-aa',
                    'AA-large': 'badge-aa-large',
                }.get(level, 'badge-fail')
                lines.append(f'    <div class="values">{color.hex} · {ratio:.1f}:1'
                             f'<span class="contrast-badge {badge_class}">{level}</span></div>')
            lines.append('  </div>')
            lines.append('</div>')
        lines.append('</div>')

    # Statistics
    stats = result.groupings.statistics
    lines.append('<h2>Statistics</h2>')
    lines.append('<table class="stats">')
    lines.append(f'  <tr><td>Dominant hue</td><td>{profile.dominant_hue:.0f}° ±{profile.hue_variance:.0f}°</td></tr>')
    lines.append(f'  <tr><td>Chromatic pixels</td><td>{_percent(profile.chromatic_fraction)}</td></tr>')
    lines.append(f'  <tr><td>Chromatic diversity</td><td>{result.groupings.chromatic_diversity:.2f}</td></tr>')
    lines.append(f'  <tr><td>Hue entropy</td><td>{stats.hue_entropy:.2f}</td></tr>')
    lines.append(f'  <tr><td>Contrast range</td><td>{stats.contrast_range:.2f}</td></tr>')
    lines.append(f'  <tr><td>Lightness spread</td><td>{stats.lightness_spread:.2f}</td></tr>')
    lines.append(f'  <tr><td>Saturation spread</td><td>{stats.saturation_spread:.2f}</td></tr>')
    lines.append('</table>')

    lines.append('</body>')
    lines.append('</html>')

    return '\n'.join(lines)


def result_document(result: ExtractionResult) -> dict:
    profile = result.profile
    groupings = result.groupings
    stats = groupings.statistics
    return {
        'source': result.source,
        'mode': profile.mode.value,
        'classification': profile.classification,
        'profile': {
            'is_grayscale': profile.is_grayscale,
            'is_monochromatic': profile.is_monochromatic,
            'dominant_hue': round(profile.dominant_hue, 2),
            'hue_variance': round(profile.hue_variance, 2),
            'average_luminance': round(profile.average_luminance, 4),
            'average_saturation': round(profile.average_saturation, 4),
            'chromatic_fraction': round(profile.chromatic_fraction, 4),
        },
        'pool': {
            'total_pixels': result.pool.total_pixels,
            'unique_colors': len(result.pool),
            'quantization_bits': result.pool.quantization_bits,
        },
        'statistics': {
            'chromatic_diversity': round(groupings.chromatic_diversity, 4),
            'hue_histogram': [round(v, 4) for v in stats.hue_histogram],
            'lightness_histogram': [round(v, 4) for v in stats.lightness_histogram],
            'saturation_fractions': {k: round(v, 4) for k, v in stats.saturation_fractions.items()},
            'primary_hue': stats.primary_hue,
            'secondary_hue': stats.secondary_hue,
            'tertiary_hue': stats.tertiary_hue,
            'hue_entropy': round(stats.hue_entropy, 4),
            'contrast_range': round(stats.contrast_range, 4),
            'lightness_spread': round(stats.lightness_spread, 4),
            'saturation_spread': stats.saturation_spread,
        },
        'roles': result.assignment.to_hex_dict(),
        'fallback_roles': sorted(role.value for role in result.assignment.fallbacks),
    }


def render_json(result: ExtractionResult) -> str:
    return json.dumps(result_document(result), indent=2)


# =============================================================================
# CLI
# =============================================================================

def _write(path: Path, text: str) -> bool:
    try:
        path.write_text(text)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return False
    print(f"\nWrote: {path}")
    return True


def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description='Extract a theme color profile from an image.'
    )
    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the image file'
    )
    parser.add_argument(
        '--output', '-o',
        nargs='?',
        const=True,
        default=None,
        help='Write HTML report. Optionally specify path, otherwise auto-names from input.'
    )
    parser.add_argument(
        '--json', '-j',
        dest='json_path',
        default=None,
        help='Write the profile and role palette as JSON to this path'
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Settings JSON file (defaults to $THEME_PROFILE_CONFIG or the XDG config dir)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log per-stage details'
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    image_path = Path(args.input)

    try:
        settings = load_settings(args.config)
        result = analyze_image(image_path, settings)
    except ThemeProfileError as e:
        logger.debug(e.technical_message)
        print(f"Error: {e.get_full_message()}", file=sys.stderr)
        return 1

    # Always print prose to terminal
    print(render(result))

    if args.output:
        if args.output is True:
            output_path = image_path.with_name(f"{image_path.stem}-theme.html")
        else:
            output_path = Path(args.output)
        if not _write(output_path, render_html(result, str(image_path))):
            return 1

    if args.json_path:
        if not _write(Path(args.json_path), render_json(result)):
            return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
