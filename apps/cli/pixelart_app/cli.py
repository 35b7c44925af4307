"""CLI entrypoints for encoding, rendering, and previewing pixel art."""

from __future__ import annotations

import argparse
import json
import random
from pathlib import Path

from pixelart_core import load_config
from pixelart_core.config import AppConfig
from pixelart_core.logging_setup import configure_logging, get_logger
from pixelart_pipeline import (
    MAX_LEVELS,
    PixelArtError,
    Palette,
    decode,
    encode,
    get_theme,
    image_to_intensity_grid,
    image_to_palette_art,
    list_themes,
    load_bitmap,
)
from pixelart_renderer import (
    COLORIZERS,
    GridRenderer,
    ImageSurface,
    SlideDelay,
    Slideshow,
    VirtualScheduler,
    frames_from_artifacts,
    render_svg,
    render_to_image,
)


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _palette(cfg: AppConfig, theme: str | None) -> Palette:
    return get_theme(theme or cfg.palette.theme).with_overrides(cfg.palette.overrides)


def _read_artifact(path: str) -> str:
    return Path(path).read_text(encoding="utf-8").strip()


def _level_count(text: str) -> int:
    value = int(text)
    if not 1 <= value <= MAX_LEVELS:
        raise argparse.ArgumentTypeError(f"levels must be in 1..{MAX_LEVELS}")
    return value


def cmd_encode(args: argparse.Namespace) -> int:
    cfg = load_config()
    size = args.size or cfg.grid.size
    levels = args.levels or cfg.grid.levels

    grid = image_to_intensity_grid(load_bitmap(Path(args.image)), size=size, levels=levels)
    artifact = encode(grid)
    if args.out:
        Path(args.out).write_text(artifact, encoding="utf-8")

    _print_json(
        {
            "success": True,
            "size": grid.size,
            "levels": grid.levels,
            "artifact": None if args.out else artifact,
            "out": args.out,
        }
    )
    return 0


def cmd_render(args: argparse.Namespace) -> int:
    cfg = load_config()
    grid = decode(_read_artifact(args.artifact), levels=cfg.grid.levels, default_size=cfg.grid.size)
    width = args.width or cfg.render.display_width
    height = args.height or cfg.render.display_height
    image = render_to_image(grid, _palette(cfg, args.theme), width, height, args.colorizer or cfg.render.colorizer)
    image.save(args.out, format="PNG")
    _print_json({"success": True, "out": args.out, "grid_size": grid.size, "exact": grid.is_exact})
    return 0


def cmd_svg(args: argparse.Namespace) -> int:
    cfg = load_config()
    grid = decode(_read_artifact(args.artifact), levels=cfg.grid.levels, default_size=cfg.grid.size)
    svg = render_svg(grid, _palette(cfg, args.theme), pixel_size=args.pixel_size)
    Path(args.out).write_text(svg, encoding="utf-8")
    _print_json({"success": True, "out": args.out, "grid_size": grid.size})
    return 0


def cmd_pixelate(args: argparse.Namespace) -> int:
    cfg = load_config()
    width = args.width or cfg.render.display_width
    height = args.height or cfg.render.display_height
    image = image_to_palette_art(
        load_bitmap(Path(args.image)),
        _palette(cfg, args.theme),
        width,
        height,
        pixel_size=args.pixel_size or cfg.render.pixel_size,
    )
    image.save(args.out, format="PNG")
    _print_json({"success": True, "out": args.out, "width": width, "height": height})
    return 0


def cmd_themes(_args: argparse.Namespace) -> int:
    _print_json(list_themes())
    return 0


def cmd_slideshow(args: argparse.Namespace) -> int:
    cfg = load_config()
    texts = [_read_artifact(p) for p in (args.artifacts or cfg.slideshow.artifacts)]
    frames = frames_from_artifacts(texts, levels=cfg.grid.levels, default_size=cfg.grid.size)
    width = args.width or cfg.render.display_width

    scheduler = VirtualScheduler()
    surface = ImageSurface(width, width)
    show = Slideshow(
        GridRenderer(cfg.render.colorizer),
        surface,
        scheduler,
        rng=random.Random(args.seed),
        delays=SlideDelay(cfg.slideshow.min_delay_ms, cfg.slideshow.max_delay_ms),
    )
    out_dir = Path(args.out_dir) if args.out_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    written: list[str] = []

    def _dump() -> None:
        if out_dir is None:
            return
        path = out_dir / f"frame-{len(written):04d}-{show.current_index}.png"
        surface.snapshot().save(path, format="PNG")
        written.append(str(path))

    show.attach(frames, _palette(cfg, args.theme), width, width, transition=cfg.slideshow.transition)
    if show.is_active:
        _dump()
    elapsed = 0
    total = int(args.seconds * 1000)
    while elapsed < total:
        step = min(100, total - elapsed)
        seen = len(show.visited)
        scheduler.advance(step)
        elapsed += step
        if len(show.visited) != seen:
            _dump()
    show.detach()

    _print_json(
        {
            "success": True,
            "frames": len(frames),
            "visited": show.visited,
            "delays_ms": [round(d, 1) for d in show.delay_history],
            "transition": show.transition,
            "written": written,
        }
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pixelart", description="Photo to palette pixel-art tools")
    sub = parser.add_subparsers(dest="command", required=True)

    enc_cmd = sub.add_parser("encode", help="Convert an image into an intensity-grid artifact")
    enc_cmd.add_argument("image")
    enc_cmd.add_argument("--size", type=int, default=None, help="Grid resolution (default from config)")
    enc_cmd.add_argument("--levels", type=_level_count, default=None, help="Quantization levels (default from config)")
    enc_cmd.add_argument("--out", default=None, help="Write the artifact text to this file")
    enc_cmd.set_defaults(func=cmd_encode)

    render_cmd = sub.add_parser("render", help="Render an artifact to PNG with a palette")
    render_cmd.add_argument("artifact", help="File holding artifact text")
    render_cmd.add_argument("--out", required=True)
    render_cmd.add_argument("--theme", default=None)
    render_cmd.add_argument("--width", type=int, default=None)
    render_cmd.add_argument("--height", type=int, default=None)
    render_cmd.add_argument("--colorizer", choices=list(COLORIZERS), default=None)
    render_cmd.set_defaults(func=cmd_render)

    svg_cmd = sub.add_parser("svg", help="Render an artifact to SVG")
    svg_cmd.add_argument("artifact")
    svg_cmd.add_argument("--out", required=True)
    svg_cmd.add_argument("--theme", default=None)
    svg_cmd.add_argument("--pixel-size", type=int, default=1)
    svg_cmd.set_defaults(func=cmd_svg)

    pix_cmd = sub.add_parser("pixelate", help="Nearest-palette-color pixel art for a display slot")
    pix_cmd.add_argument("image")
    pix_cmd.add_argument("--out", required=True)
    pix_cmd.add_argument("--width", type=int, default=None)
    pix_cmd.add_argument("--height", type=int, default=None)
    pix_cmd.add_argument("--pixel-size", type=int, default=None)
    pix_cmd.add_argument("--theme", default=None)
    pix_cmd.set_defaults(func=cmd_pixelate)

    themes_cmd = sub.add_parser("themes", help="List built-in palettes")
    themes_cmd.set_defaults(func=cmd_themes)

    show_cmd = sub.add_parser("slideshow", help="Run a slideshow on a simulated clock")
    show_cmd.add_argument("artifacts", nargs="*", help="Artifact files (default from config)")
    show_cmd.add_argument("--seconds", type=float, default=20.0)
    show_cmd.add_argument("--width", type=int, default=None)
    show_cmd.add_argument("--theme", default=None)
    show_cmd.add_argument("--seed", type=int, default=None)
    show_cmd.add_argument("--out-dir", default=None, help="Write every shown frame as PNG")
    show_cmd.set_defaults(func=cmd_slideshow)

    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging(keep_files=load_config().diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return int(args.func(args))
    except PixelArtError as exc:
        get_logger().error(f"{args.command} failed: {exc}", extra={"event": "command_failed"})
        _print_json({"success": False, "command": args.command, "error": str(exc), "type": type(exc).__name__})
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
