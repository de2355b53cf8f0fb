import argparse
import sys
import time
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

VERBOSE = any(arg in {"--verbose", "-v"} for arg in sys.argv[1:])


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import numpy as np
import PIL.Image
import imageio
import matplotlib

from mandelzoom import (
    Button,
    ExplorerConfig,
    ExplorerSession,
    Key,
    KeyPress,
    Move,
    PillowSurface,
    Press,
    Release,
    SurfaceExtent,
)
from mandelzoom.config import DEFAULT_HEIGHT, DEFAULT_WIDTH, workers_from_env


def get_colormap(name):
    if name is None:
        return None
    return matplotlib.colormaps[name]


@dataclass
class OutputConfig:
    modes: tuple[str, ...]
    gif_path: Path | None
    image_path: Path | None
    frame_dir: Path | None
    image_format: str


class ScriptAction(argparse.Action):
    """Collect scripted interactions in command-line order."""

    def __call__(self, parser, namespace, values, option_string=None):
        actions = list(getattr(namespace, self.dest, None) or [])
        actions.append((self.const, values))
        setattr(namespace, self.dest, actions)


def build_parser():
    parser = argparse.ArgumentParser(
        description="Replay a zoom session over the Mandelbrot set and record the frames.",
    )

    parser.add_argument('--width', type=int, default=DEFAULT_WIDTH,
                        help='width of the rendering surface in pixels', metavar='WIDTH')
    parser.add_argument('--height', type=int, default=DEFAULT_HEIGHT,
                        help='height of the rendering surface in pixels', metavar='HEIGHT')

    parser.add_argument('--frames', type=int, default=40,
                        help='number of frames to record', metavar='FRAMES')
    parser.add_argument('--frame-interval', type=int, dest='frame_interval', default=250,
                        help='simulated milliseconds between recorded frames', metavar='MILLIS')
    parser.add_argument('--start-time', type=int, dest='start_time', default=0,
                        help='simulated clock reading when the script is applied', metavar='MILLIS')

    parser.add_argument('--drag', dest='actions', action=ScriptAction, const='drag', nargs=4, type=float,
                        metavar=('X0', 'Y0', 'X1', 'Y1'),
                        help='left-drag from (X0, Y0) to (X1, Y1) and release. May be repeated.')
    parser.add_argument('--freeze', dest='actions', action=ScriptAction, const='freeze', nargs=0,
                        help='press R: restart the iteration budget from its minimum')
    parser.add_argument('--reset', dest='actions', action=ScriptAction, const='reset', nargs=0,
                        help='right-click: restore the default view and restart the budget')
    parser.add_argument('--show-selection', dest='show_selection', nargs=4, type=float,
                        metavar=('X0', 'Y0', 'X1', 'Y1'),
                        help='leave a drag open while recording so the selection overlay is drawn')

    parser.add_argument('--mode', dest='modes', action='append', metavar='MODE',
                        help='Output modes to generate. May be repeated. Choices: gif, image, frames.')
    parser.add_argument('--output', dest='output', type=str,
                        help='Destination for single-file outputs (gif/image) or container directory when both are requested.')
    parser.add_argument('--frame-dir', dest='frame_dir', type=str,
                        help='Directory in which to store the frame sequence.')
    parser.add_argument('--format', type=str, dest='format', default='png', metavar='FORMAT',
                        help='file format for image-based outputs. Can be any extension supported by Pillow. Default: "png".')
    parser.add_argument('--colormap', type=str, dest='colormap', default=None, metavar='COLORMAP',
                        help='matplotlib colormap applied to the grayscale frames (e.g. "magma")')

    parser.add_argument('--workers', type=int, default=None, metavar='WORKERS',
                        help='processes used per frame. Defaults to $MANDELZOOM_WORKERS or the CPU count.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging.')

    return parser


def resolve_output_config(opt, parser: argparse.ArgumentParser) -> OutputConfig:
    valid_modes = {"gif", "image", "frames"}
    modes = list(opt.modes or []) or ["gif"]

    normalized_modes: list[str] = []
    for mode in modes:
        if mode not in valid_modes:
            parser.error(f"Unknown output mode '{mode}'. Valid choices: {', '.join(sorted(valid_modes))}.")
        if mode not in normalized_modes:
            normalized_modes.append(mode)
    modes_tuple = tuple(normalized_modes)

    frame_dir_path: Path | None = None
    if "frames" in modes_tuple:
        frame_dir_path = Path(opt.frame_dir or "./frames").expanduser().resolve()
    elif opt.frame_dir is not None:
        parser.error("--frame-dir is only valid with the frames mode.")

    image_format = (opt.format or "png").lower().lstrip(".") or "png"

    file_modes = [mode for mode in modes_tuple if mode in {"gif", "image"}]
    gif_path: Path | None = None
    image_path: Path | None = None

    if not file_modes:
        if opt.output:
            parser.error("--output is only valid when gif or image modes are requested.")
    elif len(file_modes) == 1:
        output_path = Path(opt.output).expanduser() if opt.output else None
        if output_path is not None and output_path.is_dir():
            parser.error("--output must point to a file, not a directory, when a single file mode is active.")
        if file_modes[0] == "gif":
            output_path = output_path or Path("movie.gif")
            if output_path.suffix and output_path.suffix.lower() != ".gif":
                parser.error("GIF outputs must end with .gif.")
            gif_path = output_path.with_suffix(".gif").resolve()
        else:
            expected_suffix = f".{image_format}"
            output_path = output_path or Path(f"frame_final{expected_suffix}")
            if output_path.suffix and output_path.suffix.lower() != expected_suffix:
                parser.error(f"--output extension {output_path.suffix} does not match --format {image_format}.")
            image_path = output_path.with_suffix(expected_suffix).resolve()
    else:
        base_dir = Path(opt.output).expanduser() if opt.output else Path.cwd()
        if base_dir.exists() and not base_dir.is_dir():
            parser.error("--output must be a directory when both gif and image modes are active.")
        gif_path = (base_dir / "movie.gif").resolve()
        image_path = (base_dir / f"frame_final.{image_format}").resolve()

    return OutputConfig(
        modes=modes_tuple,
        gif_path=gif_path,
        image_path=image_path,
        frame_dir=frame_dir_path,
        image_format=image_format,
    )


def _pil_format_name(ext: str) -> str:
    upper = ext.upper()
    if upper == "JPG":
        return "JPEG"
    if upper == "TIF":
        return "TIFF"
    return upper


def write_single_image(image: PIL.Image.Image, output_path: Path, image_format: str) -> None:
    """Write a single image to ``output_path`` using the provided format."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image.save(str(output_path), format=_pil_format_name(image_format))


def write_frame_sequence(image: PIL.Image.Image, frame_dir: Path, index: int, digits: int, image_format: str) -> Path:
    """Persist a frame in a numbered sequence inside ``frame_dir``."""

    frame_path = frame_dir / f"frame{index:0{digits}d}.{image_format}"
    frame_dir.mkdir(parents=True, exist_ok=True)
    image.save(str(frame_path), format=_pil_format_name(image_format))
    return frame_path


class OutputWriters:
    def __init__(self, config: OutputConfig, frame_digits: int, frame_interval_ms: int) -> None:
        self.config = config
        self.frame_digits = frame_digits
        self._gif_writer: Any = None
        if "gif" in config.modes and config.gif_path is not None:
            config.gif_path.parent.mkdir(parents=True, exist_ok=True)
            self._gif_writer = imageio.get_writer(
                str(config.gif_path), mode='I', duration=max(frame_interval_ms, 20) / 1000.0, loop=0,
            )

    def write(self, index: int, image: PIL.Image.Image) -> None:
        if self._gif_writer is not None:
            self._gif_writer.append_data(np.asarray(image))
        if "frames" in self.config.modes and self.config.frame_dir is not None:
            write_frame_sequence(image, self.config.frame_dir, index, self.frame_digits, self.config.image_format)

    def finalize(self, final_image: PIL.Image.Image | None) -> None:
        if "image" in self.config.modes and final_image is not None and self.config.image_path is not None:
            write_single_image(final_image, self.config.image_path, self.config.image_format)

    def close(self) -> None:
        if self._gif_writer is not None:
            self._gif_writer.close()
            self._gif_writer = None


def apply_script(session: ExplorerSession, actions) -> None:
    for kind, values in actions:
        if kind == "drag":
            x0, y0, x1, y1 = values
            rejected = session.interaction.rejected_commits
            session.handle(Press.at(x0, y0))
            session.handle(Move.at(x1, y1))
            session.handle(Release(Button.LEFT))
            if session.interaction.rejected_commits > rejected:
                log("drag from (%g, %g) to (%g, %g) was rejected, view kept" % (x0, y0, x1, y1))
        elif kind == "freeze":
            session.handle(KeyPress(Key.R))
        elif kind == "reset":
            session.handle(Release(Button.RIGHT))
        log("after %s: x=[%s, %s) y=[%s, %s)" % (
            kind,
            session.viewport.range_x.start, session.viewport.range_x.end,
            session.viewport.range_y.start, session.viewport.range_y.end,
        ))


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    if opt.width <= 0 or opt.height <= 0:
        parser.error("--width and --height must be positive.")
    if opt.frames < 0:
        parser.error("--frames must not be negative.")
    if opt.frame_interval <= 0:
        parser.error("--frame-interval must be positive.")

    output_config = resolve_output_config(opt, parser)

    try:
        workers = opt.workers if opt.workers is not None else workers_from_env()
    except ValueError as exc:
        parser.error(str(exc))
    if workers is not None and workers < 1:
        parser.error("--workers must be positive.")

    try:
        cmap = get_colormap(opt.colormap)
    except KeyError:
        parser.error(f"Unknown colormap '{opt.colormap}'.")

    if opt.frame_interval < 50:
        warnings.warn("--frame-interval below the 50 ms budget step repeats frames.", stacklevel=2)

    config = ExplorerConfig(surface=SurfaceExtent(opt.width, opt.height), workers=workers)
    surface = PillowSurface(colormap=cmap, keep=False)
    writers = OutputWriters(
        output_config,
        frame_digits=max(3, len(str(max(opt.frames - 1, 0)))),
        frame_interval_ms=opt.frame_interval,
    )

    with ExplorerSession(config) as session:
        log("surface %dx%d, %d worker(s)" % (opt.width, opt.height, session.workers))
        session.clock.tick(opt.start_time)
        apply_script(session, opt.actions or [])
        if opt.show_selection is not None:
            x0, y0, x1, y1 = opt.show_selection
            session.handle(Press.at(x0, y0))
            session.handle(Move.at(x1, y1))

        try:
            for i in range(opt.frames):
                print("frame {0} out of {1}".format(i, opt.frames), end='\r')
                elapsed = opt.start_time + i * opt.frame_interval
                started = time.perf_counter()
                frame = session.advance(elapsed)
                if frame is not None:
                    session.present(frame, surface)
                    log("frame %d: budget %d in %.1f ms" % (i, frame.budget, (time.perf_counter() - started) * 1000))
                if surface.last is not None:
                    writers.write(i, surface.last)
        finally:
            writers.close()

    writers.finalize(surface.last)


if __name__ == '__main__':
    main()
