from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--width", "180", "--height", "120", "--frames", "8", "--frame-interval", "200"]


@dataclass
class Expected:
    path: Path
    is_dir: bool = False


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]

    def full_args(self) -> list[str]:
        return [sys.executable, "explore.py", *self.args]


def image_example(name: str, filename: str, *extra: str) -> Example:
    target = EXAMPLES_ROOT / name / filename
    return Example(name, [*BASE_ARGS, "--mode", "image", *extra, "--output", str(target)], [Expected(target)])


EXAMPLES: list[Example] = [
    image_example("size", "wide.png", "--width", "240"),
    image_example("frames", "long-run.png", "--frames", "30"),
    image_example("frame-interval", "coarse-steps.png", "--frame-interval", "500"),
    image_example("start-time", "late-start.png", "--start-time", "4000"),
    image_example("drag", "seahorse-valley.png", "--drag", "40", "60", "70", "60"),
    image_example("drag-twice", "nested.png", "--drag", "40", "60", "70", "60", "--drag", "60", "60", "120", "60"),
    image_example("freeze", "restarted.png", "--start-time", "4000", "--freeze"),
    image_example("reset", "back-home.png", "--drag", "40", "60", "70", "60", "--reset"),
    image_example("show-selection", "overlay.png", "--show-selection", "30", "90", "120", "90"),
    image_example("colormap", "magma.png", "--colormap", "magma"),
    image_example("format", "custom.webp", "--format", "webp"),
    image_example("workers", "single-process.png", "--workers", "1"),
    image_example("verbose", "diagnostic.png", "--verbose"),
    Example(
        name="gif",
        args=[*BASE_ARGS, "--mode", "gif", "--output", str(EXAMPLES_ROOT / "gif" / "growing-detail.gif")],
        expected=[Expected(EXAMPLES_ROOT / "gif" / "growing-detail.gif")],
    ),
    Example(
        name="frame-dir",
        args=[*BASE_ARGS, "--mode", "frames", "--frame-dir", str(EXAMPLES_ROOT / "frame-dir" / "frames")],
        expected=[Expected(EXAMPLES_ROOT / "frame-dir" / "frames", is_dir=True)],
    ),
    Example(
        name="gif-and-image",
        args=[*BASE_ARGS, "--mode", "gif", "--mode", "image", "--output", str(EXAMPLES_ROOT / "gif-and-image")],
        expected=[
            Expected(EXAMPLES_ROOT / "gif-and-image" / "movie.gif"),
            Expected(EXAMPLES_ROOT / "gif-and-image" / "frame_final.png"),
        ],
    ),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.is_dir():
            shutil.rmtree(path)
        elif path.exists():
            path.unlink()


def _verify(example: Example) -> None:
    for expected in example.expected:
        if expected.is_dir:
            if not expected.path.is_dir() or not any(expected.path.iterdir()):
                raise RuntimeError(f"Expected non-empty directory {expected.path}")
        elif not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _ensure_clean([EXAMPLES_ROOT / example.name])
        subprocess.run(example.full_args(), check=True)
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
