import PIL.Image
import pytest

import explore


def parse(*args):
    parser = explore.build_parser()
    return parser, parser.parse_args(list(args))


def test_default_output_is_a_gif(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    parser, opt = parse()
    config = explore.resolve_output_config(opt, parser)
    assert config.modes == ("gif",)
    assert config.gif_path == (tmp_path / "movie.gif").resolve()
    assert config.image_path is None


def test_image_extension_must_match_format():
    parser, opt = parse("--mode", "image", "--output", "out.jpg")
    with pytest.raises(SystemExit):
        explore.resolve_output_config(opt, parser)


def test_frame_dir_requires_frames_mode():
    parser, opt = parse("--frame-dir", "somewhere")
    with pytest.raises(SystemExit):
        explore.resolve_output_config(opt, parser)


def test_unknown_mode_is_rejected():
    parser, opt = parse("--mode", "mono")
    with pytest.raises(SystemExit):
        explore.resolve_output_config(opt, parser)


def test_script_actions_keep_command_line_order():
    _, opt = parse("--drag", "1", "2", "3", "4", "--freeze", "--reset", "--drag", "5", "6", "7", "8")
    assert [kind for kind, _ in opt.actions] == ["drag", "freeze", "reset", "drag"]
    assert opt.actions[0][1] == [1.0, 2.0, 3.0, 4.0]


def test_gif_and_image_end_to_end(tmp_path):
    explore.main([
        "--width", "16", "--height", "12",
        "--frames", "3", "--frame-interval", "100",
        "--workers", "1",
        "--drag", "4", "8", "12", "8",
        "--mode", "gif", "--mode", "image",
        "--output", str(tmp_path),
    ])
    assert (tmp_path / "movie.gif").is_file()
    with PIL.Image.open(tmp_path / "frame_final.png") as image:
        assert image.size == (16, 12)


def test_wide_image_with_drag(tmp_path):
    explore.main([
        "--width", "2100", "--height", "2",
        "--frames", "1", "--workers", "1",
        "--drag", "2000", "1", "2090", "1",
        "--mode", "image",
        "--output", str(tmp_path / "wide.png"),
    ])
    with PIL.Image.open(tmp_path / "wide.png") as image:
        assert image.size == (2100, 2)


def test_frame_sequence_with_selection_overlay(tmp_path):
    frame_dir = tmp_path / "frames"
    explore.main([
        "--width", "20", "--height", "10",
        "--frames", "2", "--workers", "1",
        "--show-selection", "2", "8", "10", "8",
        "--colormap", "magma",
        "--mode", "frames", "--frame-dir", str(frame_dir),
    ])
    frames = sorted(frame_dir.iterdir())
    assert [path.name for path in frames] == ["frame000.png", "frame001.png"]
    with PIL.Image.open(frames[-1]) as image:
        assert image.convert("RGB").getpixel((5, 8)) == (0, 255, 0)


def test_unknown_colormap_is_a_usage_error(tmp_path):
    with pytest.raises(SystemExit):
        explore.main(["--colormap", "not-a-map", "--output", str(tmp_path / "x.gif"), "--frames", "0"])
