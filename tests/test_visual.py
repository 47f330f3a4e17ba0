import numpy as np
import pytest

from core.models import VideoGeometry
from core.visual import CanvasSurface, OverlayStyle, hex_to_bgr, project_detections
from conftest import make_detection


def geo(iw, ih, dw, dh):
    return VideoGeometry(intrinsic_width=iw, intrinsic_height=ih, display_width=dw, display_height=dh)


def test_hex_to_bgr():
    assert hex_to_bgr("#00FFFF") == (255, 255, 0)
    assert hex_to_bgr("000000") == (0, 0, 0)
    with pytest.raises(ValueError):
        hex_to_bgr("#FFF")


def test_projection_call_sequence(recording_surface):
    dets = [
        make_detection("person", 0.9, (100, 100, 200, 100)),
        make_detection("cat", 0.3, (0, 0, 10, 10)),        # at threshold -> dropped
        make_detection("dog", 0.30001, (200, 0, 40, 20)),
    ]
    t = project_detections(recording_surface, geo(1280, 720, 640, 480), dets, OverlayStyle())
    assert t.offset_y == 60

    assert recording_surface.names() == [
        "resize", "clear",
        "stroke_rect", "fill_rect", "draw_text",
        "stroke_rect", "fill_rect", "draw_text",
    ]
    calls = recording_surface.calls
    assert calls[0] == ("resize", 640, 480)
    assert calls[2] == ("stroke_rect", 50.0, 110.0, 100.0, 50.0, "#00FFFF", 3)
    label = "person 90.0%"
    assert calls[3] == ("fill_rect", 50.0, 110.0, 8.0 * len(label) + 4, 20, "#00FFFF")
    assert calls[4] == ("draw_text", label, 50.0, 110.0, "#000000", 16)
    # model order preserved
    assert calls[7][1].startswith("dog ")


def test_projection_skips_empty_display(recording_surface):
    t = project_detections(recording_surface, geo(640, 480, 640, 0), [make_detection()])
    assert t is None
    assert recording_surface.names() == ["resize"]


def test_custom_style(recording_surface):
    style = OverlayStyle(threshold=0.95, box_color="#FF0000", stroke_width=1, padding=0, font_px=10)
    project_detections(recording_surface, geo(640, 480, 640, 480),
                       [make_detection("a", 0.9), make_detection("b", 0.96)], style)
    strokes = [c for c in recording_surface.calls if c[0] == "stroke_rect"]
    assert len(strokes) == 1
    assert strokes[0][5:] == ("#FF0000", 1)


def test_canvas_resize_and_clear():
    s = CanvasSurface()
    assert (s.width, s.height) == (0, 0)
    s.resize(64, 48)
    assert s.canvas.shape == (48, 64, 4)
    s.fill_rect(0, 0, 10, 10, "#FFFFFF")
    assert s.canvas[..., 3].any()
    s.clear()
    assert not s.canvas.any()


def test_canvas_stroke_and_fill_pixels():
    s = CanvasSurface(100, 100)
    s.stroke_rect(10, 10, 40, 40, "#00FFFF", 3)
    assert tuple(s.canvas[25, 10]) == (255, 255, 0, 255)   # left edge
    assert s.canvas[30, 30, 3] == 0                         # interior untouched
    s.fill_rect(60, 60, 20, 20, "#FF0000")
    assert tuple(s.canvas[70, 70]) == (0, 0, 255, 255)


def test_canvas_text():
    s = CanvasSurface(200, 50)
    short, long = s.measure_text("cat", 16), s.measure_text("cat 99.9%", 16)
    assert 0 < short < long
    s.draw_text("cat 99.9%", 5, 5, "#FFFFFF", 16)
    painted_rows = np.nonzero(s.canvas[..., 3].any(axis=1))[0]
    assert painted_rows.size > 0
    assert painted_rows.min() >= 3
    assert painted_rows.max() <= 5 + 16 + 4


def test_composite():
    s = CanvasSurface(20, 20)
    s.fill_rect(5, 5, 5, 5, "#00FFFF")
    frame = np.full((20, 20, 3), 50, dtype=np.uint8)
    out = s.composite(frame)
    assert tuple(out[7, 7]) == (255, 255, 0)
    assert tuple(out[0, 0]) == (50, 50, 50)
    with pytest.raises(ValueError):
        s.composite(np.zeros((10, 10, 3), dtype=np.uint8))


def test_no_accumulation_across_frames():
    s = CanvasSurface()
    g = geo(640, 480, 640, 480)
    project_detections(s, g, [make_detection()])
    assert s.canvas[..., 3].any()
    project_detections(s, g, [])
    assert not s.canvas.any()


def test_fill_rect_covers_exact_size():
    s = CanvasSurface(40, 40)
    s.fill_rect(5, 6, 10, 4, "#FFFFFF")
    rows, cols = np.nonzero(s.canvas[..., 3])
    assert (rows.min(), rows.max()) == (6, 9)
    assert (cols.min(), cols.max()) == (5, 14)
    s.clear()
    s.fill_rect(5, 5, 0, 4, "#FFFFFF")
    assert not s.canvas.any()
