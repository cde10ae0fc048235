"""Tests for the gesture driven transform engine."""

import math

import numpy as np
import pytest

from iCrop.core.containment import covers_crop
from iCrop.core.geometry import map_point, vector
from iCrop.core.gestures import PanDelta, ScaleRotateDelta
from iCrop.core.transform_engine import TransformEngine
from iCrop.core.transform_state import TransformState
from iCrop.settings.options import CropOptions


def _engine(image=(1000, 1000), viewport=(400.0, 400.0), **options) -> TransformEngine:
    engine = TransformEngine(CropOptions(**options))
    engine.set_image_size(*image)
    engine.set_viewport(*viewport)
    return engine


def _covered(engine: TransformEngine) -> bool:
    return covers_crop(engine.matrix, engine.image_size, engine.canvas_size())


def test_engine_is_not_ready_until_image_and_viewport_are_known():
    engine = TransformEngine(CropOptions())
    assert not engine.is_ready()
    engine.set_viewport(400.0, 400.0)
    assert not engine.is_ready()
    assert engine.state == TransformState.identity()
    engine.set_image_size(100, 50)
    assert engine.is_ready()


def test_fitted_pose_centres_square_image():
    """A 1000px square image in a 400px viewport is zoomed to fill the hole."""
    engine = _engine()
    state = engine.state
    assert state.scale == pytest.approx(1.25)
    assert state.x == pytest.approx(-125.0)
    assert state.y == pytest.approx(-125.0)
    assert state.angle == pytest.approx(0.0)
    assert engine.crop_size() == pytest.approx((320.0, 320.0))
    assert engine.canvas_size() == pytest.approx((1000.0, 1000.0))
    assert _covered(engine)


@pytest.mark.parametrize(
    "image, viewport, aspect_ratio",
    [
        ((1600, 900), (400.0, 300.0), 1.0),
        ((600, 1400), (500.0, 800.0), 1.0),
        ((1200, 800), (640.0, 480.0), 16 / 9),
        ((300, 300), (1000.0, 200.0), 0.5),
    ],
)
def test_fitted_pose_always_covers_the_crop(image, viewport, aspect_ratio):
    engine = _engine(image, viewport, aspect_ratio=aspect_ratio)
    assert _covered(engine)


def test_clear_image_resets_to_identity():
    engine = _engine()
    engine.clear_image()
    assert not engine.is_ready()
    assert engine.state == TransformState.identity()
    assert engine.correct().is_identity


def test_pan_is_converted_from_viewport_pixels():
    engine = _engine()
    start_x = engine.state.x
    engine.apply_pan(32.0, 0.0)
    # 320px crop hole over a 1000px canvas.
    assert engine.state.x == pytest.approx(start_x + 100.0)


def test_pan_past_the_edge_is_corrected_when_gesture_ends():
    engine = _engine()
    engine.set_pose(TransformState.identity())
    engine.begin_gesture()
    engine.apply(PanDelta(1000.0, 0.0))
    assert not _covered(engine)

    result = engine.end_gesture()

    assert not result.is_identity
    assert _covered(engine)
    assert engine.state.x == pytest.approx(0.0, abs=1e-6)
    assert not engine.in_gesture()


def test_correction_runs_once_per_gesture():
    engine = _engine()
    engine.set_pose(TransformState.identity())
    engine.begin_gesture()
    engine.apply(PanDelta(10.0, 0.0))
    assert engine.state.x == pytest.approx(31.25)
    engine.apply(PanDelta(10.0, 0.0))
    assert engine.state.x == pytest.approx(62.5)
    engine.end_gesture()
    assert engine.state.x == pytest.approx(0.0, abs=1e-6)


def test_scale_updates_are_relative_to_the_gesture_start():
    engine = _engine()
    start_scale = engine.state.scale
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(scale=2.0))
    engine.apply(ScaleRotateDelta(scale=2.0))
    assert engine.state.scale == pytest.approx(start_scale * 2.0)


def test_scale_keeps_the_crop_centre_fixed():
    engine = _engine()
    centre = vector(500.0, 500.0)
    before = map_point(np.linalg.inv(engine.matrix), centre)
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(scale=1.7, rotation=0.4))
    after = map_point(np.linalg.inv(engine.matrix), centre)
    np.testing.assert_allclose(after, before, atol=1e-6)


def test_scale_around_focal_point_keeps_that_point_fixed():
    engine = _engine()
    focal = (120.0, 260.0)
    canvas_point = engine.viewport_to_canvas(focal)
    before = map_point(np.linalg.inv(engine.matrix), canvas_point)
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(scale=1.5, focal_point=focal))
    after = map_point(np.linalg.inv(engine.matrix), canvas_point)
    np.testing.assert_allclose(after, before, atol=1e-6)


@pytest.mark.parametrize("factor", [0.001, 0.5, 3.0, 1000.0])
def test_scale_stays_within_configured_range(factor):
    engine = _engine(scale_range=(0.5, 4.0))
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(scale=factor))
    assert 0.5 <= engine.state.scale <= 4.0
    engine.end_gesture()
    assert 0.5 <= engine.state.scale <= 4.0


def test_gesture_rotation_is_inverted_by_default():
    engine = _engine()
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(rotation=0.2))
    assert engine.state.angle == pytest.approx(-0.2)


def test_gesture_rotation_follows_host_when_not_inverted():
    engine = _engine(invert_rotation=False)
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(rotation=0.2))
    assert engine.state.angle == pytest.approx(0.2)


def test_programmatic_rotation_is_never_inverted():
    engine = _engine()
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(rotation=0.2, from_gesture=False))
    assert engine.state.angle == pytest.approx(0.2)


@pytest.mark.parametrize("angle", [0.15, math.pi / 4, math.pi / 2, 2.5, -1.0])
def test_rotation_is_followed_by_coverage(angle):
    engine = _engine((1200, 700), (500.0, 400.0), shape="rectangle", aspect_ratio=1.5)
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(rotation=angle, from_gesture=False))
    engine.end_gesture()
    assert _covered(engine)


def test_reset_restores_fitted_pose():
    engine = _engine()
    fitted = engine.state
    engine.begin_gesture()
    engine.apply(ScaleRotateDelta(scale=2.0, rotation=0.5))
    engine.end_gesture()
    engine.reset()
    assert engine.state.is_close(fitted)


def test_set_pose_clamps_scale():
    engine = _engine()
    engine.set_pose(TransformState(scale=50.0))
    assert engine.state.scale == pytest.approx(10.0)


def test_display_matrix_maps_canvas_into_the_crop_hole():
    engine = _engine()
    display = engine.display_matrix()
    # The fitted image spans the whole 400px viewport.
    np.testing.assert_allclose(map_point(display, (0.0, 0.0)), [0.0, 0.0], atol=1e-9)
    np.testing.assert_allclose(map_point(display, (1000.0, 1000.0)), [400.0, 400.0], atol=1e-9)


def test_unknown_delta_is_rejected():
    engine = _engine()
    with pytest.raises(TypeError):
        engine.apply(object())  # type: ignore[arg-type]


def test_panorama_beyond_scale_range_is_a_fixed_point():
    """An image too thin to cover the crop at max scale settles and stays put."""
    engine = _engine((4000, 100))
    fitted = engine.state
    assert fitted.scale == pytest.approx(10.0)
    for _ in range(3):
        engine.begin_gesture()
        engine.end_gesture()
        assert engine.state.is_close(fitted)


def test_capped_correction_is_idempotent():
    engine = _engine((4000, 100))
    engine.begin_gesture()
    engine.apply(PanDelta(120.0, -80.0))
    engine.apply(ScaleRotateDelta(rotation=0.4, from_gesture=False))
    first = engine.end_gesture()
    assert first.scale_limited
    assert engine.state.scale == pytest.approx(10.0)

    settled = engine.state
    assert engine.correct().is_identity
    assert engine.state == settled


@pytest.mark.parametrize("seed", range(40))
def test_second_correction_is_a_no_op(seed):
    rng = np.random.default_rng(seed)
    width, height = (int(value) for value in rng.integers(50, 5000, size=2))
    viewport = (float(rng.integers(200, 900)), float(rng.integers(200, 900)))
    engine = _engine((width, height), viewport)

    engine.begin_gesture()
    engine.apply(
        ScaleRotateDelta(
            scale=float(rng.uniform(0.2, 5.0)),
            rotation=float(rng.uniform(-math.pi, math.pi)),
        )
    )
    engine.apply(PanDelta(float(rng.uniform(-600.0, 600.0)), float(rng.uniform(-600.0, 600.0))))
    engine.end_gesture()

    settled = engine.state
    assert engine.correct().is_identity
    assert engine.state == settled
