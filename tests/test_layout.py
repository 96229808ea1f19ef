import pytest

from booth.services.layout import compute_layout, fit_ratio


def test_full_hd_kiosk_with_three_shots():
    record = compute_layout(1920, 1080, 3)

    # video column is 1344x930, so height limits it
    assert record.video_height == pytest.approx(930)
    assert record.video_width == pytest.approx(1240)
    # preview column is 568 wide, 344 tall per shot
    assert record.preview_height == pytest.approx(344)
    assert record.preview_width == pytest.approx(344 * 4 / 3)
    assert record.shot_count == 3


def test_portrait_viewport_is_width_bound():
    record = compute_layout(800, 1280, 1)
    assert record.video_width == pytest.approx(560)
    assert record.video_height == pytest.approx(420)
    assert record.preview_width == pytest.approx(232)
    assert record.preview_height == pytest.approx(174)


def test_layout_follows_shot_count():
    small = compute_layout(1920, 1080, 4)
    large = compute_layout(1920, 1080, 1)
    assert small.preview_height < large.preview_height
    assert small.video_width == large.video_width


def test_fit_ratio_handles_degenerate_area():
    assert fit_ratio(100, 0, 4 / 3) == (0.0, 0.0)
    assert fit_ratio(-5, 10, 4 / 3) == (0.0, 0.0)


@pytest.mark.parametrize("width,height,shots", [(0, 1080, 3), (1920, -1, 3), (1920, 1080, 0)])
def test_invalid_input_rejected(width, height, shots):
    with pytest.raises(ValueError):
        compute_layout(width, height, shots)
