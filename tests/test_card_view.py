from __future__ import annotations

from unittest.mock import MagicMock

import numpy as np
import pytest

from flip3d.card_view import CardView, FlipConfig, fit_face
from flip3d.sides import Direction, Side

from conftest import FLIP_TICKS, play_flip


class TestFlipConfig:
    def test_defaults_come_from_config(self):
        from flip3d import config

        cfg = FlipConfig()
        assert cfg.duration_ms == config.FLIP_DURATION_MS
        assert cfg.front_to_back is Direction.LEFT
        assert cfg.back_to_front is Direction.RIGHT
        assert cfg.internal_padding == 0

    def test_direction_names_are_parsed(self):
        cfg = FlipConfig(front_to_back="right", back_to_front=0)
        assert cfg.direction_for(Side.FRONT) is Direction.RIGHT
        assert cfg.direction_for(Side.BACK) is Direction.LEFT

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"duration_ms": 0},
            {"internal_padding": -1},
            {"scale_mode": "stretch"},
            {"front_to_back": "DOWN"},
        ],
    )
    def test_invalid_options_raise(self, kwargs):
        with pytest.raises(ValueError):
            FlipConfig(**kwargs)


class TestFitFace:
    def test_center_inside_does_not_upscale(self):
        image = np.full((4, 4, 3), 255, dtype=np.uint8)
        face = fit_face(image, 20, 20)
        assert face.shape == (20, 20, 3)
        assert face[10, 10].tolist() == [255, 255, 255]
        assert face[0, 0].tolist() == [0, 0, 0]
        assert int((face[:, :, 0] == 255).sum()) == 16

    def test_fit_scales_up(self):
        image = np.full((4, 4, 3), 255, dtype=np.uint8)
        face = fit_face(image, 20, 20, scale_mode="fit")
        assert (face == 255).all()

    def test_padding_is_left_as_background(self):
        image = np.full((40, 40, 3), 200, dtype=np.uint8)
        face = fit_face(image, 20, 20, padding=3, background=(1, 2, 3))
        assert face[0, 0].tolist() == [1, 2, 3]
        assert face[2, 10].tolist() == [1, 2, 3]
        assert face[3, 10].tolist() == [200, 200, 200]

    def test_center_mode_crops(self):
        image = np.zeros((40, 40, 3), dtype=np.uint8)
        image[20, 20] = (9, 9, 9)
        face = fit_face(image, 20, 20, scale_mode="center")
        assert face[10, 10].tolist() == [9, 9, 9]

    def test_grayscale_and_alpha_are_converted(self):
        gray = np.full((5, 5), 77, dtype=np.uint8)
        assert fit_face(gray, 5, 5)[2, 2].tolist() == [77, 77, 77]
        bgra = np.full((5, 5, 4), 50, dtype=np.uint8)
        assert fit_face(bgra, 5, 5).shape == (5, 5, 3)


class TestCardView:
    def test_starts_on_front_with_default_colors(self, card, flip_config):
        assert card.visible_side is Side.FRONT
        assert card.is_interactive(Side.FRONT)
        assert not card.is_interactive(Side.BACK)
        assert not card.is_animating
        assert card.render()[5, 5].tolist() == list(flip_config.front_color)
        assert card.face_image(Side.BACK)[5, 5].tolist() == list(flip_config.back_color)

    def test_show_instant(self, card):
        card.show_instant(Side.BACK)
        assert card.visible_side is Side.BACK
        assert card.is_interactive(Side.BACK)
        assert not card.is_interactive(Side.FRONT)

    def test_animate_to_plays_and_resolves(self, card):
        future = card.animate_to(Side.BACK)
        assert card.overlay_visible
        assert not future.done()

        card.tick(FLIP_TICKS[0])
        card.tick(FLIP_TICKS[1])
        assert card.visible_side is Side.FRONT
        card.tick(FLIP_TICKS[2])
        assert card.visible_side is Side.BACK
        assert card.current_frame.side is Side.BACK
        card.tick(FLIP_TICKS[3])
        assert not future.done()
        assert card.tick(FLIP_TICKS[4]) is False

        assert future.result() is Side.BACK
        assert not card.overlay_visible
        assert card.current_frame is None
        assert card.visible_side is Side.BACK

    def test_midpoint_swap_enables_arriving_face(self, card):
        card.animate_to(Side.BACK)
        card.tick(FLIP_TICKS[0])
        card.tick(FLIP_TICKS[1])
        assert card.is_interactive(Side.FRONT)
        card.tick(FLIP_TICKS[2])
        assert card.is_interactive(Side.BACK)
        assert not card.is_interactive(Side.FRONT)
        # The overlay still swallows clicks until the flip lands
        assert card.overlay_visible

    def test_overlay_is_hidden_before_outside_callbacks_run(self, card):
        seen = []
        future = card.animate_to(Side.BACK)
        future.add_done_callback(lambda f: seen.append(card.overlay_visible))
        play_flip(card)
        assert seen == [False]

    def test_edge_on_frame_renders_blank(self, card, flip_config):
        card.animate_to(Side.BACK)
        card.tick(FLIP_TICKS[0])
        card.tick(FLIP_TICKS[1])
        image = card.render()
        assert (image == np.array(flip_config.background_color, dtype=np.uint8)).all()

    def test_mid_rotation_renders_narrowed_face(self, card, flip_config):
        card.animate_to(Side.BACK, duration_ms=1000)
        card.tick(10.0)
        card.tick(10.4)
        image = card.render()
        assert image[10, 10].tolist() == list(flip_config.front_color)
        assert image[10, 0].tolist() == list(flip_config.background_color)

    def test_animate_to_visible_side_raises(self, card):
        with pytest.raises(ValueError):
            card.animate_to(Side.FRONT)

    def test_clear_animation_cancels_without_swapping(self, card):
        future = card.animate_to(Side.BACK)
        card.tick(FLIP_TICKS[0])
        card.clear_animation()
        assert future.cancelled()
        assert card.visible_side is Side.FRONT
        assert not card.overlay_visible
        assert card.tick(FLIP_TICKS[1]) is False

    def test_show_instant_cancels_running_flip(self, card):
        future = card.animate_to(Side.BACK)
        card.show_instant(Side.FRONT)
        assert future.cancelled()

    def test_new_animation_from_completion_callback_survives_tick(self, card):
        def flip_back(_):
            card.animate_to(Side.FRONT)

        future = card.animate_to(Side.BACK)
        future.add_done_callback(flip_back)
        play_flip(card)
        assert card.is_animating
        assert card.overlay_visible
        assert card.current_frame is None
        play_flip(card, start=20.0)
        assert card.visible_side is Side.FRONT


class TestClicks:
    def test_click_calls_listener(self, card):
        listener = MagicMock()
        card.set_click_listener(listener)
        assert card.click(5, 5)
        listener.assert_called_once_with()

    def test_click_outside_card_is_ignored(self, card):
        listener = MagicMock()
        card.set_click_listener(listener)
        assert not card.click(25, 5)
        listener.assert_not_called()

    def test_overlay_swallows_clicks(self, card):
        listener = MagicMock()
        card.set_click_listener(listener)
        card.animate_to(Side.BACK)
        assert card.click(5, 5)
        listener.assert_not_called()

    def test_non_interactive_face_ignores_clicks(self, card):
        listener = MagicMock()
        card.set_click_listener(listener)
        card.set_interactive(Side.FRONT, False)
        assert not card.click(5, 5)
        listener.assert_not_called()

    def test_remove_click_listener_only_removes_matching(self, card):
        first, second = MagicMock(), MagicMock()
        card.set_click_listener(first)
        card.remove_click_listener(second)
        card.click(5, 5)
        first.assert_called_once_with()
        card.remove_click_listener(first)
        assert not card.click(5, 5)
