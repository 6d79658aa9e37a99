# -*- coding: utf-8 -*-
import unittest

from mandelzoom.geometry import Complex, ComplexRect, Pixel, PixelRect
from mandelzoom.numeric import ArbitraryReal, NativeReal
from mandelzoom.view import View, precision_for_zoom


def make_view(real=NativeReal):
    # 800x600 window showing the whole set
    return View(-0.5, 0.0, 1.0, 800, 600, real=real)


class Test_mapping(unittest.TestCase):

    def test_centre_pixel(self):
        view = make_view()
        z = view.complex_at_pixel(400, 300)
        self.assertEqual(z, Complex(-0.5, 0.0))
        self.assertEqual(view.pixel_at_complex(z), Pixel(400, 300))

    def test_corner_is_viewport_origin(self):
        view = make_view()
        z = view.complex_at_pixel(Pixel(0, 0))
        rect = view.get_viewport()
        self.assertAlmostEqual(float(z.re), float(rect.left))
        self.assertAlmostEqual(float(z.im), float(rect.top))

    def test_round_trip(self):
        for real in (NativeReal, ArbitraryReal):
            view = make_view(real)
            view.zoom_to(-5.5)
            view.move_to(-0.743643887, 0.131825904)
            for x, y in [(0, 0), (123, 456), (799, 599), (400, 1)]:
                p = view.pixel_at_complex(view.complex_at_pixel(x, y))
                self.assertLessEqual(abs(p.x - x), 1)
                self.assertLessEqual(abs(p.y - y), 1)

    def test_aspect_ratio(self):
        view = make_view()
        rect = view.get_viewport()
        self.assertAlmostEqual(float(rect.width / rect.height), 800 / 600)
        self.assertAlmostEqual(float(rect.height), 4.0)
        self.assertAlmostEqual(float(rect.left), -0.5 - 8.0 / 3.0)
        self.assertAlmostEqual(float(rect.top), -2.0)
        self.assertAlmostEqual(float(view.get_aspect_ratio()), 4.0 / 3.0)

    def test_viewport_position_and_size(self):
        view = make_view()
        size = view.get_viewport_size()
        self.assertAlmostEqual(float(size.re), 16.0 / 3.0)
        self.assertAlmostEqual(float(size.im), 4.0)
        self.assertAlmostEqual(float(view.get_viewport_position().im), -2.0)


class Test_zoom_and_pan(unittest.TestCase):

    def test_scale_follows_zoom(self):
        view = make_view()
        self.assertEqual(float(view.get_scale()), 2.0)
        view.zoom_by(-1)
        self.assertEqual(float(view.get_scale()), 1.0)
        self.assertEqual(float(view.get_zoom()), 0.0)
        view.set_scale(0.25)
        self.assertEqual(float(view.zoom), -2.0)
        view.zoom_to(3)
        self.assertEqual(float(view.scale), 8.0)

    def test_move_by_is_scaled(self):
        view = make_view()
        view.move_by(0.25, -0.5)
        self.assertEqual(view.get_centre(), Complex(0.0, -1.0))
        view.move_by(Complex(-0.25, 0.5))
        self.assertEqual(view.get_centre(), Complex(-0.5, 0.0))

    def test_viewport_follows_mutations(self):
        view = make_view()
        view.move_to(1.0, 1.0)
        view.zoom_by(-1)
        rect = view.get_viewport()
        self.assertAlmostEqual(float(rect.left), 1.0 - 4.0 / 3.0)
        self.assertAlmostEqual(float(rect.top), 0.0)
        self.assertAlmostEqual(float(rect.height), 2.0)

    def test_set_viewport(self):
        view = make_view()
        rect = ComplexRect(-2.0, -1.0, 3.0, 2.0)
        view.set_viewport(rect)
        self.assertEqual(float(view.get_scale()), 1.0)
        self.assertEqual(float(view.get_zoom()), 0.0)
        self.assertEqual(view.get_centre(), Complex(-0.5, 0.0))
        self.assertTrue(view.is_dirty())

        # Rebuilt at the 4:3 screen shape around the new centre
        viewport = view.get_viewport()
        self.assertAlmostEqual(float(viewport.left), -0.5 - 4.0 / 3.0)
        self.assertAlmostEqual(float(viewport.top), -1.0)
        self.assertAlmostEqual(float(viewport.width), 8.0 / 3.0)
        self.assertAlmostEqual(float(viewport.height), 2.0)
        corner = view.complex_at_pixel(0, 0)
        self.assertAlmostEqual(float(corner.re), float(viewport.left))
        self.assertAlmostEqual(float(corner.im), float(viewport.top))

    def test_resize_keeps_pixel_size(self):
        view = make_view()
        pixel = view.complex_at_pixel(1, 0).re - view.complex_at_pixel(0, 0).re
        view.resize_screen(400, 300)
        self.assertEqual(view.get_screen_size(), Pixel(400, 300))
        self.assertEqual(float(view.get_scale()), 1.0)
        self.assertEqual(float(view.get_zoom()), 0.0)
        resized = view.complex_at_pixel(1, 0).re - view.complex_at_pixel(0, 0).re
        self.assertAlmostEqual(float(pixel), float(resized))

    def test_resize_rejects_empty_screen(self):
        view = make_view()
        with self.assertRaises(ValueError):
            view.resize_screen(0, 600)
        with self.assertRaises(ValueError):
            view.resize_screen(800, -1)


class Test_dirty_flag(unittest.TestCase):

    def test_every_mutator_sets_dirty(self):
        view = make_view()
        self.assertTrue(view.is_dirty())
        mutations = [
            lambda: view.move_to(0.0, 0.0),
            lambda: view.move_by(0.1, 0.0),
            lambda: view.zoom_to(0.0),
            lambda: view.zoom_by(-1),
            lambda: view.set_scale(0.5),
            lambda: view.resize_screen(640, 480),
            lambda: view.set_viewport(ComplexRect(-1.0, -1.0, 2.0, 2.0)),
        ]
        for mutate in mutations:
            view.is_dirty(False)
            self.assertFalse(view.is_dirty())
            mutate()
            self.assertTrue(view.is_dirty())

    def test_reads_leave_flag_alone(self):
        view = make_view()
        view.is_dirty(False)
        view.complex_at_pixel(10, 10)
        view.get_viewport()
        view.snapshot()
        self.assertFalse(view.is_dirty())


class Test_zoom_box(unittest.TestCase):

    def test_continue_keeps_aspect_ratio(self):
        view = make_view()
        view.zoom_box_begin(0, 0)
        self.assertTrue(view.zoom_box_is_shown())
        view.zoom_box_continue(100, 10)
        self.assertEqual(view.get_zoom_box_rect(), PixelRect(0, 0, 100, 75))
        view.zoom_box_continue(10, -90)
        self.assertEqual(view.get_zoom_box_rect(), PixelRect(0, -90, 120, 90))

    def test_continue_without_begin(self):
        view = make_view()
        view.zoom_box_continue(100, 100)
        self.assertFalse(view.zoom_box_is_shown())

    def test_end_zooms_to_box(self):
        view = make_view()
        view.zoom_box_begin(200, 150)
        view.zoom_box_continue(500, 400)
        view.zoom_box_end(600, 450)
        self.assertFalse(view.zoom_box_is_shown())
        self.assertAlmostEqual(float(view.get_scale()), 1.0)
        self.assertAlmostEqual(float(view.get_zoom()), 0.0)
        centre = view.get_centre()
        self.assertAlmostEqual(float(centre.re), -0.5)
        self.assertAlmostEqual(float(centre.im), 0.0)

    def test_end_recentres(self):
        view = make_view()
        target = view.complex_at_pixel(200, 150)
        view.zoom_box_begin(100, 75)
        view.zoom_box_end(300, 225)
        self.assertAlmostEqual(float(view.get_scale()), 0.5)
        self.assertAlmostEqual(float(view.get_centre().re), float(target.re))
        self.assertAlmostEqual(float(view.get_centre().im), float(target.im))

    def test_zero_height_box_is_ignored(self):
        view = make_view()
        view.is_dirty(False)
        view.zoom_box_begin(100, 100)
        view.zoom_box_end(100, 100)
        self.assertFalse(view.zoom_box_is_shown())
        self.assertFalse(view.is_dirty())
        self.assertEqual(float(view.get_scale()), 2.0)
        self.assertEqual(view.get_centre(), Complex(-0.5, 0.0))

    def test_cancel(self):
        view = make_view()
        view.is_dirty(False)
        view.zoom_box_begin(100, 100)
        view.zoom_box_continue(300, 300)
        view.zoom_box_cancel()
        self.assertFalse(view.zoom_box_is_shown())
        # A release after cancelling does not zoom
        view.zoom_box_end(300, 300)
        self.assertFalse(view.is_dirty())
        self.assertEqual(float(view.get_scale()), 2.0)


class Test_snapshot_and_describe(unittest.TestCase):

    def test_snapshot_is_independent(self):
        view = make_view(ArbitraryReal)
        view.zoom_box_begin(10, 10)
        snap = view.snapshot()
        view.move_by(1.0, 0.0)
        view.zoom_by(-3)
        self.assertEqual(snap.get_centre(), Complex(-0.5, 0.0))
        self.assertEqual(float(snap.get_zoom()), 1.0)
        self.assertFalse(snap.zoom_box_is_shown())
        self.assertTrue(view.zoom_box_is_shown())

    def test_describe(self):
        view = make_view()
        self.assertEqual(
            view.describe(),
            "( -5.000000e-01, +0.000000e+00 ) @ +1.000000e+00 -> "
            "[ -3.166667e+00, -2.000000e+00, 5.333333e+00, 4.000000e+00 ]",
        )
        self.assertEqual(str(view), view.describe())


class Test_precision_escalation(unittest.TestCase):

    def test_precision_for_zoom(self):
        self.assertEqual(precision_for_zoom(1.0, 600), 53 + 10 + 16)
        self.assertEqual(precision_for_zoom(-100, 600), 53 + 100 + 10 + 16)

    def test_arbitrary_view_gains_bits(self):
        view = make_view(ArbitraryReal)
        view.zoom_to(-100)
        bits = 53 + 100 + 10 + 16
        self.assertEqual(view.precision, bits)
        self.assertGreaterEqual(view.get_centre().re.precision, bits)
        self.assertNotEqual(view.complex_at_pixel(400, 300).re,
                            view.complex_at_pixel(401, 300).re)

        # Never lowered again
        view.zoom_to(1)
        self.assertEqual(view.precision, bits)

    def test_backends_map_to_the_same_pixel(self):
        native = make_view(NativeReal)
        deep = make_view(ArbitraryReal)
        # 400.7 and 300.7 pixels from the corner truncate to 400, 300
        z = native.complex_at_pixel(400, 300) + Complex(0.7 / 150, 0.7 / 150)
        self.assertEqual(native.pixel_at_complex(z), Pixel(400, 300))
        self.assertEqual(deep.pixel_at_complex(z), Pixel(400, 300))
        self.assertEqual(deep.pixel_at_complex(-z.re - 1.0, -z.im),
                         native.pixel_at_complex(-z.re - 1.0, -z.im))

    def test_native_view_runs_out_of_bits(self):
        view = make_view(NativeReal)
        view.zoom_to(-100)
        self.assertEqual(view.precision, 53)
        self.assertEqual(view.complex_at_pixel(400, 300).re,
                         view.complex_at_pixel(401, 300).re)


if __name__ == "__main__":
    unittest.main()
