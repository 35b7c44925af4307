import asyncio
import random
import sys
import threading
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "pipeline"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from pixelart_pipeline.codec import encode
from pixelart_pipeline.colors import Palette
from pixelart_pipeline.models import IntensityGrid, RenderSurfaceUnavailable
from pixelart_renderer.renderer import GridRenderer
from pixelart_renderer.scheduling import AsyncioScheduler, ThreadingScheduler, VirtualScheduler
from pixelart_renderer.slideshow import SlideDelay, Slideshow, frames_from_artifacts
from pixelart_renderer.surface import ImageSurface


def _grids(count, size=4):
    return [IntensityGrid(size=size, data=bytes([i % 16]) * (size * size)) for i in range(count)]


class RecordingHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class RecordingScheduler:
    """Hands out handles but never fires them on its own."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay_s, callback):
        handle = RecordingHandle(callback)
        self.handles.append(handle)
        return handle


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class SlideDelayTests(unittest.TestCase):
    def test_range_is_half_open(self):
        delays = SlideDelay()
        self.assertEqual(delays.next_delay_ms(FixedRandom(0.0)), 3000.0)
        self.assertLess(delays.next_delay_ms(FixedRandom(0.9999999)), 5000.0)

    def test_validation(self):
        with self.assertRaises(ValueError):
            SlideDelay(0, 10)
        with self.assertRaises(ValueError):
            SlideDelay(10, 5)


class SlideshowTests(unittest.TestCase):
    def _show(self, scheduler, seed=7):
        surface = ImageSurface(8, 8)
        return Slideshow(GridRenderer(), surface, scheduler, rng=random.Random(seed)), surface

    def test_visits_every_frame_and_wraps(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(4), Palette(), 8, 8)
        scheduler.advance(4 * 5000 + 1)
        self.assertEqual(set(show.visited), {0, 1, 2, 3})
        self.assertEqual(show.visited[:5], [0, 1, 2, 3, 0])

    def test_each_delay_is_freshly_sampled(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler, seed=3)
        show.attach(_grids(3), Palette(), 8, 8)
        scheduler.advance(60_000)
        self.assertGreater(len(show.delay_history), 10)
        for delay in show.delay_history:
            self.assertGreaterEqual(delay, 3000.0)
            self.assertLess(delay, 5000.0)
        self.assertGreater(len(set(show.delay_history)), 1)

    def test_no_transition_before_min_delay(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        scheduler.advance(2999)
        self.assertEqual(show.current_index, 0)
        scheduler.advance(2001)
        self.assertEqual(show.current_index, 1)

    def test_single_frame_arms_no_timer(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        show.attach(_grids(1), Palette(), 8, 8)
        self.assertFalse(show.has_pending_timer)
        self.assertEqual(scheduler.pending, 0)
        self.assertEqual(surface.clears, 1)

    def test_only_one_outstanding_timer(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        self.assertEqual(scheduler.pending, 1)
        replacement = _grids(3, size=2)
        show.attach(replacement, Palette(), 8, 8)
        self.assertEqual(scheduler.pending, 1)
        scheduler.advance(5000)
        self.assertEqual(show.current_index, 1)
        self.assertIs(show.current_frame, replacement[1])
        self.assertEqual(scheduler.pending, 1)

    def test_failed_first_draw_still_cycles_after_resize(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        with self.assertLogs("pixelart.slideshow", level="ERROR"):
            with self.assertRaises(RenderSurfaceUnavailable):
                show.attach(_grids(3), Palette(), 0, 8)
        self.assertTrue(show.is_active)
        self.assertTrue(show.has_pending_timer)

        show.resize(8, 8)
        self.assertEqual(surface.width, 8)
        scheduler.advance(20_000)
        self.assertEqual(set(show.visited), {0, 1, 2})
        self.assertGreaterEqual(len(show.visited), 5)

    def test_tick_on_missing_surface_keeps_cycling(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        surface.close()
        with self.assertLogs("pixelart.slideshow", level="ERROR"):
            scheduler.advance(5000)
        self.assertEqual(show.current_index, 1)
        self.assertTrue(show.has_pending_timer)

    def test_detach_cancels_timer(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(3), Palette(), 8, 8)
        show.detach()
        self.assertEqual(scheduler.pending, 0)
        self.assertFalse(show.is_active)
        scheduler.advance(20_000)
        self.assertEqual(show.visited, [0])

    def test_stale_callback_does_not_touch_new_sequence(self):
        scheduler = RecordingScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        old = scheduler.handles[0]
        show.attach(_grids(3), Palette(), 8, 8)
        self.assertTrue(old.cancelled)

        old.callback()
        self.assertEqual(show.current_index, 0)
        scheduler.handles[-1].callback()
        self.assertEqual(show.current_index, 1)

    def test_redraws_only_on_transition(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        self.assertEqual(surface.clears, 1)
        scheduler.advance(2000)
        self.assertEqual(surface.clears, 1)
        scheduler.advance(3000)
        self.assertEqual(surface.clears, 2)

    def test_palette_and_resize_redraw(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8)
        show.set_palette(Palette(primary="#ffffff"))
        self.assertEqual(surface.clears, 2)
        show.set_palette(Palette(primary="#ffffff"))
        self.assertEqual(surface.clears, 2)
        show.resize(16, 16)
        self.assertEqual(surface.width, 16)
        self.assertEqual(surface.clears, 3)

    def test_transition_label_is_cosmetic(self):
        scheduler = VirtualScheduler()
        show, _surface = self._show(scheduler)
        show.attach(_grids(2), Palette(), 8, 8, transition="dissolve")
        self.assertEqual(show.transition, "dissolve")
        scheduler.advance(5000)
        self.assertEqual(show.current_index, 1)

    def test_legacy_bitmaps_cycle(self):
        scheduler = VirtualScheduler()
        show, surface = self._show(scheduler)
        frames = [Image.new("RGB", (4, 4), (255, 0, 0)), Image.new("RGB", (4, 4), (0, 0, 255))]
        show.attach(frames, Palette(), 8, 8)
        self.assertEqual(surface.pixel(0, 0), (255, 0, 0))
        scheduler.advance(5000)
        self.assertEqual(surface.pixel(0, 0), (0, 0, 255))

    def test_frames_from_artifacts_skips_bad_entries(self):
        good = encode(IntensityGrid.from_levels([1, 2, 3, 4], levels=16))
        with self.assertLogs("pixelart.slideshow", level="ERROR"):
            frames = frames_from_artifacts(["%%%", good])
        self.assertEqual(len(frames), 1)
        self.assertEqual(frames[0].size, 2)


class SchedulerBackendTests(unittest.TestCase):
    def test_asyncio_backend_cycles(self):
        async def scenario():
            show = Slideshow(
                GridRenderer(),
                ImageSurface(4, 4),
                AsyncioScheduler(),
                rng=random.Random(1),
                delays=SlideDelay(1, 2),
            )
            show.attach(_grids(3), Palette(), 4, 4)
            await asyncio.sleep(0.2)
            show.detach()
            return list(show.visited)

        visited = asyncio.run(scenario())
        self.assertGreaterEqual(len(visited), 3)
        self.assertEqual(visited[:3], [0, 1, 2])

    def test_threading_backend_fires_and_cancels(self):
        fired = threading.Event()
        scheduler = ThreadingScheduler()
        scheduler.call_later(0.01, fired.set)
        self.assertTrue(fired.wait(2.0))

        never = threading.Event()
        handle = scheduler.call_later(0.2, never.set)
        handle.cancel()
        self.assertFalse(never.wait(0.4))

    def test_virtual_scheduler_orders_by_deadline(self):
        scheduler = VirtualScheduler()
        calls = []
        scheduler.call_later(2.0, lambda: calls.append("b"))
        scheduler.call_later(1.0, lambda: calls.append("a"))
        cancelled = scheduler.call_later(1.5, lambda: calls.append("x"))
        cancelled.cancel()
        self.assertEqual(scheduler.advance(2500), 2)
        self.assertEqual(calls, ["a", "b"])
        self.assertEqual(scheduler.now_ms, 2500)


if __name__ == "__main__":
    unittest.main()
