from __future__ import annotations

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from slicecache import HookRegistry, Record, SliceCache, StoreFile, ViewStateUnavailable, capture_record


class FakeView:
    """Records the calls the cache makes on a document view."""

    def __init__(self, slice=None, image_width=800, resolution=150):
        self.slice = slice
        self.image_width = image_width
        self.resolution = resolution
        self.calls = []

    def get_current_slice(self):
        return self.slice

    def get_image_width(self):
        return self.image_width

    def get_resolution(self):
        return self.resolution

    def set_slice(self, rect):
        self.calls.append(("set_slice", tuple(rect)))
        self.slice = tuple(rect)

    def set_image_width(self, width):
        self.calls.append(("set_image_width", width))
        self.image_width = width

    def set_resolution(self, resolution):
        self.calls.append(("set_resolution", resolution))
        self.resolution = resolution

    def reconvert(self):
        self.calls.append(("reconvert",))


class TornDownView(FakeView):
    def get_current_slice(self):
        raise RuntimeError("buffer killed")


@pytest.fixture
def hooks():
    return HookRegistry()


@pytest.fixture
def cache(tmp_path, hooks):
    return SliceCache(StoreFile(tmp_path / "slice-cache.eld"), hooks)


def test_activation_applies_cached_record_in_order(cache):
    cache.put("/a.pdf", Record.from_values((0, 0, 100, 200), 800, 150))
    view = FakeView(image_width=600, resolution=72)

    assert cache.activate("/a.pdf", view) is True

    assert view.calls == [
        ("set_slice", (0, 0, 100, 200)),
        ("set_image_width", 800),
        ("set_resolution", 150.0),
        ("reconvert",),
    ]


def test_activation_skips_absent_fields(cache):
    cache.put("/a.pdf", Record.from_values((1, 2, 3, 4)))
    view = FakeView()

    cache.activate("/a.pdf", view)

    assert view.calls == [("set_slice", (1, 2, 3, 4))]


def test_activation_without_record_leaves_view_alone(cache, hooks):
    view = FakeView()

    assert cache.activate("/new.pdf", view) is False

    assert view.calls == []
    assert cache.is_active("/new.pdf")
    assert len(hooks.close_hooks("/new.pdf")) == 1


def test_repeated_activation_registers_one_close_hook(cache, hooks):
    view = FakeView()

    cache.activate("/a.pdf", view)
    cache.activate("/a.pdf", view)

    assert len(hooks.close_hooks("/a.pdf")) == 1


def test_close_event_captures_view_and_deactivates(cache, hooks):
    view = FakeView(slice=(10, 20, 30, 40), image_width=1024, resolution=200)
    cache.activate("/a.pdf", view)

    hooks.document_closing("/a.pdf")

    assert cache.get("/a.pdf") == Record.from_values((10, 20, 30, 40), 1024, 200)
    assert not cache.is_active("/a.pdf")
    assert hooks.close_hooks("/a.pdf") == []


def test_close_event_does_not_write_file_by_default(cache, hooks):
    cache.activate("/a.pdf", FakeView())

    hooks.document_closing("/a.pdf")

    assert not cache.path.exists()


def test_close_event_saves_when_configured(tmp_path, hooks):
    path = tmp_path / "slice-cache.eld"
    cache = SliceCache(StoreFile(path), hooks, save_on_close=True)
    cache.activate("/a.pdf", FakeView(slice=(0, 0, 5, 5)))

    hooks.document_closing("/a.pdf")

    assert StoreFile(path).load() == {"/a.pdf": Record.from_values((0, 0, 5, 5), 800, 150)}


def test_deactivate_unregisters_close_hook(cache, hooks):
    view = FakeView(slice=(0, 0, 5, 5))
    cache.activate("/a.pdf", view)

    cache.deactivate("/a.pdf")
    hooks.document_closing("/a.pdf")

    assert cache.get("/a.pdf") is None
    assert hooks.close_hooks("/a.pdf") == []
    cache.deactivate("/a.pdf")


def test_flush_one_skips_unreadable_view(cache):
    cache.put("/a.pdf", Record(image_width=1))

    assert cache.flush_one("/a.pdf", TornDownView()) is False
    assert cache.get("/a.pdf") == Record(image_width=1)


def test_flush_one_skips_malformed_slice(cache):
    assert cache.flush_one("/a.pdf", FakeView(slice=(0, 0, 10))) is False
    assert cache.flush_one("/a.pdf", FakeView(slice="whole page")) is False
    assert cache.flush_one("/a.pdf", FakeView(image_width=0)) is False
    assert "/a.pdf" not in cache


def test_close_event_on_torn_down_view_is_silent(cache, hooks):
    cache.activate("/a.pdf", TornDownView())

    hooks.document_closing("/a.pdf")

    assert cache.get("/a.pdf") is None
    assert not cache.is_active("/a.pdf")


def test_capture_record_without_slice():
    record = capture_record(FakeView(slice=None, image_width=640, resolution=96))

    assert record == Record(image_width=640, resolution=96.0)


def test_capture_record_wraps_collaborator_errors():
    with pytest.raises(ViewStateUnavailable):
        capture_record(TornDownView())


def test_session_round_trip_through_disk(tmp_path):
    path = tmp_path / "slice-cache.eld"
    first_hooks = HookRegistry()
    first = SliceCache(StoreFile(path), first_hooks)
    first.activate("/a.pdf", FakeView(slice=(3, 4, 50, 60), image_width=900, resolution=110))
    first_hooks.document_closing("/a.pdf")
    first_hooks.process_exiting()

    second = SliceCache(StoreFile(path), HookRegistry())
    view = FakeView()
    assert second.activate("/a.pdf", view) is True
    assert view.slice == (3, 4, 50, 60)
    assert view.image_width == 900
    assert view.resolution == 110


def test_reactivation_with_new_view_captures_new_view_on_close(cache, hooks):
    old_view = FakeView(image_width=1)
    new_view = FakeView(image_width=9)

    cache.activate("/a.pdf", old_view)
    cache.activate("/a.pdf", new_view)
    hooks.document_closing("/a.pdf")

    assert cache.get("/a.pdf").image_width == 9
    assert hooks.close_hooks("/a.pdf") == []
