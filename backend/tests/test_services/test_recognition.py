"""Tests for recognition image preparation."""

from __future__ import annotations

import io

from PIL import Image

from tests.conftest import PNG_MAGIC

from inkrender.services.recognition import RecognitionImagePreparer, recognition_size, render_for_recognition


def test_recognition_size():
    assert recognition_size(1120) == (1120, 1493)


def test_inked_page_renders_at_recognition_width(page_store, settings):
    data = render_for_recognition(page_store, "inked", settings)
    assert data.startswith(PNG_MAGIC)
    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (1120, 1493)


def test_no_image_without_strokes(page_store, settings):
    preparer = RecognitionImagePreparer(page_store, settings)
    assert preparer.render_for_recognition("blank") is None
    assert preparer.render_for_recognition("no-such-page") is None


def test_recognition_width_is_configurable(page_store, settings):
    settings.recognition_width = 280
    data = RecognitionImagePreparer(page_store, settings).render_for_recognition("diagonal")
    with Image.open(io.BytesIO(data)) as img:
        assert img.size == (280, 373)
