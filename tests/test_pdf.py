from io import BytesIO

import numpy as np
import pytest

from graphics import (
    AllocationFailure,
    Color,
    ContextStateError,
    OriginConvention,
    create_pdf_context,
)
from shapes import Rect, Size


def _circle_page(pdf, size):
    pdf.begin_page()
    with pdf.saved_state():
        pdf.set_fill_color(Color.orange())
        pdf.fill_ellipse(Rect.from_size(size))
    pdf.end_page()


def test_pdf_document_is_complete_only_after_close():
    sink = BytesIO()
    size = Size(200, 200)
    pdf = create_pdf_context(sink, size)
    _circle_page(pdf, size)
    assert b"%%EOF" not in sink.getvalue()
    pdf.close()
    data = sink.getvalue()
    assert data.startswith(b"%PDF")
    assert b"%%EOF" in data[-64:]
    assert pdf.page_count == 1


def test_context_manager_ends_open_page_and_closes():
    sink = BytesIO()
    with create_pdf_context(sink, (100, 50)) as pdf:
        pdf.begin_page()
        pdf.set_fill_color(Color.blue())
        pdf.fill_rect(Rect(0, 0, 10, 10))
    assert pdf.closed
    assert pdf.page_count == 1
    assert sink.getvalue().startswith(b"%PDF")


def test_context_manager_closes_on_error():
    sink = BytesIO()
    with pytest.raises(RuntimeError):
        with create_pdf_context(sink, (100, 100)) as pdf:
            pdf.begin_page()
            raise RuntimeError("boom")
    assert pdf.closed
    assert b"%%EOF" in sink.getvalue()


def test_one_page_per_bracket():
    sink = BytesIO()
    size = Size(72, 72)
    with create_pdf_context(sink, size) as pdf:
        for _ in range(3):
            _circle_page(pdf, size)
    assert pdf.page_count == 3


def test_drawing_outside_a_page_is_rejected():
    pdf = create_pdf_context(BytesIO(), (10, 10))
    with pytest.raises(ContextStateError):
        pdf.fill_rect(Rect(0, 0, 1, 1))
    with pytest.raises(ContextStateError):
        pdf.end_page()
    pdf.begin_page()
    with pytest.raises(ContextStateError):
        pdf.begin_page()
    pdf.close()
    with pytest.raises(ContextStateError):
        pdf.begin_page()


def test_close_is_idempotent():
    pdf = create_pdf_context(BytesIO(), (10, 10))
    pdf.close()
    pdf.close()
    assert pdf.closed


@pytest.mark.parametrize("size", [(0, 10), (10, -1), (float("nan"), 10)])
def test_invalid_page_size_fails(size):
    with pytest.raises(AllocationFailure):
        create_pdf_context(BytesIO(), size)


@pytest.mark.parametrize("origin", [OriginConvention.BOTTOM_LEFT_Y_UP, OriginConvention.TOP_LEFT_Y_DOWN])
def test_user_origin_maps_to_top_of_page(origin):
    pdf = create_pdf_context(BytesIO(), (100, 40), native_origin=origin)
    T = pdf.user_to_device
    assert np.allclose(T.apply(np.array([0.0, 0.0])), [0.0, 40.0])
    assert np.allclose(T.apply(np.array([100.0, 40.0])), [100.0, 0.0])
    pdf.close()


def test_page_starts_from_initial_state():
    pdf = create_pdf_context(BytesIO(), (10, 10))
    pdf.begin_page()
    pdf.save_gstate()
    pdf.translate_ctm(3.0, 3.0)
    pdf.end_page()
    pdf.begin_page()
    assert np.allclose(pdf.ctm.t, [0.0, 10.0])
    with pytest.raises(ContextStateError):
        pdf.restore_gstate()
    pdf.close()


def test_only_normal_blend_is_supported():
    pdf = create_pdf_context(BytesIO(), (10, 10))
    pdf.set_blend_mode("normal")
    with pytest.raises(ValueError):
        pdf.set_blend_mode("multiply")
    pdf.close()


def test_draw_image_on_page(gradient_image):
    sink = BytesIO()
    with create_pdf_context(sink, gradient_image.size) as pdf:
        pdf.begin_page()
        pdf.draw_image(gradient_image, Rect.from_size(gradient_image.size))
        pdf.end_page()
    assert sink.getvalue().startswith(b"%PDF")


def test_rotated_image_placement_is_rejected(gradient_image):
    pdf = create_pdf_context(BytesIO(), (10, 10))
    pdf.begin_page()
    with pdf.saved_state():
        pdf.rotate_ctm(0.5)
        with pytest.raises(ValueError):
            pdf.draw_image(gradient_image, Rect(0, 0, 4, 3))
    pdf.close()
