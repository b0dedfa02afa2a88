import pytest

from coloring_book.models.book_page import BookPage, PageKind
from coloring_book.services.book_service import BookService, book_filename


@pytest.fixture
def service():
    return BookService()


def test_build_pdf_with_both_page_kinds(service, gradient_photo, solid):
    pages = [
        BookPage(image=solid(20, 30, (255, 255, 255)), kind=PageKind.COLORING),
        BookPage(image=gradient_photo, kind=PageKind.PAINT_BY_NUMBERS,
                 palette=["#ff0000", "#00ff00", "#0000ff"]),
    ]
    pdf = service.build_pdf("Mia", pages)
    assert pdf.startswith(b"%PDF")
    assert pdf.rstrip().endswith(b"%%EOF")


def test_more_pages_make_a_bigger_document(service, gradient_photo):
    page = BookPage(image=gradient_photo, kind=PageKind.COLORING)
    one = service.build_pdf("Leo", [page])
    three = service.build_pdf("Leo", [page, page, page])
    assert len(three) > len(one)


def test_cover_only_book(service):
    assert service.build_pdf("Ana", []).startswith(b"%PDF")


def test_single_page_helper(service, gradient_photo):
    pdf = service.build_single_page(gradient_photo, "Tom", PageKind.PAINT_BY_NUMBERS, ["#123456"])
    assert pdf.startswith(b"%PDF")


def test_name_is_required(service):
    with pytest.raises(ValueError):
        service.build_pdf("  ", [])


def test_book_filename_is_sanitized():
    assert book_filename("Anna-Lena Müller!") == "Anna_Lena_M_ller__ColoringBook.pdf"
