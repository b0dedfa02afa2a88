from coloring_book.cli.batch_process import main
from coloring_book.services.image_service import ImageService


def test_cli_builds_book_from_folder(tmp_path, gradient_photo, capsys):
    photos = tmp_path / "photos"
    service = ImageService()
    service.save(gradient_photo, photos / "a.png")
    service.save(gradient_photo, photos / "b.png")
    (photos / "broken.jpg").write_bytes(b"not a jpeg")

    output = tmp_path / "out" / "book.pdf"
    code = main([str(photos), "--name", "Mia", "--mode", "both", "--colors", "4",
                 "--seed", "1", "--output", str(output), "--save-pages"])

    assert code == 0
    assert output.read_bytes().startswith(b"%PDF")
    assert sorted(p.name for p in (tmp_path / "out" / "book").iterdir()) == [
        "01_coloring.png", "02_paint-by-numbers.png",
        "03_coloring.png", "04_paint-by-numbers.png",
    ]
    out = capsys.readouterr().out
    assert "FAILED  broken.jpg [decode]" in out


def test_cli_fails_without_usable_photos(tmp_path, capsys):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"")
    worse = tmp_path / "worse.jpg"
    worse.write_bytes(b"not a jpeg")
    output = tmp_path / "x.pdf"

    assert main([str(bad), str(worse), "--name", "Mia", "--output", str(output)]) == 1
    assert not output.exists()
    out = capsys.readouterr().out
    assert "FAILED  bad.png [decode]" in out
    assert "FAILED  worse.jpg [decode]" in out


def test_cli_reports_empty_folder(tmp_path):
    assert main([str(tmp_path), "--name", "Mia"]) == 2
