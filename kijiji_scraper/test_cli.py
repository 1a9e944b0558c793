"""
Tests for the command line entry point.
"""
import os

from kijiji_scraper.cli import main, parse_args
from kijiji_scraper.database import RecordStore
from kijiji_scraper.utils import init_logger


URL = "https://www.kijiji.ca/v-cars-trucks/city-of-halifax/2018-honda-civic/1687654321"


def run(db, *args):
    return main(["--db", db, "--no-file-log", *args])


def test_parse_args_defaults():
    args = parse_args(["export"])
    assert args.command == "export"
    assert args.format in ("xlsx", "csv")
    assert args.prefix == "kijiji_vehicles"


def test_capture_count_export_clear(tmp_path, capsys):
    db = str(tmp_path / "kijiji.db")
    html = tmp_path / "listing.html"
    html.write_text("<h1>2018 Honda Civic LX Sedan</h1>", encoding="utf-8")
    image = tmp_path / "listing.png"
    image.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    root = str(tmp_path / "Kijiji Vehicles")

    assert run(db, "capture", "--url", URL, "--html", str(html), "--image", str(image)) == 0
    assert RecordStore(db).count() == 1

    assert run(db, "count") == 0
    assert capsys.readouterr().out.strip().splitlines()[-1] == "1"

    assert run(db, "export", "--format", "csv", "--export-root", root) == 0
    (day,) = os.listdir(os.path.join(root, "data"))
    (data_file,) = os.listdir(os.path.join(root, "data", day))
    assert data_file.startswith("kijiji_vehicles_") and data_file.endswith(".csv")
    assert len(os.listdir(os.path.join(root, "screenshots", day))) == 1

    assert run(db, "clear", "--yes") == 0
    assert RecordStore(db).count() == 0


def test_clear_declined_keeps_listings(tmp_path, monkeypatch):
    db = str(tmp_path / "kijiji.db")
    html = tmp_path / "listing.html"
    html.write_text("<h1>2016 Toyota Corolla</h1>", encoding="utf-8")
    run(db, "capture", "--url", URL, "--html", str(html))

    monkeypatch.setattr("builtins.input", lambda prompt="": "n")
    assert run(db, "clear") == 0
    assert RecordStore(db).count() == 1


def test_storage_error_exit_code(tmp_path):
    # a directory cannot be opened as a database file
    assert run(str(tmp_path), "count") == 1


def test_init_logger_reuses_handlers(tmp_path):
    log_path = str(tmp_path / "capture.log")
    first = init_logger("kijiji_test_logger", console_level="WARNING", log_file=log_path)
    second = init_logger("kijiji_test_logger", log_file=None)
    assert first is second
    assert len(first.handlers) == 2
    first.debug("strategy detail")
    first.handlers[1].flush()
    with open(log_path, encoding="utf-8") as f:
        assert "[DEBUG] strategy detail" in f.read()
