from pathlib import Path

from pharmaroute.persistence.filesystem import FileStorage


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="routes_test")

    assert run_dir.exists()
    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"
    assert run_dir.name.startswith("routes_test_")


def test_file_storage_writes_json_and_csv(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory()

    summary_path = run_dir / "summary.json"
    assignments_path = run_dir / "assignments.csv"

    storage.write_json(summary_path, {"courier": "Ana"})
    storage.write_text(assignments_path, "courier_id,order_id\r\nu1,o1\r\n")

    assert summary_path.read_text(encoding="utf-8") == '{\n  "courier": "Ana"\n}'
    assert assignments_path.read_bytes() == b"courier_id,order_id\r\nu1,o1\r\n"

