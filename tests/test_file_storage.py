"""LocalFileStorage tests."""

import itertools

import pytest

from itemvault.services.file_storage import LocalFileStorage


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("receipt.png", "receipt.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\photo 1.jpg", "photo_1.jpg"),
        ("...", "upload"),
    ],
)
def test_safe_name(filename, expected):
    assert LocalFileStorage.safe_name(filename) == expected


@pytest.mark.asyncio
async def test_save_writes_under_root(tmp_path):
    storage = LocalFileStorage(tmp_path / "uploads")
    ref = await storage.save("receipt.png", b"png-bytes")

    assert ref.startswith("uploads/")
    stored = tmp_path / "uploads" / ref.split("/", 1)[1]
    assert stored.read_bytes() == b"png-bytes"


@pytest.mark.asyncio
async def test_save_same_name_twice_keeps_both(tmp_path, monkeypatch):
    clock = itertools.count(1)
    monkeypatch.setattr("itemvault.services.file_storage.time.time", lambda: float(next(clock)))
    storage = LocalFileStorage(tmp_path)

    first = await storage.save("a.txt", b"1")
    second = await storage.save("a.txt", b"2")
    assert first != second
    assert len(list(tmp_path.iterdir())) == 2


@pytest.mark.asyncio
async def test_save_same_name_same_millisecond(tmp_path, monkeypatch):
    monkeypatch.setattr("itemvault.services.file_storage.time.time", lambda: 1700000000.0)
    storage = LocalFileStorage(tmp_path)

    first = await storage.save("image.jpg", b"first")
    second = await storage.save("image.jpg", b"second")
    assert first != second
    assert (tmp_path / first.split("/", 1)[1]).read_bytes() == b"first"
    assert (tmp_path / second.split("/", 1)[1]).read_bytes() == b"second"


@pytest.mark.asyncio
async def test_stored_name_is_not_guessable(tmp_path, monkeypatch):
    monkeypatch.setattr("itemvault.services.file_storage.time.time", lambda: 1700000000.0)
    storage = LocalFileStorage(tmp_path)

    ref = await storage.save("receipt.png", b"x")
    assert ref != "uploads/1700000000000_receipt.png"
    millis, token, name = ref.split("/", 1)[1].split("_", 2)
    assert millis == "1700000000000"
    assert len(token) == 16
    assert name == "receipt.png"


@pytest.mark.asyncio
async def test_save_never_overwrites(tmp_path, monkeypatch):
    storage = LocalFileStorage(tmp_path)
    monkeypatch.setattr(storage, "_stored_name", lambda filename: "fixed_name.txt")

    await storage.save("a.txt", b"original")
    with pytest.raises(FileExistsError):
        await storage.save("a.txt", b"replacement")
    assert (tmp_path / "fixed_name.txt").read_bytes() == b"original"


@pytest.mark.asyncio
async def test_delete_removes_file(tmp_path):
    storage = LocalFileStorage(tmp_path)
    ref = await storage.save("a.txt", b"1")

    await storage.delete(ref)
    assert list(tmp_path.iterdir()) == []
    # Deleting again is a no-op
    await storage.delete(ref)


@pytest.mark.asyncio
@pytest.mark.parametrize("ref", ["other/a.txt", "uploads/../secret.txt", "uploads/"])
async def test_delete_ignores_foreign_refs(tmp_path, ref):
    (tmp_path / "secret.txt").write_bytes(b"keep")
    storage = LocalFileStorage(tmp_path / "uploads")

    await storage.delete(ref)
    assert (tmp_path / "secret.txt").read_bytes() == b"keep"
