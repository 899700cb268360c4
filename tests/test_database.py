import pytest

from reencoder.database import (
    Batch,
    KeyNotFoundError,
    Store,
    decode_info,
    evaluate_file,
    get_info,
    index_file,
    update_file,
)
from reencoder.models import Evaluation, FileInfo, RunConfig


@pytest.fixture
def store(tmp_path):
    with Store(tmp_path / "db") as s:
        yield s


def test_commit_persists_across_reopen(tmp_path):
    with Store(tmp_path / "db") as s:
        batch = s.batch()
        batch.put(b"k1", b"v1")
        batch.commit()
    with Store(tmp_path / "db") as s:
        assert list(s.items()) == [(b"k1", b"v1")]


def test_pending_writes_visible_before_commit(store):
    batch = store.batch()
    batch.put(b"key", b"value")
    assert batch.exists(b"key")
    assert batch.get(b"key") == b"value"
    assert list(store.items()) == []


def test_delete_hides_key(store):
    first = store.batch()
    first.put(b"key", b"value")
    first.commit()
    second = store.batch()
    second.delete(b"key")
    assert not second.exists(b"key")
    with pytest.raises(KeyNotFoundError):
        second.get(b"key")
    second.commit()
    assert list(store.items()) == []


def test_put_after_delete_wins(store):
    batch = store.batch()
    batch.put(b"key", b"old")
    batch.delete(b"key")
    batch.put(b"key", b"new")
    batch.commit()
    assert list(store.items()) == [(b"key", b"new")]


def test_batch_unusable_after_commit(store):
    batch = Batch(store)
    batch.commit()
    with pytest.raises(RuntimeError):
        batch.put(b"k", b"v")


def test_items_are_sorted_by_key(store):
    batch = store.batch()
    for key in (b"c", b"a", b"b"):
        batch.put(key, key)
    batch.commit()
    assert [k for k, _ in store.items()] == [b"a", b"b", b"c"]


def test_get_info_missing_raises(store):
    with pytest.raises(KeyNotFoundError):
        get_info(store.batch(), b"missing")


def test_decode_info_round_trip():
    info = FileInfo("/a.flac", "1.4.3", True)
    assert decode_info(info.to_json()) == info


def _stored(store, info, key=b"hash"):
    batch = store.batch()
    update_file(info, batch, key)
    return batch


@pytest.mark.parametrize(
    "stored, current, expected",
    [
        (FileInfo("/a.flac", "1.4.3", True), FileInfo("/a.flac", "1.4.3"), Evaluation.REENCODE_NEEDED),
        (FileInfo("/a.flac", "1.4.3", False), FileInfo("/a.flac", "1.3.2"), Evaluation.REENCODE_NEEDED),
        (FileInfo("/a.flac", "1.4.3", False), FileInfo("/b.flac", "1.4.3"), Evaluation.FILE_MOVED),
        (FileInfo("/a.flac", "1.4.3", False), FileInfo("/a.flac", "1.4.3"), Evaluation.REENCODE_NOT_NEEDED),
    ],
)
def test_evaluate_file(store, stored, current, expected):
    batch = _stored(store, stored)
    assert evaluate_file(current, batch, b"hash", "1.4.3") is expected


def test_index_new_file_needs_processing(store):
    batch = store.batch()
    info = FileInfo("/a.flac", "1.4.3", True)
    assert index_file(info, RunConfig(path="/", encoder="1.4.3"), b"hash", batch) is True
    assert get_info(batch, b"hash").process is True


def test_index_up_to_date_file(store):
    batch = _stored(store, FileInfo("/a.flac", "1.4.3", False))
    info = FileInfo("/a.flac", "1.4.3", True)
    assert index_file(info, RunConfig(path="/", encoder="1.4.3"), b"hash", batch) is False
    assert get_info(batch, b"hash") == FileInfo("/a.flac", "1.4.3", False)


def test_index_moved_file_updates_path(store):
    batch = _stored(store, FileInfo("/a.flac", "1.4.3", False))
    info = FileInfo("/moved/a.flac", "1.4.3", True)
    assert index_file(info, RunConfig(path="/", encoder="1.4.3"), b"hash", batch) is False
    assert get_info(batch, b"hash").abs_path == "/moved/a.flac"