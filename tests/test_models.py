import pytest

from reencoder.models import DEFAULT_FLAC_ARGS, FileInfo, RunConfig


def test_to_json_uses_stored_field_names():
    info = FileInfo(abs_path="/music/a.flac", encoder="1.3.2", process=True)
    assert info.to_json() == b'{"abspath":"/music/a.flac","encoder":"1.3.2","process":true}'


def test_round_trip():
    info = FileInfo(abs_path="/music/\u00e9t\u00e9.flac", encoder="1.4.3", process=False)
    assert FileInfo.from_json(info.to_json()) == info


def test_missing_fields_take_zero_values():
    info = FileInfo.from_json(b'{"abspath":"/x.flac"}')
    assert info == FileInfo(abs_path="/x.flac", encoder="", process=False)


@pytest.mark.parametrize("data", [b"not json", b"[1, 2]", b'{"process":"yes"}', b'{"abspath":3}'])
def test_invalid_records_raise(data):
    with pytest.raises(ValueError):
        FileInfo.from_json(data)


def test_run_config_default_flac_args():
    config = RunConfig(path=".", encoder="1.4.3")
    assert config.flac_args == ("-8f", "-j4")
    assert config.flac_args == DEFAULT_FLAC_ARGS