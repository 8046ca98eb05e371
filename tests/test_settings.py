# tests/test_settings.py
import pytest

from ndef_text_qt5.config.settings import Settings, load_settings


def test_packaged_defaults():
    s = load_settings()
    assert s == Settings()
    assert s.max_pages == 48
    assert s.block_pages == 4


def test_override_file(tmp_path):
    p = tmp_path / "custom.ini"
    p.write_text("[reader]\nmax_pages = 0x80\n[app]\nlog_level = debug\n", encoding="utf-8")
    s = load_settings(str(p))
    assert s.max_pages == 128
    assert s.log_level == "DEBUG"
    # untouched keys keep their defaults
    assert s.delay_ms == Settings().delay_ms
    assert s.title == Settings().title


def test_invalid_integer(tmp_path):
    p = tmp_path / "bad.ini"
    p.write_text("[writer]\ndelay_ms = soon\n", encoding="utf-8")
    with pytest.raises(ValueError, match="delay_ms"):
        load_settings(str(p))


def test_zero_block_pages_rejected(tmp_path):
    p = tmp_path / "bad.ini"
    p.write_text("[reader]\nblock_pages = 0\n", encoding="utf-8")
    with pytest.raises(ValueError, match="block_pages"):
        load_settings(str(p))
