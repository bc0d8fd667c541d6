""" Tests for the load entry points """

import logging
import pathlib

import pytest

from sabi import loader
from sabi.errors import LoadError, ScriptSyntaxError, BuildError
from . import SCENARIO_SCRIPT

def test_load():
    act = loader.load(SCENARIO_SCRIPT, "chapter1")
    assert act.name == "chapter1"
    assert len(act.scenes) == 2

def test_load_syntax_error():
    with pytest.raises(LoadError) as excinfo:
        loader.load('scene a {\n    Amy "oops\n}\n', "broken")
    error = excinfo.value
    assert error.logical_name == "broken"
    assert isinstance(error.cause, ScriptSyntaxError)
    assert error.__cause__ is error.cause
    assert error.cause.line == 2
    assert "broken" in str(error)

def test_load_build_error():
    with pytest.raises(LoadError) as excinfo:
        loader.load("", "empty")
    assert isinstance(excinfo.value.cause, BuildError)
    assert "no playable content" in str(excinfo.value)

def test_load_file(tmp_path:pathlib.Path):
    path = tmp_path / "chapter1.sabi"
    path.write_text(SCENARIO_SCRIPT, encoding="utf-8")
    act = loader.load_file(path)
    assert act.name == "chapter1"
    assert loader.logical_name("scripts/chapter2.sabi") == "chapter2"

def test_load_file_extension(tmp_path:pathlib.Path, caplog:pytest.LogCaptureFixture):
    path = tmp_path / "chapter1.txt"
    path.write_text(SCENARIO_SCRIPT, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="sabi.loader"):
        act = loader.load_file(str(path))
    assert act.name == "chapter1"
    assert ".sabi" in caplog.text

def test_load_file_encoding(tmp_path:pathlib.Path):
    path = tmp_path / "latin.sabi"
    path.write_bytes('scene a {\n    Amy "café"\n}\n'.encode("latin-1"))
    with pytest.raises(UnicodeDecodeError):
        loader.load_file(path)
    act = loader.load_file(path, encoding="latin-1")
    assert act.scenes[0].statements[0].text.source() == "café" # type: ignore[union-attr]

def test_load_file_missing(tmp_path:pathlib.Path):
    with pytest.raises(OSError):
        loader.load_file(tmp_path / "nope.sabi")

def test_load_file_byte_order_mark(tmp_path:pathlib.Path):
    path = tmp_path / "bom.sabi"
    path.write_bytes(b"\xef\xbb\xbf" + SCENARIO_SCRIPT.encode("utf-8"))
    act = loader.load_file(path)
    assert act.name == "bom"
    assert act.scenes[0].name == "intro"
