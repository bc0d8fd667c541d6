from typing import Generator

import pytest

from sabi import config, loader, playback
from sabi.character import CharacterConfig, CharacterRoster
from sabi.compiler import evaluate
from . import SCENARIO_SCRIPT, DIRECTIVE_SCRIPT

# some logging to turn on if we like
#logging.getLogger("sabi.playback").level = logging.DEBUG

@pytest.fixture
def scenario_act() -> playback.Act:
    return loader.load(SCENARIO_SCRIPT, "scenario")

@pytest.fixture
def directive_act() -> playback.Act:
    return loader.load(DIRECTIVE_SCRIPT, "directives")

@pytest.fixture
def bindings() -> evaluate.Bindings:
    return evaluate.Bindings.for_player("Sam")

@pytest.fixture
def roster() -> CharacterRoster:
    return CharacterRoster([
        CharacterConfig("Amy", "casual", "neutral", "childhood friend", ["neutral", "happy", "sad"], ["casual", "school"]),
        CharacterConfig("Ben", "suit", "neutral", "the neighbor", ["neutral"], ["suit"]),
    ])

@pytest.fixture
def restore_settings() -> Generator[None, None, None]:
    """ reloads the built-in config after tests that replace it """
    yield
    config.load_config()
