""" Character configuration records.

Each character ships a json config alongside its sprites:

    {
        "name": "Amy",
        "outfit": "casual",
        "emotion": "neutral",
        "description": "Childhood friend",
        "emotions": ["neutral", "happy", "sad"],
        "outfits": ["casual", "school"]
    }

Loading sprites is the host's business. The core only uses these records to
check actor directives against the characters that actually exist.
"""

import io
import json
import logging
import pathlib
from collections.abc import Iterable, Mapping, Iterator
from typing import Any, Optional, Union

from sabi.compiler import ast
from sabi.errors import BuildError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS:list[tuple[str, type]] = [
    ("name", str),
    ("outfit", str),
    ("emotion", str),
    ("description", str),
    ("emotions", list),
    ("outfits", list),
]

class CharacterConfig:
    def __init__(self, name:str, outfit:str, emotion:str, description:str, emotions:Iterable[str], outfits:Iterable[str]) -> None:
        self.name = name
        self.outfit = outfit
        self.emotion = emotion
        self.description = description
        self.emotions = list(emotions)
        self.outfits = list(outfits)

    def __repr__(self) -> str:
        return f'CharacterConfig({self.name!r}, outfit={self.outfit!r}, emotion={self.emotion!r})'

def load_character_data(data:Mapping[str, Any]) -> CharacterConfig:
    if not isinstance(data, Mapping):
        raise ValueError(f'character config must be a json object, got {data!r}')
    for key, t in REQUIRED_FIELDS:
        if key not in data:
            raise ValueError(f'character config missing "{key}"')
        if not isinstance(data[key], t):
            raise ValueError(f'character config "{key}" must be a {t.__name__}, got {data[key]!r}')
    for key in ("emotions", "outfits"):
        if not all(isinstance(x, str) for x in data[key]):
            raise ValueError(f'character config "{key}" must be a list of strings')

    character = CharacterConfig(
        data["name"],
        data["outfit"],
        data["emotion"],
        data["description"],
        data["emotions"],
        data["outfits"],
    )
    if character.emotion not in character.emotions:
        raise ValueError(f'default emotion "{character.emotion}" of {character.name} not in emotions {character.emotions}')
    if character.outfit not in character.outfits:
        raise ValueError(f'default outfit "{character.outfit}" of {character.name} not in outfits {character.outfits}')
    return character

def loads(data:str) -> CharacterConfig:
    return load_character_data(json.loads(data))

def load(f:Union[io.TextIOBase, Any]) -> CharacterConfig:
    return load_character_data(json.load(f))


class CharacterRoster:
    """ the known characters, keyed by name """

    def __init__(self, characters:Iterable[CharacterConfig]=()) -> None:
        self.characters:dict[str, CharacterConfig] = {}
        for character in characters:
            self.add(character)

    def add(self, character:CharacterConfig) -> None:
        if character.name in self.characters:
            raise ValueError(f'duplicate character "{character.name}"')
        self.characters[character.name] = character

    def get(self, name:str) -> Optional[CharacterConfig]:
        return self.characters.get(name)

    def __contains__(self, name:object) -> bool:
        return name in self.characters

    def __len__(self) -> int:
        return len(self.characters)

    def __iter__(self) -> Iterator[CharacterConfig]:
        return iter(self.characters.values())

    @classmethod
    def load_directory(cls, path:Union[str, pathlib.Path], encoding:str="utf-8") -> "CharacterRoster":
        """ loads every *.json under path, e.g. characters/Amy/config.json """
        roster = cls()
        for config_path in sorted(pathlib.Path(path).glob("**/*.json")):
            with open(config_path, "rt", encoding=encoding) as f:
                try:
                    roster.add(load(f))
                except ValueError as e:
                    raise ValueError(f'bad character config {config_path}') from e
            logger.debug(f'loaded character config {config_path}')
        logger.info(f'loaded {len(roster)} characters from {path}')
        return roster

    def check(self, statement:ast.Statement) -> None:
        """ Checks an actor directive against the roster.

        Raises
        ------
        BuildError
            if the statement names an unknown character or an emotion the
            character doesn't have
        """

        match statement:
            case ast.ActorSpawn() | ast.ActorDespawn() | ast.ActorEmotion() | ast.ActorLook() | ast.ActorMove():
                character = self.get(statement.character)
                if character is None:
                    raise BuildError(f'unknown character "{statement.character}"', statement.location)
                emotion:Optional[str] = None
                if isinstance(statement, ast.ActorEmotion):
                    emotion = statement.emotion
                elif isinstance(statement, ast.ActorSpawn):
                    emotion = statement.emotion
                if emotion is not None and emotion not in character.emotions:
                    raise BuildError(f'{character.name} has no emotion "{emotion}", expected one of {character.emotions}', statement.location)
            case _:
                pass
