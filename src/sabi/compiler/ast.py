""" Typed script structures produced by the builder.

Statements are a closed set of frozen dataclasses. Anything that dispatches on
them (the builder, the session dispatcher, history formatting) matches every
variant and ends with typing.assert_never so adding a variant without updating
consumers is caught by the type checker.

Expressions are unevaluated. Evaluation against a binding context happens in
sabi.compiler.evaluate so bindings can change between plays without
re-parsing.
"""

import abc
import enum
from dataclasses import dataclass, field
from collections.abc import Sequence
from typing import Optional, Union

from sabi import util

class Expression(abc.ABC):
    @abc.abstractmethod
    def source(self) -> str:
        """ the expression as authored, variables left as markers """
        ...

@dataclass(frozen=True)
class Literal(Expression):
    text: str

    def source(self) -> str:
        return self.text

@dataclass(frozen=True)
class Variable(Expression):
    name: str

    def source(self) -> str:
        return f'[_{self.name}_]'

@dataclass(frozen=True)
class Concat(Expression):
    """ literal and variable segments in authored order """
    parts: tuple[Expression, ...]

    def source(self) -> str:
        return "".join(p.source() for p in self.parts)

    def variables(self) -> list[str]:
        names:list[str] = []
        for part in self.parts:
            if isinstance(part, Variable):
                names.append(part.name)
            elif isinstance(part, Concat):
                names.extend(part.variables())
        return names

class GuiTarget(enum.Enum):
    TEXTBOX = "textbox"
    NAMEBOX = "namebox"

class ImageMode(enum.Enum):
    AUTO = "auto"
    SLICED = "sliced"

class Position(enum.Enum):
    CENTER = "center"
    FAR_LEFT = "far left"
    FAR_RIGHT = "far right"
    LEFT = "left"
    RIGHT = "right"
    INVISIBLE_LEFT = "invisible left"
    INVISIBLE_RIGHT = "invisible right"

    def percentage(self) -> float:
        """ horizontal stage position as percent of screen width """
        return POSITION_PERCENTAGES[self]

POSITION_PERCENTAGES = {
    Position.INVISIBLE_LEFT: -40.,
    Position.FAR_LEFT: 5.,
    Position.LEFT: 20.,
    Position.CENTER: 35.,
    Position.RIGHT: 50.,
    Position.FAR_RIGHT: 65.,
    Position.INVISIBLE_RIGHT: 140.,
}

class Direction(enum.Enum):
    LEFT = "left"
    RIGHT = "right"

@dataclass(frozen=True)
class Dialogue:
    speaker: str
    text: Concat
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class BackgroundChange:
    background_id: str
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class GuiChange:
    target: GuiTarget
    sprite_id: str
    image_mode: ImageMode = ImageMode.AUTO
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ActorSpawn:
    character: str
    emotion: Optional[str] = None
    position: Position = Position.CENTER
    fading: bool = False
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ActorDespawn:
    character: str
    fading: bool = False
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ActorEmotion:
    character: str
    emotion: str
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ActorLook:
    character: str
    direction: Direction
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ActorMove:
    character: str
    position: Position
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class SceneChange:
    scene: str
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class ChoiceOption:
    text: Concat
    scene: str

@dataclass(frozen=True)
class Choice:
    options: tuple[ChoiceOption, ...]
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

@dataclass(frozen=True)
class Pause:
    seconds: float
    location: Optional[util.Location] = field(default=None, compare=False, repr=False)

Statement = Union[
    Dialogue,
    BackgroundChange,
    GuiChange,
    ActorSpawn,
    ActorDespawn,
    ActorEmotion,
    ActorLook,
    ActorMove,
    SceneChange,
    Choice,
    Pause,
]

ActorStatement = Union[ActorSpawn, ActorDespawn, ActorEmotion, ActorLook, ActorMove]

class Scene:
    """ A named, immutable run of statements plus a cursor into them.

    The cursor is owned by the Act that holds this scene. Only playback moves
    it. """

    def __init__(self, name:str, statements:Sequence[Statement], location:Optional[util.Location]=None) -> None:
        if len(statements) == 0:
            raise ValueError(f'scene "{name}" must have at least one statement')
        self.name = name
        self.statements:tuple[Statement, ...] = tuple(statements)
        self.location = location
        self.index = 0

    def __len__(self) -> int:
        return len(self.statements)

    @property
    def current(self) -> Statement:
        return self.statements[self.index]

    def __repr__(self) -> str:
        return f'Scene({self.name!r}, {len(self.statements)} statements, index={self.index})'
