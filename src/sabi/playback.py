""" Playback of a compiled Act.

The Act owns the only mutable navigation state: which scene is current, the
current scene's statement index, and the history log. Playback is driven
synchronously by a single host control point, once per tick, and only while
the host's blocking flag is clear. Every operation either completes or raises
leaving the cursor and history exactly as they were.

The first statement of the act (and of a scene entered with change_scene) is
positioned but not yet delivered: the next advance() delivers it rather than
stepping past it. So an act with N statements takes exactly N successful
advance() calls and the next one raises ActFinished.
"""

import logging
from collections.abc import Sequence
from typing import Optional

from sabi import config, util
from sabi.compiler import ast, evaluate
from sabi.errors import ActFinished, UnknownScene, AtSceneStart, NoDialogueToRewindTo
from sabi.history import History

class Act:
    def __init__(self, scenes:Sequence[ast.Scene], name:str="") -> None:
        if len(scenes) == 0:
            raise ValueError("an act must have at least one scene")
        lookup:dict[str, int] = {}
        for i, scene in enumerate(scenes):
            if scene.name in lookup:
                raise ValueError(f'duplicate scene name "{scene.name}"')
            lookup[scene.name] = i

        self.logger = logging.getLogger(util.fullname(self))
        self.name = name
        self.scenes:tuple[ast.Scene, ...] = tuple(scenes)
        self.history = History()
        self._scene_lookup = lookup
        self._scene_index = 0
        self._delivered = False

    def __repr__(self) -> str:
        return f'Act({self.name!r}, {len(self.scenes)} scenes, cursor={self.cursor})'

    @property
    def scene(self) -> ast.Scene:
        return self.scenes[self._scene_index]

    @property
    def scene_index(self) -> int:
        return self._scene_index

    @property
    def statement_index(self) -> int:
        return self.scene.index

    @property
    def cursor(self) -> tuple[int, int]:
        return (self._scene_index, self.scene.index)

    @property
    def delivered(self) -> bool:
        """ has the statement at the cursor been delivered by advance() """
        return self._delivered

    def total_statements(self) -> int:
        return sum(len(s) for s in self.scenes)

    def scene_named(self, name:str) -> ast.Scene:
        try:
            return self.scenes[self._scene_lookup[name]]
        except KeyError:
            raise UnknownScene(name)

    def current(self) -> Optional[ast.Statement]:
        if len(self.scenes) == 0:
            return None
        return self.scene.current

    def advance(self) -> None:
        """ Moves to and delivers the next statement, recording it in history.

        Crosses into the next scene automatically at the end of a scene.

        Raises
        ------
        ActFinished
            if the last statement of the last scene was already delivered.
            nothing changes.
        """

        if not self._delivered:
            self._delivered = True
            self._record()
            return

        scene = self.scene
        if scene.index + 1 < len(scene):
            scene.index += 1
        elif self._scene_index + 1 < len(self.scenes):
            self._scene_index += 1
            self.scene.index = 0
            self.logger.debug(f'entered scene "{self.scene.name}"')
        else:
            raise ActFinished(self.name)
        self._record()

    def _record(self) -> None:
        self.logger.debug(f'at {self.scene.name}:{self.scene.index}')
        self.history.record(self.scene.current, self._scene_index, self.scene.index)

    def change_scene(self, name:str) -> None:
        """ Jumps to the start of the named scene. Its first statement is
        delivered by the next advance().

        Raises
        ------
        UnknownScene
            if no scene has exactly that name. nothing changes.
        """

        if name not in self._scene_lookup:
            raise UnknownScene(name)
        self._scene_index = self._scene_lookup[name]
        self.scene.index = 0
        self._delivered = False
        descriptor = config.Settings.history.scene_change_descriptor
        if descriptor:
            self.history.describe(descriptor)
        self.logger.debug(f'changed to scene "{name}"')

    def rewind_distance(self) -> int:
        """ How many rewind_one_step() calls land on the most recent prior
        dialogue in the current scene.

        Rewinding never crosses back into a previous scene.

        Raises
        ------
        AtSceneStart
            if the cursor is on the first statement of the scene
        NoDialogueToRewindTo
            if no dialogue precedes the cursor in this scene
        """

        scene = self.scene
        index = scene.index
        if index == 0:
            raise AtSceneStart(scene.name)
        for i in range(index - 1, -1, -1):
            if isinstance(scene.statements[i], ast.Dialogue):
                return index - i
        raise NoDialogueToRewindTo(scene.name, index)

    def rewind_one_step(self) -> None:
        """ steps back one statement, stopping at the start of the scene.

        no history is recorded, replaying with advance() records again. """
        scene = self.scene
        if scene.index > 0:
            scene.index -= 1

    def summarize_history(self, bindings:evaluate.Bindings, missing:Optional[str]=None) -> list[str]:
        return self.history.summarize(bindings, missing)

    def restore_cursor(self, scene_index:int, statement_index:int, delivered:bool) -> None:
        """ puts the cursor at an exact position, used when restoring saved
        playback. resets every other scene's index. """
        if not 0 <= scene_index < len(self.scenes):
            raise ValueError(f'scene index {scene_index} out of range')
        if not 0 <= statement_index < len(self.scenes[scene_index]):
            raise ValueError(f'statement index {statement_index} out of range for scene "{self.scenes[scene_index].name}"')
        if not delivered and statement_index != 0:
            raise ValueError("only the first statement of a scene can be undelivered")
        for scene in self.scenes:
            scene.index = 0
        self._scene_index = scene_index
        self.scene.index = statement_index
        self._delivered = delivered
