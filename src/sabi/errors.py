""" Error taxonomy for sabi.

Two families that hosts must keep apart:

 * loading failures (ScriptSyntaxError, BuildError wrapped in LoadError) end
   a load attempt and should be surfaced to the author.
 * PlaybackError and its subclasses are expected end conditions (end of act,
   nothing to rewind to) or content errors during play (unknown scene). Hosts
   branch on them, they are never fatal.
"""

from typing import Optional

from sabi import util

class SabiError(Exception):
    pass

class ScriptSyntaxError(SabiError):
    """ malformed script text. always carries a location. """

    def __init__(self, message:str, location:util.Location, expected:str="") -> None:
        self.message = message
        self.location = location
        self.expected = expected
        detail = f'{message} at {location}'
        if expected:
            detail = f'{detail}, expected {expected}'
        super().__init__(detail)

    @property
    def line(self) -> int:
        return self.location.line

    @property
    def column(self) -> int:
        return self.location.column

    @property
    def offset(self) -> int:
        return self.location.offset

    @property
    def byte_offset(self) -> int:
        return self.location.byte_offset

class BuildError(SabiError):
    """ well formed script that does not describe a valid act """

    def __init__(self, message:str, location:Optional[util.Location]=None) -> None:
        self.message = message
        self.location = location
        if location is not None:
            super().__init__(f'{message} at {location}')
        else:
            super().__init__(message)

class LoadError(SabiError):
    """ a script could not be loaded. the cause is chained via __cause__ and
    also available as `cause`. """

    def __init__(self, logical_name:str, cause:SabiError) -> None:
        self.logical_name = logical_name
        self.cause = cause
        super().__init__(f'could not load script "{logical_name}": {cause}')

class EvaluationError(SabiError):
    """ an expression referenced a binding that was not supplied """

    def __init__(self, name:str) -> None:
        self.name = name
        super().__init__(f'no binding for variable "{name}"')

class SaveDataError(SabiError):
    pass

class PlaybackError(SabiError):
    pass

class ActFinished(PlaybackError):
    def __init__(self, act_name:str) -> None:
        self.act_name = act_name
        super().__init__(f'act "{act_name}" has no more statements')

class UnknownScene(PlaybackError):
    def __init__(self, name:str) -> None:
        self.name = name
        super().__init__(f'no scene named "{name}"')

class CannotRewind(PlaybackError):
    pass

class AtSceneStart(CannotRewind):
    def __init__(self, scene_name:str) -> None:
        self.scene_name = scene_name
        super().__init__(f'already at the start of scene "{scene_name}"')

class NoDialogueToRewindTo(CannotRewind):
    def __init__(self, scene_name:str, index:int) -> None:
        self.scene_name = scene_name
        self.index = index
        super().__init__(f'no dialogue before statement {index} in scene "{scene_name}"')
