""" sabi: a script compiler and playback engine for visual novels.

Hosts load a script into an Act, then step through it once per tick:

    act = sabi.load(source_text, "chapter1")
    bindings = sabi.Bindings.for_player("Sam")
    act.advance()
    statement = act.current()

sabi.session.Session wraps this loop with the blocking flag and exhaustive
statement dispatch for hosts that don't want to write their own.
"""

from .loader import load, load_file
from .playback import Act
from .compiler.evaluate import Bindings
from .errors import (
    SabiError,
    ScriptSyntaxError,
    BuildError,
    LoadError,
    EvaluationError,
    SaveDataError,
    PlaybackError,
    ActFinished,
    UnknownScene,
    CannotRewind,
    AtSceneStart,
    NoDialogueToRewindTo,
)
