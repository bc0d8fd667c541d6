""" Shared scripts and helpers for sabi tests. """

from typing import Any

from sabi import playback
from sabi.compiler import ast
from sabi.errors import ActFinished
from sabi.session import Presenter

SCENARIO_SCRIPT = """\
scene intro {
    Amy "Hello"
    Amy "[_PLAYERNAME_], hi."
}

scene park {
    Ben "Bye"
}
"""

# one of every directive, with dialogue mixed in
DIRECTIVE_SCRIPT = """\
# a comment before anything
scene intro {
    @background(park_day)
    @gui(textbox, box_blue, mode=sliced)
    @spawn(Amy, emotion=happy, position="far left", fade=true)
    Amy "Hi [_PLAYERNAME_]!"
    @emotion(Amy, sad)
    @look(Amy, right)
    @move(Amy, center)
    @wait(0.5)
    [_PLAYERNAME_] "Hello Amy." # the player talks
    @choice("Walk to the park", park, "Go home, [_PLAYERNAME_]", home)
}

scene park {
    @spawn(Ben)
    Ben "Nice day."
    @jump(home)
}

scene home {
    @despawn(Amy, fade=true)
    Amy "Bye"
}
"""

def advance_until_finished(act:playback.Act, limit:int=1000) -> int:
    """ advances until ActFinished, returning how many advances succeeded """
    count = 0
    while count < limit:
        try:
            act.advance()
        except ActFinished:
            return count
        count += 1
    raise AssertionError(f'act did not finish in {limit} advances')

class RecordingPresenter(Presenter):
    """ remembers every call so tests can check what a Session presented """

    def __init__(self) -> None:
        self.calls:list[tuple[str, Any]] = []
        self.finished = False

    def say(self, speaker:str, text:str) -> None:
        self.calls.append(("say", (speaker, text)))

    def change_background(self, background_id:str) -> None:
        self.calls.append(("background", background_id))

    def change_gui(self, change:ast.GuiChange) -> None:
        self.calls.append(("gui", change))

    def actor(self, operation:ast.ActorStatement) -> None:
        self.calls.append(("actor", operation))

    def offer_choice(self, options:list[tuple[str, str]]) -> None:
        self.calls.append(("choice", options))

    def pause(self, seconds:float) -> None:
        self.calls.append(("pause", seconds))

    def rewind_step(self, statement:ast.Statement) -> None:
        self.calls.append(("rewind", statement))

    def finish(self) -> None:
        self.finished = True

    def last(self) -> tuple[str, Any]:
        return self.calls[-1]
