""" Host side driver for an Act.

A Session is the single control point that drives playback once per host
tick. It owns the host's blocking flag: after dispatching a statement whose
on screen effects take time (dialogue scrolling, fades, moves, waits, choices)
it stays blocked until the presenter calls release() (or choose() for a
choice). Playback errors are handled here as ordinary control flow, the end
of the act just finishes the session.

Rewinding uses the two phase protocol from the act: begin_rewind() asks for
the distance, then each tick takes one rewind_one_step() so the presenter can
animate every step back.
"""

import abc
import logging
from typing import Optional, assert_never

from sabi import util, playback
from sabi.compiler import ast, evaluate
from sabi.errors import ActFinished, CannotRewind

class Presenter(abc.ABC):
    """ what the rendering layer provides to a Session """

    @abc.abstractmethod
    def say(self, speaker:str, text:str) -> None: ...

    @abc.abstractmethod
    def change_background(self, background_id:str) -> None: ...

    @abc.abstractmethod
    def change_gui(self, change:ast.GuiChange) -> None: ...

    @abc.abstractmethod
    def actor(self, operation:ast.ActorStatement) -> None: ...

    @abc.abstractmethod
    def offer_choice(self, options:list[tuple[str, str]]) -> None:
        """ options are (display text, target scene) pairs """
        ...

    @abc.abstractmethod
    def pause(self, seconds:float) -> None: ...

    def rewind_step(self, statement:ast.Statement) -> None:
        pass

    def finish(self) -> None:
        pass

def is_blocking(statement:ast.Statement) -> bool:
    """ does this statement's presentation take time or player input """
    match statement:
        case ast.Dialogue() | ast.Choice() | ast.ActorMove():
            return True
        case ast.ActorSpawn() | ast.ActorDespawn():
            return statement.fading
        case ast.Pause():
            return statement.seconds > 0
        case ast.BackgroundChange() | ast.GuiChange() | ast.ActorEmotion() | ast.ActorLook() | ast.SceneChange():
            return False
        case _:
            assert_never(statement)

class Session:
    def __init__(self, act:playback.Act, presenter:Presenter, bindings:evaluate.Bindings, missing:Optional[str]=None) -> None:
        self.logger = logging.getLogger(util.fullname(self))
        self.act = act
        self.presenter = presenter
        self.bindings = bindings
        self.missing = missing
        self.blocking = False
        self.finished = False
        self.rewind_remaining = 0
        self.pending_choice:Optional[ast.Choice] = None

    def tick(self) -> bool:
        """ advances at most one step. returns True if anything happened """
        if self.finished:
            return False
        if self.rewind_remaining > 0:
            self._rewind_step()
            return True
        if self.blocking:
            return False

        try:
            self.act.advance()
        except ActFinished:
            self.logger.info(f'act "{self.act.name}" finished')
            self.finished = True
            self.presenter.finish()
            return False

        statement = self.act.current()
        assert statement is not None
        self.dispatch(statement)
        return True

    def dispatch(self, statement:ast.Statement) -> None:
        """ Hands a statement to the presenter and sets the blocking flag.

        If evaluating the statement's text raises EvaluationError the session
        is left unblocked with no pending choice and the presenter is not
        called. The host can fix its bindings and dispatch act.current()
        again, or just tick on.
        """

        match statement:
            case ast.Dialogue():
                speaker, text = evaluate.evaluate_dialogue(statement, self.bindings, self.missing)
                self.blocking = True
                self.presenter.say(speaker, text)
            case ast.BackgroundChange():
                self.blocking = is_blocking(statement)
                self.presenter.change_background(statement.background_id)
            case ast.GuiChange():
                self.blocking = is_blocking(statement)
                self.presenter.change_gui(statement)
            case ast.ActorSpawn() | ast.ActorDespawn() | ast.ActorEmotion() | ast.ActorLook() | ast.ActorMove():
                self.blocking = is_blocking(statement)
                self.presenter.actor(statement)
            case ast.SceneChange():
                self.blocking = is_blocking(statement)
                self.act.change_scene(statement.scene)
            case ast.Choice():
                options = [(evaluate.evaluate(o.text, self.bindings, self.missing), o.scene) for o in statement.options]
                self.blocking = True
                self.pending_choice = statement
                self.presenter.offer_choice(options)
            case ast.Pause():
                self.blocking = is_blocking(statement)
                self.presenter.pause(statement.seconds)
            case _:
                assert_never(statement)

    def release(self) -> None:
        """ the presenter finished the current statement's effects """
        if self.pending_choice is not None:
            raise ValueError("waiting on a choice, use choose()")
        self.blocking = False

    def choose(self, scene:str) -> None:
        if self.pending_choice is None:
            raise ValueError("no choice is pending")
        if scene not in [o.scene for o in self.pending_choice.options]:
            raise ValueError(f'"{scene}" is not one of the offered choices')
        self.act.change_scene(scene)
        self.pending_choice = None
        self.blocking = False

    def can_rewind(self) -> bool:
        if self.pending_choice is not None:
            return False
        try:
            self.act.rewind_distance()
        except CannotRewind:
            return False
        return True

    def begin_rewind(self) -> bool:
        """ starts stepping back to the previous dialogue in this scene.

        returns False (and does nothing) if there is nothing to rewind to. """
        if self.pending_choice is not None:
            return False
        try:
            self.rewind_remaining = self.act.rewind_distance()
        except CannotRewind as e:
            self.logger.debug(f'cannot rewind: {e}')
            return False
        self.blocking = False
        return True

    def _rewind_step(self) -> None:
        self.act.rewind_one_step()
        self.rewind_remaining -= 1
        statement = self.act.current()
        assert statement is not None
        self.presenter.rewind_step(statement)
        if self.rewind_remaining == 0:
            # landed on the previous dialogue, show it again
            self.dispatch(statement)

    def history(self) -> list[str]:
        return self.act.summarize_history(self.bindings, self.missing)
