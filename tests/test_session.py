""" Tests for the host side Session driver """

import pytest

from sabi import loader, playback
from sabi.compiler import ast, evaluate
from sabi.compiler.ast import Concat, Literal
from sabi.errors import EvaluationError
from sabi.session import Session, is_blocking
from . import RecordingPresenter

@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()

@pytest.fixture
def session(directive_act:playback.Act, presenter:RecordingPresenter, bindings:evaluate.Bindings) -> Session:
    return Session(directive_act, presenter, bindings)

def test_scenario_session(scenario_act:playback.Act, presenter:RecordingPresenter, bindings:evaluate.Bindings):
    session = Session(scenario_act, presenter, bindings)
    assert session.tick()
    assert presenter.last() == ("say", ("Amy", "Hello"))
    # dialogue blocks until the presenter releases it
    assert session.blocking
    assert not session.tick()
    assert len(presenter.calls) == 1

    session.release()
    assert session.tick()
    assert presenter.last() == ("say", ("Amy", "Sam, hi."))
    session.release()
    assert session.tick()
    assert presenter.last() == ("say", ("Ben", "Bye"))
    session.release()

    assert not session.tick()
    assert session.finished
    assert presenter.finished
    assert not session.tick()
    assert session.history() == ["Amy: Hello", "Amy: Sam, hi.", "Ben: Bye"]

def test_dispatch_every_directive(session:Session, presenter:RecordingPresenter):
    def step() -> tuple:
        assert session.tick()
        return presenter.last()

    assert step() == ("background", "park_day")
    assert not session.blocking
    assert step() == ("gui", ast.GuiChange(ast.GuiTarget.TEXTBOX, "box_blue", ast.ImageMode.SLICED))
    assert not session.blocking

    assert step() == ("actor", ast.ActorSpawn("Amy", "happy", ast.Position.FAR_LEFT, True))
    # fading spawn blocks
    assert session.blocking
    session.release()

    assert step() == ("say", ("Amy", "Hi Sam!"))
    session.release()
    assert step() == ("actor", ast.ActorEmotion("Amy", "sad"))
    assert not session.blocking
    assert step() == ("actor", ast.ActorLook("Amy", ast.Direction.RIGHT))
    assert step() == ("actor", ast.ActorMove("Amy", ast.Position.CENTER))
    assert session.blocking
    session.release()
    assert step() == ("pause", 0.5)
    assert session.blocking
    session.release()
    assert step() == ("say", ("Sam", "Hello Amy."))
    session.release()

    assert step() == ("choice", [("Walk to the park", "park"), ("Go home, Sam", "home")])
    assert session.blocking
    with pytest.raises(ValueError):
        session.release()
    with pytest.raises(ValueError):
        session.choose("intro")
    assert not session.tick()

    session.choose("park")
    assert not session.blocking
    assert step() == ("actor", ast.ActorSpawn("Ben"))
    assert step() == ("say", ("Ben", "Nice day."))
    session.release()

    # the jump is handled by the session itself, nothing to present
    calls = len(presenter.calls)
    assert session.tick()
    assert len(presenter.calls) == calls
    assert session.act.cursor == (2, 0)

    assert step() == ("actor", ast.ActorDespawn("Amy", fading=True))
    session.release()
    assert step() == ("say", ("Amy", "Bye"))
    session.release()
    assert not session.tick()
    assert session.finished

    assert session.history() == [
        "Amy: Hi Sam!",
        "Sam: Hello Amy.",
        "— scene changed —",
        "Ben: Nice day.",
        "— scene changed —",
        "Amy: Bye",
    ]

def test_choose_without_choice(session:Session):
    with pytest.raises(ValueError):
        session.choose("park")

def test_rewind(presenter:RecordingPresenter, bindings:evaluate.Bindings):
    act = loader.load('scene a {\n    Amy "one"\n    @background(x)\n    @spawn(Ben)\n    Ben "two"\n}\n', "rewind")
    session = Session(act, presenter, bindings)
    assert not session.can_rewind()
    assert not session.begin_rewind()

    session.tick()
    session.release()
    session.tick()
    session.tick()
    session.tick()
    assert presenter.last() == ("say", ("Ben", "two"))
    assert session.blocking
    assert session.can_rewind()

    assert session.begin_rewind()
    assert not session.blocking
    assert session.tick()
    assert presenter.last() == ("rewind", ast.ActorSpawn("Ben"))
    assert session.tick()
    assert presenter.last() == ("rewind", ast.BackgroundChange("x"))
    assert session.tick()
    # landing on the dialogue shows it again and waits on it
    assert presenter.calls[-2:] == [
        ("rewind", ast.Dialogue("Amy", Concat((Literal("one"),)))),
        ("say", ("Amy", "one")),
    ]
    assert session.blocking
    assert act.cursor == (0, 0)

    session.release()
    session.tick()
    assert presenter.last() == ("background", "x")
    assert session.history() == ["Amy: one", "Ben: two"]

def test_missing_bindings(scenario_act:playback.Act, presenter:RecordingPresenter):
    session = Session(scenario_act, presenter, evaluate.Bindings(), missing="someone")
    session.tick()
    session.release()
    session.tick()
    assert presenter.last() == ("say", ("Amy", "someone, hi."))

@pytest.mark.parametrize("statement,blocking", [
    (ast.Dialogue("Amy", Concat(())), True),
    (ast.BackgroundChange("x"), False),
    (ast.GuiChange(ast.GuiTarget.NAMEBOX, "y"), False),
    (ast.ActorSpawn("Amy"), False),
    (ast.ActorSpawn("Amy", fading=True), True),
    (ast.ActorDespawn("Amy"), False),
    (ast.ActorDespawn("Amy", fading=True), True),
    (ast.ActorEmotion("Amy", "sad"), False),
    (ast.ActorLook("Amy", ast.Direction.LEFT), False),
    (ast.ActorMove("Amy", ast.Position.LEFT), True),
    (ast.SceneChange("a"), False),
    (ast.Choice(()), True),
    (ast.Pause(0.), False),
    (ast.Pause(1.), True),
])
def test_is_blocking(statement:ast.Statement, blocking:bool):
    assert is_blocking(statement) == blocking

def test_unbound_choice_leaves_session_unblocked(presenter:RecordingPresenter, bindings:evaluate.Bindings):
    act = loader.load('scene a {\n    @choice("Go [_NICK_]", b)\n}\nscene b {\n    Ben "hi"\n}\n', "choices")
    session = Session(act, presenter, evaluate.Bindings())
    with pytest.raises(EvaluationError) as excinfo:
        session.tick()
    assert excinfo.value.name == "NICK"
    assert presenter.calls == []
    assert session.pending_choice is None
    assert not session.blocking
    # nothing to wait on, so release is fine
    session.release()

    # dispatching again with the binding supplied offers the choice
    session.bindings = bindings.with_values(NICK="Sammy")
    statement = act.current()
    assert statement is not None
    session.dispatch(statement)
    assert presenter.last() == ("choice", [("Go Sammy", "b")])
    assert session.pending_choice is statement
    assert session.blocking
    session.choose("b")
    assert session.tick()
    assert presenter.last() == ("say", ("Ben", "hi"))

def test_unbound_dialogue_leaves_session_unblocked(scenario_act:playback.Act, presenter:RecordingPresenter):
    session = Session(scenario_act, presenter, evaluate.Bindings())
    session.tick()
    session.release()
    with pytest.raises(EvaluationError):
        session.tick()
    assert presenter.calls == [("say", ("Amy", "Hello"))]
    assert not session.blocking
    # ticking on moves past the line that could not be shown
    assert session.tick()
    assert presenter.last() == ("say", ("Ben", "Bye"))
