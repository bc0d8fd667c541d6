""" Tests for evaluating expressions against bindings """

import logging

import pytest

from sabi import playback
from sabi.compiler import ast, evaluate
from sabi.compiler.ast import Concat, Literal, Variable
from sabi.errors import EvaluationError

def test_literal_and_variable(bindings:evaluate.Bindings):
    assert evaluate.evaluate(Literal("Hello"), bindings) == "Hello"
    assert evaluate.evaluate(Variable("PLAYERNAME"), bindings) == "Sam"
    assert evaluate.evaluate(Concat(()), bindings) == ""

def test_order_preserved():
    bindings = evaluate.Bindings({"A": "1", "B": "2"})
    expression = Concat((Variable("B"), Literal("-"), Variable("A"), Literal("-"), Variable("B")))
    assert evaluate.evaluate(expression, bindings) == "2-1-2"

def test_nested_concat(bindings:evaluate.Bindings):
    expression = Concat((Literal("<"), Concat((Variable("PLAYERNAME"), Literal("!"))), Literal(">")))
    assert evaluate.evaluate(expression, bindings) == "<Sam!>"
    assert expression.variables() == ["PLAYERNAME"]
    assert expression.source() == "<[_PLAYERNAME_]!>"

def test_missing_binding():
    with pytest.raises(EvaluationError) as excinfo:
        evaluate.evaluate(Concat((Literal("Hi "), Variable("PLAYERNAME"))), evaluate.Bindings())
    assert excinfo.value.name == "PLAYERNAME"

def test_missing_binding_substitution(caplog:pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="sabi.compiler.evaluate"):
        text = evaluate.evaluate(Concat((Literal("Hi "), Variable("NICKNAME"), Literal("."))), evaluate.Bindings(), missing="???")
    assert text == "Hi ???."
    assert "NICKNAME" in caplog.text

def test_for_player():
    bindings = evaluate.Bindings.for_player("Sam", NICKNAME="Sammy")
    assert bindings.lookup("PLAYERNAME") == "Sam"
    assert bindings.lookup("NICKNAME") == "Sammy"
    assert "PLAYERNAME" in bindings
    assert "OTHER" not in bindings

def test_with_values(bindings:evaluate.Bindings):
    renamed = bindings.with_values(PLAYERNAME="Alex")
    assert renamed.lookup("PLAYERNAME") == "Alex"
    assert bindings.lookup("PLAYERNAME") == "Sam"

def test_resolve_speaker(bindings:evaluate.Bindings):
    assert evaluate.resolve_speaker("Amy", bindings) == "Amy"
    assert evaluate.resolve_speaker("[_PLAYERNAME_]", bindings) == "Sam"
    with pytest.raises(EvaluationError):
        evaluate.resolve_speaker("[_NICKNAME_]", bindings)
    assert evaluate.resolve_speaker("[_NICKNAME_]", bindings, missing="") == ""

def test_scenario_dialogue(scenario_act:playback.Act, bindings:evaluate.Bindings):
    statement = scenario_act.scenes[0].statements[1]
    assert isinstance(statement, ast.Dialogue)
    assert evaluate.evaluate(statement.text, bindings) == "Sam, hi."
    assert evaluate.evaluate_dialogue(statement, bindings) == ("Amy", "Sam, hi.")
    assert evaluate.format_dialogue(statement, bindings) == "Amy: Sam, hi."

def test_evaluation_is_pure(scenario_act:playback.Act, bindings:evaluate.Bindings):
    scenario_act.advance()
    cursor = scenario_act.cursor
    history_length = len(scenario_act.history)
    for scene in scenario_act.scenes:
        for statement in scene.statements:
            assert isinstance(statement, ast.Dialogue)
            evaluate.format_dialogue(statement, bindings)
    assert scenario_act.cursor == cursor
    assert len(scenario_act.history) == history_length

def test_package_exports():
    import sabi
    import sabi.compiler
    # the submodule stays reachable through the package
    assert sabi.compiler.evaluate is evaluate
    assert sabi.compiler.evaluate.Bindings is sabi.Bindings
    assert sabi.compiler.Bindings is evaluate.Bindings
    assert callable(evaluate.evaluate)
