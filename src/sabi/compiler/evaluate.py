""" Expression evaluation against a host supplied binding context.

Evaluation is pure: nothing here touches playback state. The host passes a
Bindings on every call rather than the Act owning one, so the player's name
can change between (or during) plays.
"""

import logging
from collections.abc import Mapping
from typing import Optional

from sabi import config
from sabi.errors import EvaluationError
from sabi.compiler import ast, parser

logger = logging.getLogger(__name__)

class Bindings:
    """ variable name to display string. """

    def __init__(self, values:Optional[Mapping[str, str]]=None) -> None:
        self.values:dict[str, str] = dict(values) if values is not None else {}

    @classmethod
    def for_player(cls, player_name:str, **extra:str) -> "Bindings":
        """ bindings with the player name bound under the configured key """
        values = {config.Settings.bindings.player_name: player_name}
        values.update(extra)
        return cls(values)

    def lookup(self, name:str) -> str:
        try:
            return self.values[name]
        except KeyError as ke:
            raise EvaluationError(name) from ke

    def with_values(self, **values:str) -> "Bindings":
        merged = dict(self.values)
        merged.update(values)
        return Bindings(merged)

    def __contains__(self, name:object) -> bool:
        return name in self.values

    def __repr__(self) -> str:
        return f'Bindings({self.values!r})'

def evaluate(expression:ast.Expression, bindings:Bindings, missing:Optional[str]=None) -> str:
    """ Resolves an expression to a display string.

    Parameters
    ----------
    expression : ast.Expression
        the expression to evaluate
    bindings : Bindings
        values for variable references
    missing : str, optional
        if given, substituted for unresolved variables (with a warning)
        instead of raising

    Returns
    -------
    out : str
        literal and variable segments joined in authored order

    Raises
    ------
    EvaluationError
        if a variable has no binding and missing is None
    """

    if isinstance(expression, ast.Literal):
        return expression.text
    elif isinstance(expression, ast.Variable):
        try:
            return bindings.lookup(expression.name)
        except EvaluationError:
            if missing is None:
                raise
            logger.warning(f'no binding for "{expression.name}", substituting {missing!r}')
            return missing
    elif isinstance(expression, ast.Concat):
        return "".join(evaluate(part, bindings, missing) for part in expression.parts)
    else:
        raise ValueError(f'cannot evaluate {expression!r}')

def resolve_speaker(speaker:str, bindings:Bindings, missing:Optional[str]=None) -> str:
    """ speakers are plain names or a variable marker like [_PLAYERNAME_] """
    m = parser.PLACEHOLDER_RE.fullmatch(speaker)
    if not m:
        return speaker
    return evaluate(ast.Variable(m.group(1)), bindings, missing)

def evaluate_dialogue(dialogue:ast.Dialogue, bindings:Bindings, missing:Optional[str]=None) -> tuple[str, str]:
    """ (speaker, text) ready for display """
    return resolve_speaker(dialogue.speaker, bindings, missing), evaluate(dialogue.text, bindings, missing)

def format_dialogue(dialogue:ast.Dialogue, bindings:Bindings, missing:Optional[str]=None) -> str:
    speaker, text = evaluate_dialogue(dialogue, bindings, missing)
    return f'{speaker}: {text}'
