""" History log of visited statements, rendered for a history panel.

Entries are recorded raw and evaluated only when summarized, so a summary
always reflects the binding context in effect at summary time even for lines
recorded under different bindings.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Optional, Union

from sabi import config
from sabi.compiler import ast, evaluate

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class StatementEntry:
    """ a played statement and where it came from """
    statement: ast.Statement
    scene_index: int
    statement_index: int

@dataclass(frozen=True)
class DescriptorEntry:
    """ free text, e.g. a scene change marker """
    text: str

HistoryEntry = Union[StatementEntry, DescriptorEntry]

class History:
    """ Append only record of what was played, in visit order.

    Repeats are kept: a statement replayed after a rewind appears again. """

    def __init__(self) -> None:
        self._entries:list[HistoryEntry] = []

    def record(self, statement:ast.Statement, scene_index:int, statement_index:int) -> None:
        self._entries.append(StatementEntry(statement, scene_index, statement_index))

    def describe(self, text:str) -> None:
        self._entries.append(DescriptorEntry(text))

    @property
    def entries(self) -> Sequence[HistoryEntry]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def summarize(self, bindings:evaluate.Bindings, missing:Optional[str]=None) -> list[str]:
        """ One display line per dialogue entry and per descriptor.

        Dialogue is formatted as "speaker: text" with variables resolved
        against bindings. Other statements are not shown. Unresolved
        variables are replaced by `missing`, which defaults to the configured
        history.missing_binding. """

        if missing is None:
            missing = config.Settings.history.missing_binding
        lines:list[str] = []
        for entry in self._entries:
            if isinstance(entry, DescriptorEntry):
                lines.append(entry.text)
            elif isinstance(entry.statement, ast.Dialogue):
                lines.append(evaluate.format_dialogue(entry.statement, bindings, missing))
        return lines

    def restore(self, entries:Sequence[HistoryEntry]) -> None:
        """ replaces the log wholesale. only for restoring saved playback. """
        self._entries = list(entries)
