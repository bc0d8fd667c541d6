""" Utility methods broadly applicable across the codebase. """

from __future__ import annotations

import logging
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

def fullname(o:Any) -> str:
    # from https://stackoverflow.com/a/2020083/553580
    # Python makes no guarantees as to whether the __module__ special
    # attribute is defined, so we take a more circumspect approach.

    if isinstance(o, type):
        klass = o
    else:
        klass = o.__class__

    module = klass.__module__
    if module is None or module == str.__class__.__module__:
        return klass.__qualname__  # Avoid reporting __builtin__
    else:
        return module + '.' + klass.__qualname__

class Location(NamedTuple):
    """ a position in script source text.

    offset is a character offset, byte_offset is the offset into the utf-8
    encoding of the source. line and column are 1-based. """
    offset: int
    byte_offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f'{self.line}:{self.column}'


def human_list(items:list[str], conjunction:str="or") -> str:
    """ joins items for error messages: "a", "a or b", "a, b or c" """
    if len(items) == 0:
        return ""
    if len(items) == 1:
        return items[0]
    return f'{", ".join(items[:-1])} {conjunction} {items[-1]}'
