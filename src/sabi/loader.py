""" Loading scripts into playable Acts.

The only entry point hosts need for loading. Reading from storage happens
here, never inside the parser.
"""

import logging
import pathlib
from typing import Optional, Union

from sabi import config, playback
from sabi.character import CharacterRoster
from sabi.compiler import parser, builder
from sabi.errors import LoadError, ScriptSyntaxError, BuildError

logger = logging.getLogger(__name__)

def load(source_text:str, logical_name:str, roster:Optional[CharacterRoster]=None) -> playback.Act:
    """ Compiles script text into an Act positioned at its first statement.

    Parameters
    ----------
    source_text : str
        the script
    logical_name : str
        name for the act, usually derived from the script's file name
    roster : CharacterRoster, optional
        characters to check actor directives against

    Raises
    ------
    LoadError
        wrapping the ScriptSyntaxError or BuildError that stopped the load
    """

    try:
        tree = parser.parse(source_text)
        act = builder.build_act(tree, logical_name, roster)
    except (ScriptSyntaxError, BuildError) as e:
        logger.info(f'failed to load "{logical_name}": {e}')
        raise LoadError(logical_name, e) from e
    logger.info(f'loaded "{logical_name}" with {len(act.scenes)} scenes')
    return act

def logical_name(path:Union[str, pathlib.Path]) -> str:
    """ the file name without directories or extension """
    return pathlib.Path(path).stem

def load_file(path:Union[str, pathlib.Path], roster:Optional[CharacterRoster]=None, encoding:Optional[str]=None) -> playback.Act:
    """ reads and loads a script file, naming the act after the file.

    I/O and decoding errors propagate as OSError/UnicodeDecodeError. """
    path = pathlib.Path(path)
    if path.suffix != f'.{config.Settings.script.extension}':
        logger.warning(f'{path} does not have the .{config.Settings.script.extension} extension')
    with open(path, "rt", encoding=encoding or config.Settings.script.encoding) as f:
        source_text = f.read()
    return load(source_text, logical_name(path), roster)
