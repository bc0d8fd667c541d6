""" Saving and restoring playback state with msgpack.

Only the playback cursor and the history log are saved. Statements are
referenced by (scene index, statement index) so a save is only valid against
the same compiled act, which we check by name and by bounds on restore.
"""

import io
import logging
from collections.abc import Mapping
from typing import Any

import msgpack # type: ignore

from sabi import playback
from sabi.errors import SaveDataError
from sabi.history import HistoryEntry, StatementEntry, DescriptorEntry

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

ENTRY_STATEMENT = 0
ENTRY_DESCRIPTOR = 1

def encode_entry(entry:HistoryEntry) -> list[Any]:
    if isinstance(entry, StatementEntry):
        return [ENTRY_STATEMENT, entry.scene_index, entry.statement_index]
    else:
        return [ENTRY_DESCRIPTOR, entry.text]

def decode_entry(act:playback.Act, data:Any) -> HistoryEntry:
    if not isinstance(data, list) or len(data) == 0:
        raise SaveDataError(f'bad history entry {data!r}')
    if data[0] == ENTRY_DESCRIPTOR and len(data) == 2 and isinstance(data[1], str):
        return DescriptorEntry(data[1])
    if data[0] == ENTRY_STATEMENT and len(data) == 3 and all(isinstance(x, int) for x in data[1:]):
        scene_index, statement_index = data[1], data[2]
        if not 0 <= scene_index < len(act.scenes):
            raise SaveDataError(f'history entry scene index {scene_index} out of range')
        scene = act.scenes[scene_index]
        if not 0 <= statement_index < len(scene):
            raise SaveDataError(f'history entry statement index {statement_index} out of range for scene "{scene.name}"')
        return StatementEntry(scene.statements[statement_index], scene_index, statement_index)
    raise SaveDataError(f'bad history entry {data!r}')

def encode_playback(act:playback.Act) -> dict[str, Any]:
    return {
        "v": FORMAT_VERSION,
        "act": act.name,
        "cursor": [act.scene_index, act.statement_index, act.delivered],
        "history": [encode_entry(e) for e in act.history],
    }

def decode_playback(act:playback.Act, state:Mapping[str, Any]) -> None:
    """ validates state fully before touching act """
    if not isinstance(state, Mapping):
        raise SaveDataError("playback state must be a map")
    if state.get("v") != FORMAT_VERSION:
        raise SaveDataError(f'unsupported playback format version {state.get("v")!r}')
    if state.get("act") != act.name:
        raise SaveDataError(f'playback was saved for act {state.get("act")!r}, not {act.name!r}')

    cursor = state.get("cursor")
    if not isinstance(cursor, list) or len(cursor) != 3 or not isinstance(cursor[0], int) or not isinstance(cursor[1], int) or not isinstance(cursor[2], bool):
        raise SaveDataError(f'bad cursor {cursor!r}')
    history_data = state.get("history")
    if not isinstance(history_data, list):
        raise SaveDataError("history must be a list")
    entries = [decode_entry(act, x) for x in history_data]

    scene_index, statement_index, delivered = cursor
    try:
        act.restore_cursor(scene_index, statement_index, delivered)
    except ValueError as e:
        raise SaveDataError(f'bad cursor {cursor!r}') from e
    act.history.restore(entries)
    logger.info(f'restored "{act.name}" at {act.cursor} with {len(entries)} history entries')

def save_playback(act:playback.Act) -> bytes:
    return msgpack.packb(encode_playback(act))

def load_playback(act:playback.Act, packed:bytes) -> None:
    """ Restores cursor and history saved with save_playback.

    Raises
    ------
    SaveDataError
        if packed isn't valid playback state for act. act is unchanged.
    """

    try:
        state = msgpack.unpackb(packed)
    except (ValueError, TypeError, msgpack.UnpackException) as e:
        raise SaveDataError("could not decode playback state") from e
    decode_playback(act, state)

def write_playback(act:playback.Act, f:io.IOBase) -> int:
    return f.write(save_playback(act))

def read_playback(act:playback.Act, f:io.IOBase) -> None:
    load_playback(act, f.read())
