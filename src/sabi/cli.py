""" sabi command line: check scripts and play them in a terminal. """

import sys
import os
import time
import argparse
import contextlib
import logging
from typing import Optional, TextIO, assert_never

from sabi import config, loader, serialization
from sabi.character import CharacterRoster
from sabi.compiler import ast, evaluate
from sabi.errors import LoadError, SaveDataError
from sabi.session import Session, Presenter

class TextPresenter(Presenter):
    """ prints statements as plain text lines """

    def __init__(self, out:TextIO, text_speed:float=0.) -> None:
        self.out = out
        self.text_speed = text_speed
        self.choices:list[tuple[str, str]] = []

    def write(self, text:str) -> None:
        if self.text_speed <= 0:
            self.out.write(text)
        else:
            for c in text:
                self.out.write(c)
                self.out.flush()
                time.sleep(1/self.text_speed)
        self.out.write("\n")
        self.out.flush()

    def say(self, speaker:str, text:str) -> None:
        self.write(f'{speaker}: {text}')

    def change_background(self, background_id:str) -> None:
        self.write(f'[background: {background_id}]')

    def change_gui(self, change:ast.GuiChange) -> None:
        self.write(f'[{change.target.value}: {change.sprite_id} ({change.image_mode.value})]')

    def actor(self, operation:ast.ActorStatement) -> None:
        match operation:
            case ast.ActorSpawn():
                emotion = f', {operation.emotion}' if operation.emotion else ""
                self.write(f'[{operation.character} enters{emotion} at {operation.position.value} ({operation.position.percentage():.0f}%)]')
            case ast.ActorDespawn():
                self.write(f'[{operation.character} leaves]')
            case ast.ActorEmotion():
                self.write(f'[{operation.character} looks {operation.emotion}]')
            case ast.ActorLook():
                self.write(f'[{operation.character} faces {operation.direction.value}]')
            case ast.ActorMove():
                self.write(f'[{operation.character} moves to {operation.position.value}]')
            case _:
                assert_never(operation)

    def offer_choice(self, options:list[tuple[str, str]]) -> None:
        self.choices = options
        for i, (text, _) in enumerate(options):
            self.write(f'  {i+1}) {text}')

    def pause(self, seconds:float) -> None:
        time.sleep(seconds)

    def rewind_step(self, statement:ast.Statement) -> None:
        self.write("[rewind]")

    def finish(self) -> None:
        self.write("[the end]")

def check(args:argparse.Namespace, roster:Optional[CharacterRoster]) -> int:
    failures = 0
    for path in args.scripts:
        try:
            act = loader.load_file(path, roster)
        except (LoadError, OSError, UnicodeDecodeError) as e:
            failures += 1
            print(f'{path}: {e}', file=sys.stderr)
        else:
            print(f'{path}: ok, {len(act.scenes)} scenes, {act.total_statements()} statements')
    return 1 if failures > 0 else 0

def play(args:argparse.Namespace, roster:Optional[CharacterRoster], logger:logging.Logger) -> int:
    try:
        act = loader.load_file(args.script, roster)
    except (LoadError, OSError, UnicodeDecodeError) as e:
        print(f'{args.script}: {e}', file=sys.stderr)
        return 1

    if args.save and os.path.exists(args.save):
        try:
            with open(args.save, "rb") as f:
                serialization.read_playback(act, f)
        except SaveDataError as e:
            print(f'{args.save}: {e}', file=sys.stderr)
            return 1
        logger.info(f'resumed from {args.save}')

    presenter = TextPresenter(sys.stdout, config.Settings.cli.text_speed)
    bindings = evaluate.Bindings.for_player(args.player_name)
    session = Session(act, presenter, bindings, missing=config.Settings.history.missing_binding)

    while not session.finished:
        if session.tick():
            continue
        if session.finished:
            break

        try:
            command = input(config.Settings.cli.prompt).strip().lower()
        except EOFError:
            break

        if session.pending_choice is not None and command.isdigit():
            choice = int(command) - 1
            if 0 <= choice < len(presenter.choices):
                session.choose(presenter.choices[choice][1])
            else:
                print(f'pick a number between 1 and {len(presenter.choices)}')
        elif command == "":
            if session.pending_choice is not None:
                print("pick one of the choices")
            else:
                session.release()
        elif command == "r":
            if not session.begin_rewind():
                print("nothing to rewind to")
        elif command == "h":
            for line in session.history():
                print(f'  {line}')
        elif command == "q":
            break
        else:
            print("enter to continue, r to rewind, h for history, q to quit")

    if args.save:
        with open(args.save, "wb") as f:
            serialization.write_playback(act, f)
        logger.info(f'saved playback to {args.save}')
    return 0

def main() -> None:
    with contextlib.ExitStack() as context_stack:
        # options shared by every command
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument("--characters", nargs="?", type=str, default=None,
                help="directory of character json configs to check actor directives against")

        parser = argparse.ArgumentParser(description="check and play sabi scripts")
        parser.add_argument("--config", nargs="?", type=str, default=None,
                help="toml file with config overrides")
        subparsers = parser.add_subparsers(dest="command", required=True)

        check_parser = subparsers.add_parser("check", parents=[common], help="parse and build scripts, reporting any errors")
        check_parser.add_argument("scripts", nargs="+", type=str,
                help="script files to check")

        play_parser = subparsers.add_parser("play", parents=[common], help="play a script in the terminal")
        play_parser.add_argument("script", type=str,
                help="script file to play")
        play_parser.add_argument("-p", "--player-name", type=str, default=None,
                help="name bound to [_PLAYERNAME_]")
        play_parser.add_argument("-s", "--save", nargs="?", type=str, default=None,
                help="resume from this file if it exists and save to it on exit")

        args = parser.parse_args()

        if args.config:
            config_file = context_stack.enter_context(open(args.config, "rt"))
            config.load_config(config_file)

        logging.basicConfig(
                stream=sys.stderr,
                format=config.Settings.logging.format,
                level=config.Settings.logging.level,
        )
        logger = logging.getLogger(__name__)

        if args.command == "play" and args.player_name is None:
            args.player_name = config.Settings.bindings.default_player_name

        roster = None
        if args.characters:
            try:
                roster = CharacterRoster.load_directory(args.characters)
            except ValueError as e:
                print(f'{args.characters}: {e}', file=sys.stderr)
                sys.exit(1)
            logger.info(f'loaded {len(roster)} characters')

        if args.command == "check":
            sys.exit(check(args, roster))
        else:
            sys.exit(play(args, roster, logger))
