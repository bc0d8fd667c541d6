""" Builds typed Acts from parse trees.

A pure structural transform: no expression is evaluated here. Everything the
playback engine relies on is validated up front (scene names unique, scenes
non-empty, directive arguments well formed, scene references resolvable) so
playback never meets a malformed statement.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Optional, Union

from sabi import util, playback
from sabi.character import CharacterRoster
from sabi.errors import BuildError
from sabi.compiler import ast
from sabi.compiler.parser import ParseNode

logger = logging.getLogger(__name__)

class Argument:
    """ one directive argument, positional if name is None """

    def __init__(self, name:Optional[str], kind:str, value:Union[str, float, ast.Concat], location:util.Location) -> None:
        self.name = name
        self.kind = kind
        self.value = value
        self.location = location

    def __repr__(self) -> str:
        return f'Argument({self.name!r}, {self.kind}, {self.value!r})'

def build_text(node:ParseNode) -> ast.Concat:
    parts:list[ast.Expression] = []
    for segment in node.children:
        if segment.rule == "literal":
            parts.append(ast.Literal(segment.text))
        elif segment.rule == "variable":
            parts.append(ast.Variable(segment.text))
        else:
            raise BuildError(f'unexpected {segment.rule} in string', segment.location)
    return ast.Concat(tuple(parts))

def build_argument(node:ParseNode) -> Argument:
    name_node = node.child("argument_name")
    value_node = node.children[-1]
    value:Union[str, float, ast.Concat]
    if value_node.rule == "string":
        value = build_text(value_node)
    elif value_node.rule == "number":
        value = float(value_node.text)
    elif value_node.rule == "identifier":
        value = value_node.text
    else:
        raise BuildError(f'unexpected {value_node.rule} as argument', value_node.location)
    return Argument(name_node.text if name_node else None, value_node.rule, value, node.location)

# argument converters, each takes an Argument and returns the field value or
# raises BuildError

def to_name(arg:Argument) -> str:
    """ identifiers or strings without variables """
    if arg.kind == "identifier":
        assert isinstance(arg.value, str)
        return arg.value
    if arg.kind == "string":
        assert isinstance(arg.value, ast.Concat)
        if arg.value.variables():
            raise BuildError("expected a name, got a string with variables", arg.location)
        return arg.value.source()
    raise BuildError(f'expected a name, got {arg.kind}', arg.location)

def to_text(arg:Argument) -> ast.Concat:
    if arg.kind != "string":
        raise BuildError(f'expected a quoted string, got {arg.kind}', arg.location)
    assert isinstance(arg.value, ast.Concat)
    return arg.value

def to_bool(arg:Argument) -> bool:
    if arg.kind == "identifier" and arg.value in ("true", "false"):
        return arg.value == "true"
    raise BuildError(f'expected true or false, got {arg.value!r}', arg.location)

def to_seconds(arg:Argument) -> float:
    if arg.kind != "number":
        raise BuildError(f'expected a number, got {arg.kind}', arg.location)
    assert isinstance(arg.value, float)
    if arg.value < 0:
        raise BuildError(f'duration must be non-negative, got {arg.value}', arg.location)
    return arg.value

def to_enum(enum_type:Any) -> Callable[[Argument], Any]:
    values = [x.value for x in enum_type]
    def convert(arg:Argument) -> Any:
        name = to_name(arg)
        try:
            return enum_type(name)
        except ValueError:
            raise BuildError(f'expected one of {util.human_list([repr(v) for v in values])}, got {name!r}', arg.location) from None
    return convert

class Param:
    def __init__(self, name:str, convert:Callable[[Argument], Any], required:bool=True, field:Optional[str]=None) -> None:
        self.name = name
        self.convert = convert
        self.required = required
        self.field = field or name

class Directive:
    """ binds positional and keyword arguments to params, converts them and
    hands the result to factory as keyword args """

    def __init__(self, keyword:str, params:Sequence[Param], factory:Callable[..., ast.Statement]) -> None:
        self.keyword = keyword
        self.params = params
        self.factory = factory

    def bind(self, arguments:Sequence[Argument], location:util.Location) -> dict[str, Any]:
        by_name = {p.name: p for p in self.params}
        bound:dict[str, Argument] = {}
        seen_keyword = False
        for i, arg in enumerate(arguments):
            if arg.name is None:
                if seen_keyword:
                    raise BuildError(f'positional argument after keyword argument in @{self.keyword}', arg.location)
                if i >= len(self.params):
                    raise BuildError(f'@{self.keyword} takes at most {len(self.params)} arguments, got {len(arguments)}', arg.location)
                bound[self.params[i].name] = arg
            else:
                seen_keyword = True
                if arg.name not in by_name:
                    raise BuildError(f'@{self.keyword} has no argument "{arg.name}", expected {util.human_list([p.name for p in self.params])}', arg.location)
                if arg.name in bound:
                    raise BuildError(f'argument "{arg.name}" given twice to @{self.keyword}', arg.location)
                bound[arg.name] = arg

        kwargs:dict[str, Any] = {}
        for param in self.params:
            if param.name in bound:
                kwargs[param.field] = param.convert(bound[param.name])
            elif param.required:
                raise BuildError(f'@{self.keyword} is missing required argument "{param.name}"', location)
        return kwargs

    def build(self, arguments:Sequence[Argument], location:util.Location) -> ast.Statement:
        return self.factory(location=location, **self.bind(arguments, location))

def build_choice(arguments:Sequence[Argument], location:util.Location) -> ast.Choice:
    """ @choice("text", scene, "text", scene, ...) """
    if len(arguments) < 2 or len(arguments) % 2 != 0:
        raise BuildError(f'@choice takes pairs of text and scene, got {len(arguments)} arguments', location)
    for arg in arguments:
        if arg.name is not None:
            raise BuildError("@choice does not take keyword arguments", arg.location)
    options = []
    for text_arg, scene_arg in zip(arguments[::2], arguments[1::2]):
        options.append(ast.ChoiceOption(to_text(text_arg), to_name(scene_arg)))
    return ast.Choice(tuple(options), location=location)

class VariadicDirective:
    def __init__(self, keyword:str, build:Callable[[Sequence[Argument], util.Location], ast.Statement]) -> None:
        self.keyword = keyword
        self.build = build

DIRECTIVES:Mapping[str, Union[Directive, VariadicDirective]] = {d.keyword: d for d in [
    Directive("background", [Param("background_id", to_name)], ast.BackgroundChange),
    Directive("gui", [
        Param("target", to_enum(ast.GuiTarget)),
        Param("sprite_id", to_name),
        Param("mode", to_enum(ast.ImageMode), required=False, field="image_mode"),
    ], ast.GuiChange),
    Directive("spawn", [
        Param("character", to_name),
        Param("emotion", to_name, required=False),
        Param("position", to_enum(ast.Position), required=False),
        Param("fade", to_bool, required=False, field="fading"),
    ], ast.ActorSpawn),
    Directive("despawn", [
        Param("character", to_name),
        Param("fade", to_bool, required=False, field="fading"),
    ], ast.ActorDespawn),
    Directive("emotion", [Param("character", to_name), Param("emotion", to_name)], ast.ActorEmotion),
    Directive("look", [Param("character", to_name), Param("direction", to_enum(ast.Direction))], ast.ActorLook),
    Directive("move", [Param("character", to_name), Param("position", to_enum(ast.Position))], ast.ActorMove),
    Directive("jump", [Param("scene", to_name)], ast.SceneChange),
    Directive("wait", [Param("seconds", to_seconds)], ast.Pause),
    VariadicDirective("choice", build_choice),
]}

def build_directive(node:ParseNode) -> ast.Statement:
    keyword = node.child("keyword")
    assert keyword is not None
    directive = DIRECTIVES.get(keyword.text)
    if directive is None:
        raise BuildError(f'unknown directive @{keyword.text}, expected one of {util.human_list(["@"+k for k in DIRECTIVES])}', keyword.location)
    arguments_node = node.child("arguments")
    arguments = [build_argument(a) for a in arguments_node.children] if arguments_node else []
    return directive.build(arguments, node.location)

def build_dialogue(node:ParseNode) -> ast.Dialogue:
    speaker = node.child("speaker")
    text = node.child("string")
    assert speaker is not None and text is not None
    return ast.Dialogue(speaker.text, build_text(text), location=node.location)

def build_statement(node:ParseNode) -> ast.Statement:
    if node.rule == "dialogue":
        return build_dialogue(node)
    elif node.rule == "directive":
        return build_directive(node)
    else:
        raise BuildError(f'unexpected {node.rule} in scene', node.location)

def build_scene(node:ParseNode) -> ast.Scene:
    name_node = node.child("scene_name")
    assert name_node is not None
    statements = [build_statement(c) for c in node.children if c.rule != "scene_name"]
    if len(statements) == 0:
        raise BuildError(f'scene "{name_node.text}" has no statements', node.location)
    return ast.Scene(name_node.text, statements, location=node.location)

def scene_references(statement:ast.Statement) -> list[str]:
    match statement:
        case ast.SceneChange():
            return [statement.scene]
        case ast.Choice():
            return [o.scene for o in statement.options]
        case _:
            return []

def build_scenes(tree:ParseNode, roster:Optional[CharacterRoster]=None) -> list[ast.Scene]:
    """ Builds and cross checks the scenes of an act parse tree.

    Parameters
    ----------
    tree : ParseNode
        parse tree rooted at an "act" node
    roster : CharacterRoster, optional
        if given, actor directives are checked against it

    Raises
    ------
    BuildError
        if the tree doesn't describe a playable act
    """

    if tree.rule != "act":
        raise BuildError(f'expected an act, got {tree.rule}', tree.location)

    scenes:list[ast.Scene] = []
    names:set[str] = set()
    for scene_node in tree.children_of("scene"):
        scene = build_scene(scene_node)
        if scene.name in names:
            raise BuildError(f'duplicate scene name "{scene.name}"', scene_node.location)
        names.add(scene.name)
        scenes.append(scene)

    if len(scenes) == 0:
        raise BuildError("script produced no playable content", tree.location)

    for scene in scenes:
        for statement in scene.statements:
            for target in scene_references(statement):
                if target not in names:
                    raise BuildError(f'scene "{scene.name}" refers to undefined scene "{target}"', statement.location)
            if roster is not None:
                roster.check(statement)

    return scenes

def build_act(tree:ParseNode, name:str="", roster:Optional[CharacterRoster]=None) -> playback.Act:
    scenes = build_scenes(tree, roster)
    act = playback.Act(scenes)
    act.name = name
    logger.debug(f'built act "{name}" with {len(scenes)} scenes and {act.total_statements()} statements')
    return act
