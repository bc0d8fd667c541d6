""" Script parsing

Turns script source text into a generic parse tree of ParseNodes. No
evaluation and no knowledge of which directives exist, that's the builder's
job.

    # ACT         := { NEWLINE } { SCENE { NEWLINE } } EOF
    # SCENE       := "scene" SCENE_NAME "{" NEWLINE { STATEMENT | NEWLINE } "}"
    # SCENE_NAME  := IDENT | STRING
    # STATEMENT   := ( DIALOGUE | DIRECTIVE ) NEWLINE
    # DIALOGUE    := SPEAKER STRING
    # SPEAKER     := IDENT | PLACEHOLDER
    # DIRECTIVE   := "@" IDENT [ "(" [ ARGUMENT { "," ARGUMENT } ] ")" ]
    # ARGUMENT    := [ IDENT "=" ] VALUE
    # VALUE       := IDENT | STRING | NUMBER
    # STRING      := '"' { CHAR | ESCAPE | PLACEHOLDER } '"'
    # PLACEHOLDER := "[_" NAME "_]"
    # ESCAPE      := "\" ( '"' | "\" | "n" | "t" | "[" )

"#" starts a comment that runs to the end of the line.

For example:

    scene intro {
        @background(park_day)
        Amy "Hello"
        Amy "[_PLAYERNAME_], hi."
        @spawn(Ben, emotion="happy", position="far left", fade=true)
    }
"""

import re
import logging
from collections.abc import Iterator, Sequence
from typing import Optional, NoReturn

from sabi import util
from sabi.errors import ScriptSyntaxError

logger = logging.getLogger(__name__)

TOKEN_RE = re.compile(r"""
    (?P<SKIP>[ \t\r]+|\#[^\n]*)
   |(?P<NEWLINE>\n)
   |(?P<PLACEHOLDER>\[_[A-Za-z0-9]+(?:_[A-Za-z0-9]+)*_\])
   |(?P<STRING>"(?:[^"\\\n]|\\[^\n])*")
   |(?P<UNTERMINATED>")
   |(?P<NUMBER>-?[0-9]+(?:\.[0-9]+)?)
   |(?P<IDENT>[^\W\d]\w*)
   |(?P<LBRACE>\{)
   |(?P<RBRACE>\})
   |(?P<LPAREN>\()
   |(?P<RPAREN>\))
   |(?P<COMMA>,)
   |(?P<EQUALS>=)
   |(?P<AT>@)
""", re.VERBOSE)

PLACEHOLDER_RE = re.compile(r"\[_([A-Za-z0-9]+(?:_[A-Za-z0-9]+)*)_\]")
SEGMENT_RE = re.compile(r"""
    (?P<variable>\[_[A-Za-z0-9]+(?:_[A-Za-z0-9]+)*_\])
   |(?P<escape>\\.)
   |(?P<literal>(?:[^\\\[]|\[(?!_[A-Za-z0-9]+(?:_[A-Za-z0-9]+)*_\]))+)
""", re.VERBOSE)

ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "[": "["}

TOKEN_DESCRIPTIONS = {
    "NEWLINE": "end of line",
    "PLACEHOLDER": "variable marker",
    "STRING": "string",
    "NUMBER": "number",
    "IDENT": "identifier",
    "LBRACE": '"{"',
    "RBRACE": '"}"',
    "LPAREN": '"("',
    "RPAREN": '")"',
    "COMMA": '","',
    "EQUALS": '"="',
    "AT": '"@"',
    "EOF": "end of file",
}

SCENE_KEYWORD = "scene"

class Token:
    def __init__(self, kind:str, value:str, location:util.Location) -> None:
        self.kind = kind
        self.value = value
        self.location = location

    def describe(self) -> str:
        if self.kind in ("NEWLINE", "EOF"):
            return TOKEN_DESCRIPTIONS[self.kind]
        return f'{TOKEN_DESCRIPTIONS[self.kind]} {self.value!r}'

    def __repr__(self) -> str:
        return f'Token({self.kind}, {self.value!r}, {self.location})'


class ParseNode:
    """ A node in the parse tree.

    rule names the grammar production this node matched. leaves carry the
    matched text in `text`, inner nodes carry children. `location` is where
    the node starts in the source. """

    def __init__(self, rule:str, location:util.Location, children:Optional[list["ParseNode"]]=None, text:str="") -> None:
        self.rule = rule
        self.location = location
        self.children:list[ParseNode] = children if children is not None else []
        self.text = text

    def child(self, rule:str) -> Optional["ParseNode"]:
        return next((c for c in self.children if c.rule == rule), None)

    def children_of(self, rule:str) -> list["ParseNode"]:
        return [c for c in self.children if c.rule == rule]

    def __eq__(self, other:object) -> bool:
        if not isinstance(other, ParseNode):
            return NotImplemented
        return (self.rule, self.location, self.text, self.children) == (other.rule, other.location, other.text, other.children)

    def __repr__(self) -> str:
        return f'ParseNode({self.rule}, {self.text!r}, {len(self.children)} children)'


def tokenize(source:str) -> Iterator[Token]:
    """ splits source into tokens, tracking line, column and byte offsets as
    we go. ends with a single EOF token. """
    pos = 0
    line = 1
    line_start = 0
    byte_offset = 0
    while pos < len(source):
        location = util.Location(pos, byte_offset, line, pos - line_start + 1)
        m = TOKEN_RE.match(source, pos)
        if not m:
            raise ScriptSyntaxError(f'unexpected character {source[pos]!r}', location)
        kind = m.lastgroup
        assert kind is not None
        value = m.group(0)
        if kind == "UNTERMINATED":
            raise ScriptSyntaxError("unterminated string", location, expected='closing \'"\' before the end of the line')
        if kind != "SKIP":
            yield Token(kind, value, location)
        pos = m.end()
        byte_offset += len(value.encode("utf8"))
        if kind == "NEWLINE":
            line += 1
            line_start = pos
    yield Token("EOF", "", util.Location(pos, byte_offset, line, pos - line_start + 1))


def parse_string(token:Token) -> ParseNode:
    """ splits a STRING token into literal and variable segments.

    escapes are resolved here so literal segments hold display text. adjacent
    literal text (including escapes) is merged into one segment. """
    raw = token.value[1:-1]
    node = ParseNode("string", token.location, text=token.value)
    base = token.location
    pos = 0
    pending:list[str] = []
    pending_location:Optional[util.Location] = None

    def segment_location(i:int) -> util.Location:
        # strings never span lines, +1 for the opening quote
        return util.Location(
            base.offset + 1 + i,
            base.byte_offset + 1 + len(raw[:i].encode("utf8")),
            base.line,
            base.column + 1 + i,
        )

    def flush() -> None:
        nonlocal pending, pending_location
        if pending:
            assert pending_location is not None
            node.children.append(ParseNode("literal", pending_location, text="".join(pending)))
        pending = []
        pending_location = None

    while pos < len(raw):
        m = SEGMENT_RE.match(raw, pos)
        # the token regex guarantees backslashes are followed by something
        assert m is not None
        if m.lastgroup == "variable":
            flush()
            name = PLACEHOLDER_RE.fullmatch(m.group(0)).group(1) # type: ignore[union-attr]
            node.children.append(ParseNode("variable", segment_location(pos), text=name))
        elif m.lastgroup == "escape":
            escaped = m.group(0)[1]
            if escaped not in ESCAPES:
                raise ScriptSyntaxError(f'invalid escape sequence {m.group(0)!r}', segment_location(pos), expected=util.human_list([f'\\{x}' for x in ESCAPES]))
            if pending_location is None:
                pending_location = segment_location(pos)
            pending.append(ESCAPES[escaped])
        else:
            if pending_location is None:
                pending_location = segment_location(pos)
            pending.append(m.group(0))
        pos = m.end()
    flush()
    return node


class Parser:
    """ recursive descent over the token stream, one method per production """

    def __init__(self, source:str) -> None:
        self.source = source
        self.tokens = list(tokenize(source))
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def next(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "EOF":
            self.pos += 1
        return token

    def accept(self, kind:str) -> Optional[Token]:
        if self.peek().kind == kind:
            return self.next()
        return None

    def expect(self, kinds:Sequence[str], expected:Optional[str]=None) -> Token:
        token = self.peek()
        if token.kind not in kinds:
            self.fail(token, expected or util.human_list([TOKEN_DESCRIPTIONS[k] for k in kinds]))
        return self.next()

    def fail(self, token:Token, expected:str) -> NoReturn:
        raise ScriptSyntaxError(f'unexpected {token.describe()}', token.location, expected=expected)

    def skip_newlines(self) -> None:
        while self.accept("NEWLINE"):
            pass

    def parse_act(self) -> ParseNode:
        act = ParseNode("act", self.peek().location)
        self.skip_newlines()
        while self.peek().kind != "EOF":
            token = self.peek()
            if token.kind != "IDENT" or token.value != SCENE_KEYWORD:
                self.fail(token, f'"{SCENE_KEYWORD}"')
            act.children.append(self.parse_scene())
            self.skip_newlines()
        return act

    def parse_scene(self) -> ParseNode:
        keyword = self.next()
        scene = ParseNode("scene", keyword.location)
        name_token = self.expect(["IDENT", "STRING"], expected="scene name")
        if name_token.kind == "STRING":
            name_node = parse_string(name_token)
            if name_node.child("variable") is not None:
                raise ScriptSyntaxError("scene names cannot contain variables", name_token.location)
            name = "".join(c.text for c in name_node.children)
        else:
            name = name_token.value
        scene.children.append(ParseNode("scene_name", name_token.location, text=name))
        self.expect(["LBRACE"])
        self.expect(["NEWLINE"])
        while True:
            token = self.peek()
            if token.kind == "NEWLINE":
                self.next()
            elif token.kind == "RBRACE":
                self.next()
                break
            elif token.kind == "EOF":
                self.fail(token, '"}" to close scene ' + repr(name))
            else:
                scene.children.append(self.parse_statement())
        return scene

    def parse_statement(self) -> ParseNode:
        token = self.peek()
        if token.kind == "AT":
            statement = self.parse_directive()
        elif token.kind in ("IDENT", "PLACEHOLDER"):
            statement = self.parse_dialogue()
        else:
            self.fail(token, 'a dialogue line, a directive or "}"')
        self.expect(["NEWLINE"])
        return statement

    def parse_dialogue(self) -> ParseNode:
        speaker_token = self.next()
        dialogue = ParseNode("dialogue", speaker_token.location)
        speaker = ParseNode("speaker", speaker_token.location, text=speaker_token.value)
        if speaker_token.kind == "PLACEHOLDER":
            name = PLACEHOLDER_RE.fullmatch(speaker_token.value).group(1) # type: ignore[union-attr]
            speaker.children.append(ParseNode("variable", speaker_token.location, text=name))
        else:
            speaker.children.append(ParseNode("identifier", speaker_token.location, text=speaker_token.value))
        dialogue.children.append(speaker)
        text_token = self.expect(["STRING"], expected="quoted dialogue text")
        dialogue.children.append(parse_string(text_token))
        return dialogue

    def parse_directive(self) -> ParseNode:
        at = self.next()
        directive = ParseNode("directive", at.location)
        keyword = self.expect(["IDENT"], expected="directive name")
        directive.children.append(ParseNode("keyword", keyword.location, text=keyword.value))
        if self.peek().kind == "LPAREN":
            directive.children.append(self.parse_arguments())
        return directive

    def parse_arguments(self) -> ParseNode:
        lparen = self.next()
        arguments = ParseNode("arguments", lparen.location)
        if self.accept("RPAREN"):
            return arguments
        while True:
            arguments.children.append(self.parse_argument())
            if self.accept("RPAREN"):
                return arguments
            self.expect(["COMMA", "RPAREN"])

    def parse_argument(self) -> ParseNode:
        token = self.expect(["IDENT", "STRING", "NUMBER"], expected="argument")
        argument = ParseNode("argument", token.location)
        if token.kind == "IDENT" and self.accept("EQUALS"):
            argument.children.append(ParseNode("argument_name", token.location, text=token.value))
            token = self.expect(["IDENT", "STRING", "NUMBER"], expected="argument value")
        argument.children.append(self.value_node(token))
        return argument

    def value_node(self, token:Token) -> ParseNode:
        if token.kind == "STRING":
            return parse_string(token)
        elif token.kind == "NUMBER":
            return ParseNode("number", token.location, text=token.value)
        else:
            return ParseNode("identifier", token.location, text=token.value)


def parse(source:str) -> ParseNode:
    """ Parses script source text into a parse tree rooted at an "act" node.

    Parameters
    ----------
    source : str
        the full text of a script

    Returns
    -------
    out : ParseNode
        the parse tree

    Raises
    ------
    ScriptSyntaxError
        if source does not match the grammar, with the location of the first
        offending token
    """
    act = Parser(source).parse_act()
    logger.debug(f'parsed {len(act.children)} scenes')
    return act
