""" Script compiler for sabi

Scripts are plain text. A script is an act made of named scenes, each an
ordered run of statements: dialogue lines ("speaker" plus quoted text) and
directives ("@keyword(args)") that change backgrounds, move actors around,
jump between scenes, offer choices and so on.

Compilation happens in two stages:

 * parser: text to a generic parse tree. fails with ScriptSyntaxError,
   always with a location.
 * builder: parse tree to typed ast structures (Scenes of Statements, wrapped
   in a playback Act). fails with BuildError when the script is well formed
   but not playable, e.g. an empty scene or a directive missing arguments.

Dialogue text may embed variable markers like [_PLAYERNAME_]. These are kept
as unevaluated Expressions and resolved by evaluate against bindings the host
supplies at display time.

The builder is imported explicitly (sabi.compiler.builder) since it depends on
sabi.playback, which depends on this package.
"""

from .parser import parse, ParseNode
from .ast import Statement, Expression, Scene
from .evaluate import Bindings
