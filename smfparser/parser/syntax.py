"""
Parse tree for material description files.

This module wraps the lark grammar engine and converts its ``Tree``/``Token``
output into :class:`SyntaxNode`, a closed, immutable node type tagged with a
:class:`NodeKind`. The semantic layer only ever sees ``SyntaxNode`` objects and
dispatches on their kind.
"""

from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from pathlib import Path

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput
from loguru import logger

from smfparser.config import ParserConfig
from smfparser.parser.errors import GrammarRejected


class NodeKind(Enum):
    """Kinds of nodes produced by the grammar."""

    MATERIAL = auto()
    IDENTIFIER = auto()
    STRING = auto()
    INTEGER = auto()
    SIGNED_INTEGER = auto()
    FLOAT = auto()
    DOUBLE = auto()
    NON_INT = auto()
    SIGNED_NON_INT = auto()
    ARRAY = auto()
    SHADER_BLOCK = auto()
    VARIABLE_DECLARATION = auto()
    SETUP_PROXIES = auto()
    RENDER_PROXIES = auto()
    PROXY = auto()
    PROXY_PARAMETER = auto()
    VARIABLE_REFERENCE = auto()
    ARRAY_INDEX_REFERENCE = auto()
    VALUE = auto()
    UNKNOWN = auto()


NUMERIC_KINDS = frozenset(
    {
        NodeKind.INTEGER,
        NodeKind.SIGNED_INTEGER,
        NodeKind.FLOAT,
        NodeKind.DOUBLE,
        NodeKind.NON_INT,
        NodeKind.SIGNED_NON_INT,
    }
)

_RULE_KINDS = {
    "material": NodeKind.MATERIAL,
    "identblockstart": NodeKind.SHADER_BLOCK,
    "vardec": NodeKind.VARIABLE_DECLARATION,
    "setupproxies": NodeKind.SETUP_PROXIES,
    "renderproxies": NodeKind.RENDER_PROXIES,
    "proxy": NodeKind.PROXY,
    "proxyparam": NodeKind.PROXY_PARAMETER,
    "variableref": NodeKind.VARIABLE_REFERENCE,
    "arrayref": NodeKind.ARRAY_INDEX_REFERENCE,
    "value": NodeKind.VALUE,
    "array": NodeKind.ARRAY,
}

_TOKEN_KINDS = {
    "IDENT": NodeKind.IDENTIFIER,
    "STRING": NodeKind.STRING,
    "INTEGER": NodeKind.INTEGER,
    "SIGNED_INTEGER": NodeKind.SIGNED_INTEGER,
    "FLOAT": NodeKind.FLOAT,
    "DOUBLE": NodeKind.DOUBLE,
    "NON_INT": NodeKind.NON_INT,
    "SIGNED_NON_INT": NodeKind.SIGNED_NON_INT,
}


@dataclass(frozen=True)
class SyntaxNode:
    """A node of the material parse tree.

    Attributes:
        kind: Node kind
        text: Source text of a leaf (empty for inner nodes)
        children: Child nodes in source order
        rule: Name of the grammar rule or terminal that produced the node
        line: 1-based line of the node, if known
        column: 1-based column of the node, if known
    """

    kind: NodeKind
    text: str = ""
    children: tuple["SyntaxNode", ...] = ()
    rule: str = ""
    line: int | None = None
    column: int | None = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def __str__(self) -> str:
        if self.text:
            return f"{self.kind.name}({self.text!r})"
        return self.kind.name


def node(kind: NodeKind, *children: SyntaxNode, text: str = "") -> SyntaxNode:
    """Build a node by hand, mainly for tests and grammar extensions."""
    return SyntaxNode(kind=kind, text=text, children=children, rule=kind.name.lower())


def leaf(kind: NodeKind, text: str) -> SyntaxNode:
    """Build a leaf node by hand."""
    return SyntaxNode(kind=kind, text=text, rule=kind.name.lower())


def convert_tree(item: Tree | Token) -> SyntaxNode:
    """Convert a lark tree or token into a :class:`SyntaxNode`.

    Rules and terminals the node vocabulary does not know become
    ``NodeKind.UNKNOWN`` nodes that keep their rule name.
    """
    if isinstance(item, Token):
        return SyntaxNode(
            kind=_TOKEN_KINDS.get(item.type, NodeKind.UNKNOWN),
            text=str(item),
            rule=item.type,
            line=item.line,
            column=item.column,
        )

    rule = str(item.data)
    if rule == "start" and len(item.children) == 1:
        return convert_tree(item.children[0])

    meta = item.meta
    has_position = not getattr(meta, "empty", True)
    return SyntaxNode(
        kind=_RULE_KINDS.get(rule, NodeKind.UNKNOWN),
        children=tuple(convert_tree(child) for child in item.children),
        rule=rule,
        line=meta.line if has_position else None,
        column=meta.column if has_position else None,
    )


@lru_cache(maxsize=8)
def _get_parser(grammar_path: Path, start: str) -> Lark:
    logger.debug(f"Compiling grammar {grammar_path} (start rule: {start})")
    return Lark(
        grammar_path.read_text(encoding="utf-8"),
        parser="lalr",
        start=start,
        propagate_positions=True,
        maybe_placeholders=False,
    )


def parse_tree(text: str, config: ParserConfig | None = None) -> SyntaxNode:
    """Parse material source text into a syntax tree.

    Args:
        text: Material source text
        config: Parser configuration (defaults to the packaged grammar)

    Returns:
        Root node of the parse tree

    Raises:
        GrammarRejected: If the text does not match the grammar
    """
    config = config or ParserConfig()
    parser = _get_parser(Path(config.grammar_path).resolve(), config.start)
    try:
        tree = parser.parse(text)
    except UnexpectedInput as e:
        raise GrammarRejected(
            f"Invalid material file: {e.__class__.__name__}",
            line=getattr(e, "line", None),
            column=getattr(e, "column", None),
        ) from e
    return convert_tree(tree)
