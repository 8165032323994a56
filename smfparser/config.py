"""Configuration for the material parser."""

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_GRAMMAR_PATH = Path(__file__).parent / "parser" / "grammar.lark"

GRAMMAR_PATH_ENV = "SMF_GRAMMAR_PATH"
ENCODING_ENV = "SMF_ENCODING"


@dataclass(frozen=True)
class ParserConfig:
    """Settings for turning material source text into a parse tree.

    Attributes:
        grammar_path: Lark grammar used to parse the source text
        start: Start rule of the grammar
        encoding: Encoding used when reading material files
    """

    grammar_path: Path = field(default=DEFAULT_GRAMMAR_PATH)
    start: str = "start"
    encoding: str = "utf-8"

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """Build a configuration, overriding defaults from the environment."""
        grammar_path = os.environ.get(GRAMMAR_PATH_ENV)
        return cls(
            grammar_path=Path(grammar_path) if grammar_path else DEFAULT_GRAMMAR_PATH,
            encoding=os.environ.get(ENCODING_ENV, "utf-8"),
        )
