"""QS Core — bracket-notation query-string decoder and encoder."""

from .codec import QueryString
from .decoder import decode
from .encoder import encode, percent_encode
from .errors import DecodeError, QSCoreError, QuerySyntaxError, SerializationError
from .tokenizer import DEFAULT_DELIMITER, Token, TokenType, percent_decode, tokenize
from .values import Absent
from .repl import QSRepl

__all__ = [
    "decode",
    "encode",
    "tokenize",
    "percent_decode",
    "percent_encode",
    "QueryString",
    "Token",
    "TokenType",
    "DEFAULT_DELIMITER",
    "Absent",
    "QSCoreError",
    "QuerySyntaxError",
    "DecodeError",
    "SerializationError",
    "QSRepl",
]
