"""Splits one line of TML into raw text tokens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

QUOTES = ('"', "'")
WHITESPACE = (" ", "\t")


class TokenType(Enum):
    WORD = auto()
    VALUE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()


@dataclass(slots=True)
class Token:
    type: TokenType
    value: str
    column: int

    @property
    def end_column(self) -> int:
        return self.column + len(self.value)

    @property
    def is_comment(self) -> bool:
        return self.type in (TokenType.LINE_COMMENT, TokenType.BLOCK_COMMENT)


def _follows_text(text: str, i: int) -> bool:
    return i > 0 and text[i - 1] not in WHITESPACE


def find_comment_start(text: str, start: int = 0) -> int:
    """Index of the first ``//`` or closed ``/* */`` outside quotes and brackets
    that opens the text or follows whitespace, or -1."""
    quote: Optional[str] = None
    depth = 0
    for i in range(start, len(text)):
        char = text[i]
        if char in QUOTES and (i == 0 or text[i - 1] != "\\"):
            if quote == char:
                quote = None
            elif quote is None:
                quote = char
            continue
        if quote is not None:
            continue
        if char in "{[":
            depth += 1
        elif char in "}]":
            depth = max(depth - 1, 0)
        elif depth == 0 and not _follows_text(text, i) and text.startswith("//", i):
            return i
        elif depth == 0 and not _follows_text(text, i) and text.startswith("/*", i) and "*/" in text[i + 2 :]:
            return i
    return -1


class LineTokenizer:
    def __init__(self, line: str, offset: int = 0):
        self.line = line
        self.offset = offset
        self.tokens: list[Token] = []
        self._pos = 0
        self._quote: Optional[str] = None
        self._braces = 0
        self._brackets = 0
        self._current: list[str] = []
        self._start = 0

    def tokenize(self) -> list[Token]:
        while not self._is_eof:
            char = self._peek()
            if char in QUOTES and self._peek(-1) != "\\":
                self._toggle_quote(char)
                self._append()
                continue
            if char in "{[":
                self._open(char)
                continue
            if char in "}]":
                self._close(char)
                continue
            if self._quote is None and self._at_top_level and char == ":" and self._is_value_colon():
                self._emit_value()
                continue
            if self._quote is None and self._at_top_level and char in WHITESPACE:
                self._flush()
                self._pos += 1
                continue
            if self._quote is None and not self._current and char == "/" and self._peek(1) == "/":
                self._flush()
                self._emit(TokenType.LINE_COMMENT, self.line[self._pos :], self._pos)
                self._pos = len(self.line)
                break
            if self._quote is None and not self._current and char == "/" and self._peek(1) == "*":
                end = self.line.find("*/", self._pos + 2)
                if end != -1:
                    self._flush()
                    self._emit(TokenType.BLOCK_COMMENT, self.line[self._pos : end + 2], self._pos)
                    self._pos = end + 2
                    continue
            self._append()
        self._flush()
        return self.tokens

    # Helpers -----------------------------------------------------------------
    @property
    def _is_eof(self) -> bool:
        return self._pos >= len(self.line)

    @property
    def _at_top_level(self) -> bool:
        return self._braces == 0 and self._brackets == 0

    def _peek(self, ahead: int = 0) -> str:
        index = self._pos + ahead
        if index < 0 or index >= len(self.line):
            return ""
        return self.line[index]

    def _toggle_quote(self, char: str) -> None:
        if self._quote == char:
            self._quote = None
        elif self._quote is None:
            self._quote = char

    def _open(self, char: str) -> None:
        if char == "{":
            self._braces += 1
        else:
            self._brackets += 1
        self._append()

    def _close(self, char: str) -> None:
        if char == "}":
            self._braces = max(self._braces - 1, 0)
        else:
            self._brackets = max(self._brackets - 1, 0)
        self._append()

    def _append(self) -> None:
        if not self._current:
            self._start = self._pos
        self._current.append(self.line[self._pos])
        self._pos += 1

    def _flush(self) -> None:
        if self._current:
            self._emit(TokenType.WORD, "".join(self._current), self._start)
            self._current = []

    def _emit(self, token_type: TokenType, value: str, index: int) -> None:
        self.tokens.append(Token(token_type, value, self.offset + index))

    def _is_value_colon(self) -> bool:
        # "div attr=x: text": the colon closes a token and is followed by a space or the line end
        if self._peek(-1) in ("",) + WHITESPACE:
            return False
        return self._peek(1) in ("",) + WHITESPACE

    def _emit_value(self) -> None:
        self._flush()
        comment = find_comment_start(self.line, self._pos + 1)
        end = comment if comment != -1 else len(self.line)
        text = self.line[self._pos : end].rstrip()
        self._emit(TokenType.VALUE, text, self._pos)
        self._pos = end


def tokenize_line(line: str) -> list[str]:
    return [token.value for token in LineTokenizer(line).tokenize()]


__all__ = ["TokenType", "Token", "LineTokenizer", "find_comment_start", "tokenize_line"]
