from typing import Iterable, List, TypedDict, TypeVar

T = TypeVar("T", bound=TypedDict("T", {}))
U = TypeVar("U", bound=TypedDict("U", {}))


def resolve_config(config: T, default_config: U):
    _config = default_config.copy()
    if config:
        for key in _config:
            if key in config:
                _config[key] = config[key]
    return _config


def leading_whitespace(line: str) -> int:
    return len(line) - len(line.lstrip())


def common_indent(lines: Iterable[str]) -> int:
    indents = [leading_whitespace(line) for line in lines if line.strip()]
    return min(indents) if indents else 0


def dedent_lines(lines: List[str]) -> List[str]:
    """Strips the indentation shared by all non-blank lines; blank lines become empty."""
    indent = common_indent(lines)
    return [line[indent:].rstrip() if line.strip() else "" for line in lines]

