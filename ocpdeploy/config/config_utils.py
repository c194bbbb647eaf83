import os
import re

# ${NAME}, ${NAME:-default} or ${NAME:?message}
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[^}:]+)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}")


def substitute_env_vars(text: str) -> str:
    """Expand ${NAME}, ${NAME:-default} and ${NAME:?message} placeholders.

    Raises:
        ValueError: If a variable without a default is not set
    """

    def expand(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = os.getenv(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        reason = arg if op == ":?" else "not set"
        raise ValueError(f"Required environment variable {name} {reason}")

    return _PLACEHOLDER.sub(expand, text)


def parse_key_value_pairs(pairs: list[str] | None) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a mapping.

    Raises:
        ValueError: If an entry has no '=' or an empty key
    """
    result: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got '{pair}'")
        result[key] = value
    return result
