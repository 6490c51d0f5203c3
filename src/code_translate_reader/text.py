import re

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
# "APIVersion" -> "API Version": an uppercase run followed by a capitalised word.
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]{2,})([A-Z][a-z])")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Split identifier-style text (snake_case, camelCase, PascalCase, acronyms) into words."""
    processed = text.replace("_", " ")
    processed = _CAMEL_BOUNDARY.sub(r"\1 \2", processed)
    processed = _ACRONYM_BOUNDARY.sub(r"\1 \2", processed)
    return _WHITESPACE.sub(" ", processed).strip()
