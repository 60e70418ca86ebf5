"""Parsing of raw header blocks into field maps."""


def parse_header_block(content: str) -> dict[str, str]:
    """Split a raw header block into ``{name: value}``.

    A line starting with whitespace continues the previous value; the line
    break is kept so callers can strip it. Parsing stops at the first empty
    line. Later duplicates of a field overwrite earlier ones.

    Args:
        content: Header block as returned by the server

    Returns:
        dict[str, str]: Field values keyed by header name
    """
    fields: dict[str, str] = {}
    key = None
    value = ""

    for line in content.split("\n"):
        line = line.rstrip("\r")
        if not line:
            break

        if line[0] in " \t":
            if key is not None:
                value += "\n" + line
            continue

        if key is not None:
            fields[key] = value.rstrip()

        name, sep, rest = line.partition(":")
        if not sep:
            key = None
            continue
        key = name.strip()
        value = rest.lstrip()

    if key is not None:
        fields[key] = value.rstrip()

    return fields
