"""
Output file naming.
Maps a URL onto a filesystem-safe base name (no extension).
"""

# Replaced everywhere. '://' is handled separately and only once.
DISALLOWED_CHARS = ('.', '/', '?', '*', '"', '<', '>', '|')

REPLACEMENT = "_"


def name_from_url(url: str) -> str:
    """
    Replace disallowed characters with an underscore.

    Only the first '://' is collapsed into a single '_'; any later
    '://' keeps its ':' and just loses the slashes. Distinct URLs may
    map to the same name (http://a.com and http://a_com).
    """
    name = url.replace("://", REPLACEMENT, 1)
    for char in DISALLOWED_CHARS:
        name = name.replace(char, REPLACEMENT)
    return name
