"""Trimming of gemlog boilerplate around a post body.

Gemlog posts often carry a navigation header and a footer that do not
belong on the blog.  Authors mark the boundaries with a literal line such
as ``---``; the text before (or after) it is cut away.
"""


def strip_before(text: str, marker: str | None) -> str:
    """
    Drop everything up to and including the first occurrence of *marker*.

    Returns *text* unchanged when *marker* is empty or absent.

    Examples:
        >>> strip_before("HEADER\\n---\\nBODY", "---")
        '\\nBODY'
    """
    if not marker:
        return text
    index = text.find(marker)
    if index == -1:
        return text
    return text[index + len(marker):]


def strip_after(text: str, marker: str | None) -> str:
    """
    Drop everything from the last occurrence of *marker* onward.

    Returns *text* unchanged when *marker* is empty or absent.

    Examples:
        >>> strip_after("BODY\\n===\\nFOOTER", "===")
        'BODY\\n'
    """
    if not marker:
        return text
    index = text.rfind(marker)
    if index == -1:
        return text
    return text[:index]


def trim_body(
    text: str, before: str | None = None, after: str | None = None
) -> str:
    """Apply :func:`strip_before` then :func:`strip_after`."""
    return strip_after(strip_before(text, before), after)
