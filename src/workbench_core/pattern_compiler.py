"""Turn a search term and its option flags into a single compiled matcher."""

import logging
import re

from .exceptions import InvalidSearchPatternError
from .models.search import SearchOptions

logger = logging.getLogger(__name__)


def compile_matcher(search_term: str, options: SearchOptions) -> re.Pattern[str]:
    """
    Compile a search term according to the search options.

    The first applicable rule wins:

    1. ``use_regex``: the term is compiled verbatim. ``case_sensitive`` is not
       consulted in this mode, so a regex is always case sensitive unless it
       carries its own inline flags.
    2. ``whole_word``: the escaped term is wrapped in word boundaries,
       case-insensitive unless ``case_sensitive`` is set.
    3. not ``case_sensitive``: the escaped term, case-insensitive.
    4. otherwise the escaped term, case sensitive.

    Args:
        search_term: Literal text or regex source
        options: Search options

    Returns:
        Compiled regular expression

    Raises:
        InvalidSearchPatternError: If the term is empty or is not a valid regex
    """
    if not search_term:
        raise InvalidSearchPatternError(search_term, "search term cannot be empty")

    flags = 0
    if options.use_regex:
        source = search_term
    elif options.whole_word:
        source = rf"\b{re.escape(search_term)}\b"
        if not options.case_sensitive:
            flags |= re.IGNORECASE
    elif not options.case_sensitive:
        source = re.escape(search_term)
        flags |= re.IGNORECASE
    else:
        source = re.escape(search_term)

    try:
        matcher = re.compile(source, flags)
    except re.error as e:
        raise InvalidSearchPatternError(search_term, f"invalid regex: {e}") from e

    logger.debug(f"Compiled matcher {matcher.pattern!r} (flags={flags})")
    return matcher
