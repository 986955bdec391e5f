"""Project search router."""

import logging

from fastapi import APIRouter, Depends

from ..dependencies import get_search_engine
from ..models.search import SearchRequest, SearchResults
from ..search_engine import SearchEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])


@router.post("/search", response_model=SearchResults)
def search_project(
    request: SearchRequest,
    search_engine: SearchEngine = Depends(get_search_engine),
) -> SearchResults:
    """Search the files of a project for a literal term or regex.

    Runs in the threadpool: the search blocks until every candidate file has
    been scanned and returns the complete result set.

    Args:
        request: Project path, search term and options
        search_engine: Injected search engine

    Returns:
        SearchResults: Per-file matches and counters

    Raises:
        InvalidSearchPatternError: If the term is empty or an invalid regex (400)
        ProjectRootError: If the project root cannot be read (404)
    """
    logger.info(
        f"POST /search - project={request.project_path}, term={request.search_term!r}, "
        f"regex={request.options.use_regex}, whole_word={request.options.whole_word}, "
        f"case_sensitive={request.options.case_sensitive}, "
        f"include_ignored={request.options.include_ignored}"
    )

    return search_engine.search(request.project_path, request.search_term, request.options)
