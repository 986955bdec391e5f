"""Search models for project-wide text and regex search."""

from pydantic import BaseModel, ConfigDict, Field


class SearchOptions(BaseModel):
    """Flags controlling how a search term is matched and which files are visited."""

    model_config = ConfigDict(frozen=True)

    case_sensitive: bool = Field(description="Whether the search is case sensitive", default=False)
    whole_word: bool = Field(description="Whether to match whole words only", default=False)
    use_regex: bool = Field(
        description="Whether the term should be treated as a regex", default=False
    )
    exclude_patterns: frozenset[str] = Field(
        description="Raw substrings; any file whose path contains one is skipped",
        default_factory=frozenset,
    )
    include_ignored: bool = Field(
        description="Whether to search files hidden by version-control ignore rules",
        default=False,
    )


class Match(BaseModel):
    """Represents a single match within a file."""

    model_config = ConfigDict(frozen=True)

    line_number: int = Field(description="Line number where the match was found (1-indexed)")
    line_content: str = Field(description="Full content of the matching line")
    match_index: int = Field(description="Start column of the match (0-indexed)")


class FileMatch(BaseModel):
    """Represents all matches found in a single file."""

    file_path: str = Field(description="Path relative to the project root, using '/'")
    matches: list[Match] = Field(description="Matches in line order, then column order")


class SearchResults(BaseModel):
    """Aggregated results of one search call."""

    matches: list[FileMatch] = Field(
        description="Per-file results in discovery order", default_factory=list
    )
    files_searched: int = Field(description="Number of candidate files considered", default=0)
    total_matches: int = Field(description="Total number of matches across all files", default=0)
    search_time_ms: float = Field(
        description="Time taken for the search in milliseconds", default=0.0
    )


class SearchRequest(BaseModel):
    """Request body for the search endpoint."""

    project_path: str = Field(description="Project root directory to search")
    search_term: str = Field(description="Literal text or regex to look for")
    options: SearchOptions = Field(
        description="Matching and filtering options", default_factory=SearchOptions
    )
