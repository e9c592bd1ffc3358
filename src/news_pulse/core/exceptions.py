"""Domain exceptions."""


class NewsPulseError(Exception):
    """Base class for all news-pulse errors."""


class FeedFetchError(NewsPulseError):
    """Raised when a feed cannot be fetched or parsed."""


class ArticleFetchError(NewsPulseError):
    """Raised when the full article body cannot be retrieved."""


class OutroGenerationError(NewsPulseError):
    """Raised when the closing line cannot be generated."""


class SpeechError(NewsPulseError):
    """Raised when a speech engine fails to narrate a segment."""


class PipelineError(NewsPulseError):
    """Raised when a pipeline run produces no usable episode."""


class EmptyPoolError(PipelineError):
    """No feed produced any item."""

    def __init__(self, message: str = "RSS pool is empty. No local news found.") -> None:
        super().__init__(message)


class NoViableStoriesError(PipelineError):
    """Every enrichment candidate failed extraction."""

    def __init__(
        self,
        message: str = (
            "Could not extract enough editorial content from current news. "
            "Please try again or refresh."
        ),
    ) -> None:
        super().__init__(message)
