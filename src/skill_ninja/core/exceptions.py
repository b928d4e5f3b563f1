"""
Exceptions raised by skill_ninja.

Absence (no catalog file, no instruction document, no skills directory) is
never an error: those paths return empty values instead.
"""


class SkillNinjaError(Exception):
    """Base exception class for skill_ninja errors"""

    def __init__(self, message: str, details: str = "") -> None:
        self.message = message
        self.details = details
        super().__init__(f"{message}\n\n{details}" if details else message)


class SourceNotFoundError(SkillNinjaError, KeyError):
    """Raised when an operation names a source id that is not in the catalog"""

    def __init__(self, source_id: str) -> None:
        self.source_id = source_id
        super().__init__(f"Source not found: {source_id}")

    def __str__(self) -> str:
        return self.message


class InvalidRepositoryUrlError(SkillNinjaError, ValueError):
    """Raised when a repository URL does not name a GitHub owner/repo pair"""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid GitHub repository URL: {url}")


class RemoteError(SkillNinjaError):
    """Base class for failures reported by the remote fetcher"""


class RemoteNotFoundError(RemoteError):
    """Repository, branch or file does not exist upstream"""


class RemoteAuthError(RemoteError):
    """Rate limit exceeded or credentials rejected.

    Kept distinct from other HTTP failures so callers can offer to configure a token.
    """

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(
            message
            or "GitHub API rate limit exceeded or access denied. "
            "Configure a GitHub token and try again.",
            f"HTTP {status_code}",
        )


class RemoteHTTPError(RemoteError):
    """Any other non-success HTTP response"""

    def __init__(self, status_code: int, url: str = "") -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"GitHub API error: {status_code}", url)


class OperationCancelledError(SkillNinjaError):
    """A long-running operation observed its cancellation signal and stopped"""


class DocumentWriteError(SkillNinjaError):
    """Writing a whole-file update failed; the previous file content is untouched"""
