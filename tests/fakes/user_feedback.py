"""Fake UserFeedback implementation for testing."""

from steamserv.core.user_feedback import UserFeedback


class FakeUserFeedback(UserFeedback):
    """Captures feedback messages instead of printing them.

    Examples:
        >>> feedback = FakeUserFeedback()
        >>> feedback.success("done")
        >>> assert feedback.successes == ["done"]
    """

    def __init__(self) -> None:
        self._messages: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self._messages.append(("info", message))

    def success(self, message: str) -> None:
        self._messages.append(("success", message))

    def error(self, message: str) -> None:
        self._messages.append(("error", message))

    @property
    def messages(self) -> list[tuple[str, str]]:
        """All (level, message) pairs in emission order."""
        return self._messages.copy()

    @property
    def infos(self) -> list[str]:
        return [m for level, m in self._messages if level == "info"]

    @property
    def successes(self) -> list[str]:
        return [m for level, m in self._messages if level == "success"]

    @property
    def errors(self) -> list[str]:
        return [m for level, m in self._messages if level == "error"]
