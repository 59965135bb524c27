from __future__ import annotations


class QuestCompanionError(Exception):
    """Base class for everything the companion raises on purpose."""


class CatalogFileError(QuestCompanionError):
    """One catalog file could not be read; the loader skips it."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class ProgressReadError(QuestCompanionError):
    """The progress file is missing, unreadable or not in the expected shape."""


class SettingsCorruptError(QuestCompanionError):
    """The settings document exists but cannot be trusted."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Settings file {path} is unreadable: {message}")
        self.path = path
        self.message = message


class PathRejected(QuestCompanionError):
    """The initial read of a new progress path failed, so it was never activated."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
        self.message = message
