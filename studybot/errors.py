from __future__ import annotations

"""Failure kinds of the remote generation path.

Practice-test orchestration recovers all of them. Study guide
generation has no fallback and surfaces them to the user.
"""

from dataclasses import dataclass


@dataclass
class GenerationError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


class MissingCredentials(GenerationError):
    def __init__(self, message: str = "OpenAI API key is missing") -> None:
        super().__init__(message)


class NetworkError(GenerationError):
    pass


@dataclass
class ServiceError(GenerationError):
    status_code: int = 0

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"HTTP {self.status_code}: {self.message}"


class SchemaError(GenerationError):
    pass
