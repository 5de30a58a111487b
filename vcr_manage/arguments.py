"""
Classification of command arguments.

Arguments are either ``KEY=VALUE`` assignments exported into the compose
environment, ``-flags`` forwarded to docker-compose, or container names.
"""

from dataclasses import dataclass, field
from typing import Iterable

DEFAULT_CONTAINERS = (
    "wallet-db",
    "vcr-db",
    "vcr-solr",
    "vcr-api",
    "vcr-worker",
    "vcr-agent",
    "vcr-web",
    "schema-spy",
    "rabbitmq",
    "echo-app",
)
DATABASE_CONTAINERS = ("wallet-db", "vcr-db")


@dataclass
class ClassifiedArgs:
    assignments: list[tuple[str, str]] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    # non-assignment tokens in their original order
    passthrough: list[str] = field(default_factory=list)

    @property
    def variables(self) -> dict[str, str]:
        """Assignments as a mapping; the last occurrence of a key wins"""
        return {key: value for key, value in self.assignments if key}

    @property
    def containers(self) -> list[str]:
        return list(self.names) if self.names else list(DEFAULT_CONTAINERS)

    def values_of(self, key: str) -> list[str]:
        return [value for name, value in self.assignments if name == key]


def classify_arguments(tokens: Iterable[str]) -> ClassifiedArgs:
    """Split tokens into assignments, flags and container names"""
    classified = ClassifiedArgs()
    for token in tokens:
        if "=" in token:
            key, _, value = token.partition("=")
            classified.assignments.append((key, value))
            continue
        classified.passthrough.append(token)
        if token.startswith("-"):
            classified.flags.append(token)
        else:
            classified.names.append(token)
    return classified


def startup_params(arguments: ClassifiedArgs) -> list[str]:
    """Options and containers for ``docker-compose up``"""
    return ["--force-recreate", *arguments.flags, *arguments.containers]
