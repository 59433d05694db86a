"""
Repository name -> deploy target lookup.
"""

from typing import Mapping

from deployhook.schemas.webhook import DeployTarget


class UnknownRepository(Exception):
    """Exception raised when a repository has no configured target."""

    def __init__(self, repository_name: str):
        self.repository_name = repository_name
        super().__init__(f"Unknown repository: {repository_name}")


def resolve_target(repository_name: str, targets: Mapping[str, DeployTarget]) -> DeployTarget:
    """
    Find the deploy target for a repository name.

    Tries an exact match first, then falls back to a case-insensitive scan.
    The table is never modified.

    Raises:
        UnknownRepository: If nothing matches
    """
    target = targets.get(repository_name)
    if target is not None:
        return target

    wanted = repository_name.casefold()
    for key, candidate in targets.items():
        if key.casefold() == wanted:
            return candidate

    raise UnknownRepository(repository_name)
