"""Include/exclude filtering of resolved artifact sets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from depassembly.errors import FilterError
from depassembly.model import ResolvedArtifact
from depassembly.utils.patterns import match_any_identity

logger = logging.getLogger(__name__)


def _targets(artifact: ResolvedArtifact, transitive: bool) -> tuple[str, ...]:
    if transitive:
        return (artifact.id, *artifact.trail)
    return (artifact.id,)


def filter_artifacts(
    artifacts: Iterable[ResolvedArtifact],
    includes: Sequence[str],
    excludes: Sequence[str],
    *,
    strict: bool = False,
    transitive: bool = False,
) -> list[ResolvedArtifact]:
    """Return the artifacts retained by ``includes`` then ``excludes``.

    Patterns match ``groupId:artifactId:type[:classifier]:version``. With
    ``transitive`` an artifact also matches through any ancestor on its
    dependency trail, and any artifact marks a pattern as triggered. Without
    it only the artifact itself is tested and only direct artifacts trigger
    a pattern. In ``strict`` mode an untriggered include pattern is a
    :class:`FilterError`.

    Input order is preserved.
    """
    include_patterns = [pattern for pattern in includes if pattern.strip()]
    exclude_patterns = [pattern for pattern in excludes if pattern.strip()]
    triggered_includes: set[str] = set()
    triggered_excludes: set[str] = set()

    retained: list[ResolvedArtifact] = []
    for artifact in artifacts:
        targets = _targets(artifact, transitive)
        counts = transitive or artifact.is_direct

        included = not include_patterns
        for pattern in include_patterns:
            if match_any_identity(pattern, targets):
                included = True
                if counts:
                    triggered_includes.add(pattern)

        excluded = False
        for pattern in exclude_patterns:
            if match_any_identity(pattern, targets):
                excluded = True
                if counts:
                    triggered_excludes.add(pattern)

        if included and not excluded:
            retained.append(artifact)
        else:
            logger.debug("Artifact %s removed by dependency set filters", artifact.id)

    missed_includes = [p for p in include_patterns if p not in triggered_includes]
    missed_excludes = [p for p in exclude_patterns if p not in triggered_excludes]

    if missed_includes and strict:
        raise FilterError(missed_includes)

    if missed_includes:
        logger.warning(
            "The following include patterns were never triggered: %s",
            ", ".join(missed_includes),
        )
    if missed_excludes:
        logger.warning(
            "The following exclude patterns were never triggered: %s",
            ", ".join(missed_excludes),
        )

    return retained
