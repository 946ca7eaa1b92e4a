"""Organizational role data ("census") and the role context used for fingerprinting.

The census is a versioned YAML document maintained outside prcheck::

    version: 42
    contributors:
      - id: "583231"          # forge user id
        username: duke
    projects:
      skara:
        leads: [duke]
        reviewers:
          - duke
          - username: jane
            since: 40         # role held from census version 40 onwards
        committers: [duke, jane]
        authors: [duke, jane, joe]

Role membership may be limited to a version range; a plain username holds the
role for every version.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from prcheck_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

_ROLES = ("leads", "reviewers", "committers", "authors")


@dataclass(frozen=True)
class Contributor:
    id: str
    username: str


@dataclass(frozen=True)
class Membership:
    username: str
    since: int | None = None
    until: int | None = None

    def covers(self, version: int) -> bool:
        if self.since is not None and version < self.since:
            return False
        if self.until is not None and version > self.until:
            return False
        return True


@dataclass
class Project:
    name: str
    roles: dict[str, list[Membership]] = field(default_factory=dict)

    def _has_role(self, role: str, username: str, version: int) -> bool:
        return any(m.username == username and m.covers(version) for m in self.roles.get(role, []))

    def is_lead(self, username: str, version: int) -> bool:
        return self._has_role("leads", username, version)

    def is_reviewer(self, username: str, version: int) -> bool:
        return self._has_role("reviewers", username, version)

    def is_committer(self, username: str, version: int) -> bool:
        return self._has_role("committers", username, version)

    def is_author(self, username: str, version: int) -> bool:
        return self._has_role("authors", username, version)


@dataclass
class Census:
    version: int
    contributors: dict[str, Contributor] = field(default_factory=dict)  # keyed by forge user id
    projects: dict[str, Project] = field(default_factory=dict)

    def project(self, name: str | None = None) -> Project:
        if name is None:
            if not self.projects:
                raise ConfigurationError("Census does not define any project.")
            return next(iter(self.projects.values()))
        try:
            return self.projects[name]
        except KeyError:
            raise ConfigurationError(f"Project {name!r} not found in census.")


@dataclass(frozen=True)
class RoleContext:
    """Role resolution scoped to one census version, plus the bot's own identity.

    ``service_user_id`` identifies comments authored by prcheck itself; it is
    passed in explicitly rather than looked up from the forge mid-computation.
    """

    census: Census
    project: Project
    service_user_id: str

    @property
    def version(self) -> int:
        return self.census.version

    def contributor(self, user_id: str) -> Contributor | None:
        return self.census.contributors.get(user_id)


def _parse_member(entry) -> Membership:
    if isinstance(entry, str):
        return Membership(username=entry)
    return Membership(username=entry["username"], since=entry.get("since"), until=entry.get("until"))


def parse_census(data: dict) -> Census:
    census = Census(version=int(data.get("version", 0)))
    for entry in data.get("contributors") or []:
        contributor = Contributor(id=str(entry["id"]), username=entry["username"])
        census.contributors[contributor.id] = contributor
    for name, roles in (data.get("projects") or {}).items():
        roles = roles or {}
        census.projects[name] = Project(
            name=name,
            roles={role: [_parse_member(m) for m in roles.get(role) or []] for role in _ROLES},
        )
    return census


def load_census(path: str) -> Census:
    """Load the census YAML file at ``path``.

    A missing file is a deployment problem, not a transient failure.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigurationError(f"Census file not found: {path}")
    with open(p) as f:
        data = yaml.safe_load(f) or {}
    census = parse_census(data)
    logger.debug("Loaded census version %d with %d contributor(s)", census.version, len(census.contributors))
    return census
