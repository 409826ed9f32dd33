# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import collections.abc
import dataclasses
import enum
import logging
import re

import semver

logger = logging.getLogger(__name__)

_core_pattern = re.compile(r'[0-9]+\.[0-9]+\.[0-9]+')


class VersionBump(enum.StrEnum):
    MAJOR = 'major'
    MINOR = 'minor'
    PATCH = 'patch'


@dataclasses.dataclass(frozen=True)
class Tag:
    name: str
    version: str


def is_valid_version(version: str) -> bool:
    '''
    returns whether the given version is a valid (strict) semver-v2 version. No preprocessing is
    done (i.e. a `v` prefix or a missing patch-level render the version invalid).
    '''
    if not version:
        return False
    return semver.Version.is_valid(version)


def _core(version: str) -> tuple[int, int, int]:
    parsed = semver.Version.parse(version)
    return parsed.major, parsed.minor, parsed.patch


def select_latest(
    tags: collections.abc.Iterable[str | Tag],
    prefix: str='',
) -> Tag | None:
    '''
    returns the tag bearing the greatest version amongst the passed tags, or None if there is
    no suitable candidate.

    tags may be passed as names, or as `Tag` objects (whose `version` attr is ignored; the
    version is always derived from the name). Only tags whose name starts with `prefix` and whose
    name (with `prefix` stripped) is a valid semver version are considered.

    Note that versions are compared by their numeric core (major.minor.patch) only; prerelease and
    build-metadata are stripped before comparison. Hence `1.1.0-alpha.1` and `1.1.0` are deemed
    equal. If multiple candidates have equal cores, the one encountered first wins. Note that this
    differs from semver-precedence.
    '''
    prefix = prefix or ''

    latest = None
    latest_core = None
    candidates_count = 0

    for tag in tags:
        name = tag.name if isinstance(tag, Tag) else tag

        if not name.startswith(prefix):
            continue

        candidate_version = name.removeprefix(prefix)
        if not is_valid_version(candidate_version):
            logger.debug(f'ignoring tag w/ invalid version: {name=}')
            continue

        candidates_count += 1
        candidate_core = _core(candidate_version)

        if latest_core is None or candidate_core > latest_core:
            latest = Tag(name=name, version=candidate_version)
            latest_core = candidate_core

    if not latest:
        logger.warning(f'no valid version tags found ({prefix=})')
        return None

    logger.info(f'latest version: {latest.version} ({candidates_count=})')
    return latest


def split_version(version: str) -> tuple[str, str | None, str | None]:
    '''
    splits the given version into a three-tuple of `core`, `prerelease`, `build`. Build-metadata
    is split off first, so a `-` within build-metadata is not mistaken for a prerelease-separator.
    Absent parts are returned as None.
    '''
    base, sep, build = version.partition('+')
    build = build if sep else None

    core, sep, prerelease = base.partition('-')
    prerelease = prerelease if sep else None

    return core, prerelease, build


def increment(
    version: str,
    bump: VersionBump,
) -> str:
    '''
    increments the given version according to the given bump:

    - major: M.m.p -> M+1.0.0
    - minor: M.m.p -> M.m+1.0
    - patch: M.m.p -> M.m.p+1

    any prerelease is dropped (a bumped version is always a release-version), whereas
    build-metadata is preserved verbatim.

    raises ValueError if the version's core is not a triple of non-negative integers.
    '''
    core, _, build = split_version(version)

    if not _core_pattern.fullmatch(core):
        raise ValueError(f'not a valid (semver) version: `{version}`')

    major, minor, patch = (int(part) for part in core.split('.'))
    parsed = semver.Version(major=major, minor=minor, patch=patch)

    bump = VersionBump(bump)
    if bump is VersionBump.MAJOR:
        bumped = parsed.bump_major()
    elif bump is VersionBump.MINOR:
        bumped = parsed.bump_minor()
    elif bump is VersionBump.PATCH:
        bumped = parsed.bump_patch()
    else:
        raise ValueError('unexpected version-bump', bump)

    bumped = str(bumped)
    if build is not None:
        bumped = f'{bumped}+{build}'

    logger.debug(f'incremented {version=} by {bump=} -> {bumped}')
    return bumped
