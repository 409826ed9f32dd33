# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
parsing and categorisation of conventional commits (`type(scope)!: subject`)

see: https://www.conventionalcommits.org/en/v1.0.0/
'''

import collections.abc
import logging
import re

import release_notes.model as rnm
import version as version_mod

logger = logging.getLogger(__name__)


commit_types = tuple(commit_type.value for commit_type in rnm.CommitType)

subject_line_pattern = re.compile(
    r'^(?P<type>' + '|'.join(commit_types) + r')'
    r'(?P<type_bang>!)?'
    r'(?:\((?P<scope>[^)]+)\))?'
    r'(?P<scope_bang>!)?'
    r': (?P<subject>.+)'
)

# only honoured if starting a line; bullets and quotes (`- BREAKING CHANGE: ..`) do not match
breaking_change_pattern = re.compile(
    r'^[ \t]*BREAKING[ -]CHANGE:',
    re.MULTILINE,
)


def parse_commit(message: str) -> rnm.Commit:
    '''
    parses the given (raw) commit-message into a `Commit`. Only the first line is parsed for type,
    scope and subject; the whole message is checked for a breaking-change-footer.

    Parsing never fails: messages not adhering to conventional-commits are returned as `chore`.
    '''
    message = message or ''
    first_line = message.split('\n', 1)[0].rstrip('\r')

    if not (match := subject_line_pattern.match(first_line)):
        logger.debug(f'not a conventional commit: {first_line=}')
        return rnm.Commit(
            type=rnm.CommitType.CHORE.value,
            subject=first_line,
            message=first_line,
        )

    groups = match.groupdict()
    breaking = bool(
        groups['type_bang']
        or groups['scope_bang']
        or breaking_change_pattern.search(message)
    )

    return rnm.Commit(
        type=groups['type'],
        scope=groups['scope'],
        subject=groups['subject'],
        message=first_line,
        breaking=breaking,
    )


def parse_commits(
    messages: collections.abc.Iterable[str],
) -> list[rnm.Commit]:
    return [parse_commit(message) for message in messages]


def categorise_commits(
    commits: collections.abc.Iterable[rnm.Commit],
) -> rnm.CategorizedCommits:
    commits = tuple(commits)

    return rnm.CategorizedCommits(
        features=tuple(c for c in commits if c.type == rnm.CommitType.FEAT),
        fixes=tuple(c for c in commits if c.type == rnm.CommitType.FIX),
        breaking=tuple(c for c in commits if c.breaking),
    )


def determine_bump(
    categorised_commits: rnm.CategorizedCommits,
) -> version_mod.VersionBump | None:
    '''
    returns the version-bump implied by the most significant category present, or None if there
    are neither breaking changes, nor features, nor fixes.
    '''
    if categorised_commits.breaking:
        return version_mod.VersionBump.MAJOR
    if categorised_commits.features:
        return version_mod.VersionBump.MINOR
    if categorised_commits.fixes:
        return version_mod.VersionBump.PATCH

    return None
