# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0


import dataclasses
import enum


class CommitType(enum.StrEnum):
    FEAT = 'feat'
    FIX = 'fix'
    CHORE = 'chore'
    DOCS = 'docs'
    REFACTOR = 'refactor'
    PERF = 'perf'
    TEST = 'test'
    CI = 'ci'
    STYLE = 'style'
    REVERT = 'revert'
    BUILD = 'build'


@dataclasses.dataclass(frozen=True)
class Commit:
    '''
    a (conventional) commit, as parsed from a commit-message.

    `message` is the first line of the original commit-message (body is omitted).
    `breaking` is set if the commit is marked w/ a `!`, or carries a breaking-change-footer.
    '''
    type: str
    subject: str
    message: str
    scope: str | None = None
    breaking: bool = False


@dataclasses.dataclass(frozen=True)
class CategorizedCommits:
    '''
    commits partitioned by category. Note that partitions are not exclusive; breaking commits
    will also appear in `features` or `fixes` if of the respective type.
    '''
    features: tuple[Commit, ...] = ()
    fixes: tuple[Commit, ...] = ()
    breaking: tuple[Commit, ...] = ()


@dataclasses.dataclass(frozen=True)
class ReleaseNotesData(CategorizedCommits):
    version: str | None = None

    @staticmethod
    def from_categorised_commits(
        version: str,
        categorised_commits: CategorizedCommits,
    ) -> 'ReleaseNotesData':
        return ReleaseNotesData(
            version=version,
            features=categorised_commits.features,
            fixes=categorised_commits.fixes,
            breaking=categorised_commits.breaking,
        )


@dataclasses.dataclass(frozen=True)
class ScopeGroup:
    scope: str
    commits: tuple[Commit, ...]
