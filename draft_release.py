# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
computes the next release-version and release-notes from the commits on a release-branch, and
reconciles exactly one draft-release for it.

Flow:

- fetch all tags, find greatest version (w/ configured tag-prefix)
- no such version: initial release, considering all commits reachable from release-branch
- otherwise: if tag and release-branch point to the same commit, there is nothing to do. Else,
  consider all commits from release-branch head until (excluding) the tagged commit
- categorise commits (features, fixes, breaking changes) -> derive version-bump
- render release-notes
- create or update draft-release, delete any other draft-releases
'''

import collections.abc
import dataclasses
import enum
import logging

import dacite

import github.host
import github.release
import release_notes.conventional as rnc
import release_notes.markdown as rnmd
import release_notes.model as rnm
import version as version_mod

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ReleaseCfg:
    release_branch: str = 'main'
    tag_prefix: str = ''
    release_notes_template: str = ''
    dry_run: bool = False
    initial_version: str = '0.1.0'

    def __post_init__(self):
        if not self.release_branch:
            raise ValueError('release_branch must not be empty')
        if not version_mod.is_valid_version(self.initial_version):
            raise ValueError(f'not a valid (semver) version: {self.initial_version=}')

        self.tag_prefix = self.tag_prefix or ''
        self.release_notes_template = self.release_notes_template or ''

    def tag_name(self, version: str) -> str:
        return f'{self.tag_prefix}{version}'

    @staticmethod
    def from_dict(raw: dict) -> 'ReleaseCfg':
        # accept both `tag_prefix` and `tag-prefix`
        raw = {
            key.replace('-', '_'): value
            for key, value in (raw or {}).items()
        }
        return dacite.from_dict(
            data_class=ReleaseCfg,
            data=raw,
            config=dacite.Config(
                strict=True,
            ),
        )


class ReleasePath(enum.StrEnum):
    INITIAL_RELEASE = 'initial-release'
    BUMP_AND_RELEASE = 'bump-and-release'


class ReleaseState(enum.StrEnum):
    NO_CHANGES = 'no-changes'
    NO_BUMP_NEEDED = 'no-bump-needed'
    DRY_RUN = 'dry-run'
    RECONCILED = 'reconciled'


@dataclasses.dataclass(frozen=True)
class ReconcileResult:
    state: ReleaseState
    path: ReleasePath | None = None
    previous_version: str | None = None
    version: str | None = None
    tag_name: str | None = None
    bump: version_mod.VersionBump | None = None
    release_notes: str | None = None
    release: github.release.GitHubRelease | None = None

    def outputs(self) -> dict[str, str]:
        '''
        returns outputs to expose to callers (only if a release was actually reconciled)
        '''
        if self.state is not ReleaseState.RECONCILED or not self.release:
            return {}

        return {
            'release-url': self.release.url,
            'release-id': str(self.release.id),
            'version': self.release.tag_name,
        }


def fetch_tags(
    host: github.host.RepositoryHost,
) -> list[version_mod.Tag]:
    tags = [
        version_mod.Tag(name=tag.name, version=tag.name)
        for page in github.host.iter_pages(host.tags)
        for tag in page
    ]
    logger.info(f'found {len(tags)} tag(s)')
    return tags


def take_until_boundary(
    pages: collections.abc.Iterable[collections.abc.Sequence[github.host.CommitRef]],
    boundary_sha: str | None=None,
) -> list[github.host.CommitRef]:
    '''
    accumulates commits from the given pages until the boundary-commit is encountered. The
    boundary-commit and any commits following it are excluded, and no further pages are consumed.

    If boundary_sha is None, or if the boundary-commit is never encountered, all commits from all
    pages are returned.
    '''
    commits = []

    for page in pages:
        for idx, commit in enumerate(page):
            if boundary_sha and commit.sha == boundary_sha:
                logger.info(f'reached boundary-commit {boundary_sha} - stop fetching commits')
                commits.extend(page[:idx])
                return commits

        commits.extend(page)

    if boundary_sha:
        logger.warning(f'did not encounter boundary-commit {boundary_sha} - considering all commits')

    return commits


def fetch_commits(
    host: github.host.RepositoryHost,
    head: str,
    boundary_sha: str | None=None,
) -> list[rnm.Commit]:
    '''
    returns (parsed) commits reachable from head, stopping before boundary-commit (if given)
    '''
    logger.info(f'fetching commits between {boundary_sha or "start"} and {head}')

    commit_refs = take_until_boundary(
        pages=github.host.iter_pages(
            lambda page: host.commits(sha=head, page=page),
        ),
        boundary_sha=boundary_sha,
    )
    logger.info(f'retrieved {len(commit_refs)} commit(s)')

    return rnc.parse_commits(commit_ref.message for commit_ref in commit_refs)


def _render_release_notes(
    cfg: ReleaseCfg,
    version: str,
    categorised_commits: rnm.CategorizedCommits,
) -> str:
    return rnmd.render(
        template=cfg.release_notes_template,
        data=rnm.ReleaseNotesData.from_categorised_commits(
            version=version,
            categorised_commits=categorised_commits,
        ),
    )


def reconcile(
    host: github.host.RepositoryHost,
    cfg: ReleaseCfg,
) -> ReconcileResult:
    '''
    computes next version and release-notes, and reconciles draft-release (unless in dry-run-mode).

    errors raised by host are not handled (in particular, there are no retries). As stale
    draft-releases are deleted one by one, some deletions may already be done if an error occurs.
    '''
    tags = fetch_tags(host)
    latest_tag = version_mod.select_latest(
        tags=tags,
        prefix=cfg.tag_prefix,
    )

    if not latest_tag:
        path = ReleasePath.INITIAL_RELEASE
        previous_version = None
        bump = None
        next_version = cfg.initial_version
        logger.info(f'no previous release - will create initial release {next_version}')

        commits = fetch_commits(
            host=host,
            head=cfg.release_branch,
        )
        categorised_commits = rnc.categorise_commits(commits)
    else:
        path = ReleasePath.BUMP_AND_RELEASE
        previous_version = latest_tag.version

        tag_sha = host.ref_sha(f'tags/{latest_tag.name}')
        head_sha = host.ref_sha(f'heads/{cfg.release_branch}')

        if tag_sha == head_sha:
            logger.info(
                f'{latest_tag.name} and {cfg.release_branch} point to same commit ({head_sha}) '
                '- nothing to release'
            )
            return ReconcileResult(
                state=ReleaseState.NO_CHANGES,
                path=path,
                previous_version=previous_version,
            )

        commits = fetch_commits(
            host=host,
            head=head_sha,
            boundary_sha=tag_sha,
        )
        categorised_commits = rnc.categorise_commits(commits)
        logger.info(
            f'found {len(categorised_commits.features)} feature(s), '
            f'{len(categorised_commits.fixes)} fix(es), '
            f'{len(categorised_commits.breaking)} breaking change(s)'
        )

        if not (bump := rnc.determine_bump(categorised_commits)):
            logger.info('no features, fixes, or breaking changes - no release needed')
            return ReconcileResult(
                state=ReleaseState.NO_BUMP_NEEDED,
                path=path,
                previous_version=previous_version,
            )

        next_version = version_mod.increment(
            version=previous_version,
            bump=bump,
        )
        logger.info(f'{bump=} - next version: {next_version}')

    tag_name = cfg.tag_name(next_version)
    release_notes = _render_release_notes(
        cfg=cfg,
        version=next_version,
        categorised_commits=categorised_commits,
    )

    if cfg.dry_run:
        logger.info(f'dry-run - would reconcile draft-release {tag_name}')
        logger.info(f'release-notes:\n{release_notes}')
        return ReconcileResult(
            state=ReleaseState.DRY_RUN,
            path=path,
            previous_version=previous_version,
            version=next_version,
            tag_name=tag_name,
            bump=bump,
            release_notes=release_notes,
        )

    release = github.release.reconcile_draft_release(
        host=host,
        tag_name=tag_name,
        name=next_version,
        body=release_notes,
    )

    return ReconcileResult(
        state=ReleaseState.RECONCILED,
        path=path,
        previous_version=previous_version,
        version=next_version,
        tag_name=tag_name,
        bump=bump,
        release_notes=release_notes,
        release=release,
    )
