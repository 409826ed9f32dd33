# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

'''
narrow interface towards the repository-host (tags, commits, refs, releases), as consumed by
`draft_release`, and an implementation based on github3.py.
'''

import collections.abc
import dataclasses
import logging
import typing

import github3.repos
import github3.repos.release

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class TagRef:
    name: str


@dataclasses.dataclass(frozen=True)
class CommitRef:
    sha: str
    message: str


@dataclasses.dataclass(frozen=True)
class ReleaseRef:
    id: int
    tag_name: str
    draft: bool
    url: str | None = None
    name: str | None = None


class RepositoryHost(typing.Protocol):
    def tags(self, page: int) -> list[TagRef]:
        ...

    def commits(self, sha: str, page: int) -> list[CommitRef]:
        ...

    def ref_sha(self, ref: str) -> str:
        ...

    def releases(self) -> list[ReleaseRef]:
        ...

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool=True,
    ) -> ReleaseRef:
        ...

    def update_release(
        self,
        release_id: int,
        tag_name: str,
        name: str,
        body: str,
        draft: bool=True,
    ) -> ReleaseRef:
        ...

    def delete_release(self, release_id: int):
        ...


T = typing.TypeVar('T')


def iter_pages(
    fetch_page: collections.abc.Callable[[int], collections.abc.Sequence[T]],
    first_page: int=1,
) -> collections.abc.Generator[collections.abc.Sequence[T], None, None]:
    '''
    lazily yields pages retrieved via `fetch_page` (called w/ successive page-numbers, starting
    at `first_page`) until an empty page is returned. The total amount of pages is not known
    upfront. Pages are only requested as they are consumed, so callers may stop early.
    '''
    page = first_page
    while True:
        logger.debug(f'fetching {page=}')
        items = fetch_page(page)
        if not items:
            logger.debug(f'{page=} is empty - no more pages')
            return

        logger.debug(f'found {len(items)} item(s) on {page=}')
        yield items
        page += 1


def _release_ref(release: github3.repos.release.Release) -> ReleaseRef:
    return ReleaseRef(
        id=release.id,
        tag_name=release.tag_name,
        draft=release.draft,
        url=release.html_url,
        name=release.name,
    )


class GitHubRepositoryHost:
    def __init__(
        self,
        repository: github3.repos.Repository,
        per_page: int=100,
    ):
        self.repository = repository
        self.per_page = per_page

    def _page(self, route: str, page: int, **params) -> list[dict]:
        url = self.repository._build_url(route, base_url=self.repository._api)
        res = self.repository._get(
            url,
            params={
                'per_page': self.per_page,
                'page': page,
                **params,
            },
        )
        return self.repository._json(res, 200) or []

    def tags(self, page: int) -> list[TagRef]:
        return [
            TagRef(name=raw['name'])
            for raw in self._page('tags', page=page)
        ]

    def commits(self, sha: str, page: int) -> list[CommitRef]:
        return [
            CommitRef(
                sha=raw['sha'],
                message=raw['commit']['message'],
            )
            for raw in self._page('commits', page=page, sha=sha)
        ]

    def ref_sha(self, ref: str) -> str:
        '''
        returns the commit-digest the given ref (e.g. `tags/v1.0.0`, `heads/main`) points to.
        annotated tags are dereferenced to the tagged commit.
        '''
        git_ref = self.repository.ref(ref)
        git_object = git_ref.object

        if git_object.type == 'tag':
            git_object = self.repository.tag(git_object.sha).object

        logger.debug(f'{ref=} points to {git_object.sha}')
        return git_object.sha

    def releases(self) -> list[ReleaseRef]:
        return [
            _release_ref(release)
            for release in self.repository.releases()
        ]

    def create_release(
        self,
        tag_name: str,
        name: str,
        body: str,
        draft: bool=True,
    ) -> ReleaseRef:
        release = self.repository.create_release(
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
        )
        if not release:
            raise RuntimeError(f'failed to create release {tag_name=} (missing privileges?)')

        return _release_ref(release)

    def update_release(
        self,
        release_id: int,
        tag_name: str,
        name: str,
        body: str,
        draft: bool=True,
    ) -> ReleaseRef:
        release = self.repository.release(release_id)

        if not release.edit(
            tag_name=tag_name,
            name=name,
            body=body,
            draft=draft,
        ):
            raise RuntimeError(f'failed to update release {release_id=} (missing privileges?)')

        return _release_ref(release)

    def delete_release(self, release_id: int):
        release = self.repository.release(release_id)

        if not release.delete():
            raise RuntimeError(f'failed to delete release {release_id=} (missing privileges?)')
