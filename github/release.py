'''
utils for managing (draft-)releases via the repository-host (see `github.host`)
'''

import collections.abc
import dataclasses
import logging

import github.host

logger = logging.getLogger(__name__)

# limit refers to amount of codepoints (tested empirically for some samples)
# stolen from: https://github.com/dead-claudia/github-limits
release_body_limit = 125000


@dataclasses.dataclass(frozen=True)
class GitHubRelease:
    id: int
    url: str
    tag_name: str


def body_or_replacement(
    body: str,
    replacement: str='body was too large (limit: {limit} / actual: {actual})',
    limit: int=release_body_limit,
) -> tuple[str, bool]:
    '''
    convenience function that will check whether given body is short enough to be accepted
    by GitHub's API. If so, passed body will be returned as first element of returned tuple, else
    replacement value.

    The second value of returned tuple will indicate whether original body was returned. Callers
    may use this hint to perform a mitigation.
    '''
    if len(body) <= limit:
        return body, True

    return replacement.format(
        limit=limit,
        actual=len(body),
    ), False


def find_draft_release(
    releases: collections.abc.Iterable[github.host.ReleaseRef],
    tag_name: str,
) -> github.host.ReleaseRef | None:
    for release in releases:
        if not release.draft:
            continue
        if release.tag_name == tag_name:
            return release

    return None


def iter_stale_draft_releases(
    releases: collections.abc.Iterable[github.host.ReleaseRef],
    keep_release_id: int,
) -> collections.abc.Iterable[github.host.ReleaseRef]:
    '''
    yields all draft-releases, except for the one to keep. Published releases are never yielded.
    '''
    for release in releases:
        if not release.draft:
            continue
        if release.id == keep_release_id:
            continue

        yield release


def delete_stale_draft_releases(
    host: github.host.RepositoryHost,
    releases: collections.abc.Iterable[github.host.ReleaseRef],
    keep_release_id: int,
) -> collections.abc.Generator[github.host.ReleaseRef, None, None]:
    '''
    deletes all draft-releases except for the one to keep, one at a time. Each deleted release is
    yielded after its deletion. Failures are not handled (i.e. deletion stops at the first
    failing release, leaving preceding deletions in place).
    '''
    for release in iter_stale_draft_releases(
        releases=releases,
        keep_release_id=keep_release_id,
    ):
        logger.info(f'deleting stale draft-release {release.tag_name} ({release.id=})')
        host.delete_release(release.id)
        yield release


def reconcile_draft_release(
    host: github.host.RepositoryHost,
    tag_name: str,
    name: str,
    body: str,
) -> GitHubRelease:
    '''
    ensures there is exactly one draft-release, bearing the given tag_name, name and body.

    An existing draft-release w/ matching tag-name is updated; otherwise, a new draft-release is
    created. Afterwards, any other draft-releases are deleted. Published releases are left
    untouched.
    '''
    body, fits = body_or_replacement(body)
    if not fits:
        logger.warning(f'release-notes for {tag_name=} exceed size-limit - will use replacement')

    releases = host.releases()
    logger.debug(f'found {len(releases)} release(s)')

    if (draft_release := find_draft_release(
        releases=releases,
        tag_name=tag_name,
    )):
        logger.info(f'updating draft-release {tag_name=} ({draft_release.id=})')
        release = host.update_release(
            release_id=draft_release.id,
            tag_name=tag_name,
            name=name,
            body=body,
            draft=True,
        )
    else:
        logger.info(f'creating draft-release {tag_name=}')
        release = host.create_release(
            tag_name=tag_name,
            name=name,
            body=body,
            draft=True,
        )

    deleted = list(delete_stale_draft_releases(
        host=host,
        releases=releases,
        keep_release_id=release.id,
    ))
    if deleted:
        logger.info(f'deleted {len(deleted)} stale draft-release(s)')

    logger.info(f'draft-release {release.tag_name} is up-to-date ({release.id=})')
    return GitHubRelease(
        id=release.id,
        url=release.url,
        tag_name=release.tag_name,
    )
