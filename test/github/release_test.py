# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import dataclasses

import pytest

import github.host
import github.release


class FakeReleaseHost:
    def __init__(self, releases, fail_delete_for=()):
        self._releases = {release.id: release for release in releases}
        self.fail_delete_for = set(fail_delete_for)
        self.mutations = []
        self._next_id = max(self._releases, default=0) + 1

    def releases(self):
        return list(self._releases.values())

    def create_release(self, tag_name, name, body, draft=True):
        release = github.host.ReleaseRef(
            id=self._next_id,
            tag_name=tag_name,
            draft=draft,
            url=f'https://github.com/org/repo/releases/tag/{tag_name}',
            name=name,
        )
        self._next_id += 1
        self._releases[release.id] = release
        self.mutations.append(('create', release.id, body))
        return release

    def update_release(self, release_id, tag_name, name, body, draft=True):
        release = dataclasses.replace(
            self._releases[release_id],
            tag_name=tag_name,
            name=name,
            draft=draft,
        )
        self._releases[release_id] = release
        self.mutations.append(('update', release_id, body))
        return release

    def delete_release(self, release_id):
        if release_id in self.fail_delete_for:
            raise RuntimeError(f'failed to delete release {release_id=}')
        del self._releases[release_id]
        self.mutations.append(('delete', release_id))


def release(id, tag_name, draft):
    return github.host.ReleaseRef(
        id=id,
        tag_name=tag_name,
        draft=draft,
        url=f'https://github.com/org/repo/releases/tag/{tag_name}',
        name=tag_name.removeprefix('v'),
    )


def test_body_or_replacement():
    assert github.release.body_or_replacement('short', limit=10) == ('short', True)
    assert github.release.body_or_replacement('x' * 10, limit=10) == ('x' * 10, True)

    body, fits = github.release.body_or_replacement('x' * 11, limit=10)
    assert not fits
    assert body == 'body was too large (limit: 10 / actual: 11)'

    body, fits = github.release.body_or_replacement(
        'x' * 11,
        replacement='too long',
        limit=10,
    )
    assert (body, fits) == ('too long', False)


def test_find_draft_release():
    releases = [
        release(1, 'v1.0.0', draft=False),
        release(2, 'v1.1.0', draft=True),
    ]

    assert github.release.find_draft_release(releases, 'v1.1.0').id == 2
    # published releases are never considered
    assert github.release.find_draft_release(releases, 'v1.0.0') is None
    assert github.release.find_draft_release(releases, 'v2.0.0') is None


def test_reconcile_draft_release_updates_existing_draft():
    host = FakeReleaseHost([
        release(1, 'v1.0.0', draft=False),
        release(2, 'v1.0.1', draft=True),
        release(3, 'v1.1.0', draft=True),
    ])

    result = github.release.reconcile_draft_release(
        host=host,
        tag_name='v1.1.0',
        name='1.1.0',
        body='notes',
    )

    assert result == github.release.GitHubRelease(
        id=3,
        url='https://github.com/org/repo/releases/tag/v1.1.0',
        tag_name='v1.1.0',
    )
    assert host.mutations == [
        ('update', 3, 'notes'),
        ('delete', 2),
    ]
    assert {r.id for r in host.releases()} == {1, 3}


def test_reconcile_draft_release_creates_draft():
    host = FakeReleaseHost([
        release(1, 'v1.0.0', draft=False),
        release(2, 'v1.0.1', draft=True),
        release(3, 'v1.0.2', draft=True),
    ])

    result = github.release.reconcile_draft_release(
        host=host,
        tag_name='v1.1.0',
        name='1.1.0',
        body='notes',
    )

    assert result.id == 4
    assert result.tag_name == 'v1.1.0'
    assert host.mutations == [
        ('create', 4, 'notes'),
        ('delete', 2),
        ('delete', 3),
    ]

    releases = host.releases()
    assert [r.id for r in releases if r.draft] == [4]
    # published release is left untouched
    assert releases[0] == release(1, 'v1.0.0', draft=False)


def test_reconcile_draft_release_w_published_release_of_same_tag():
    host = FakeReleaseHost([
        release(1, 'v1.1.0', draft=False),
    ])

    result = github.release.reconcile_draft_release(
        host=host,
        tag_name='v1.1.0',
        name='1.1.0',
        body='notes',
    )

    assert result.id == 2
    assert host.mutations == [('create', 2, 'notes')]


def test_reconcile_draft_release_replaces_oversized_body():
    host = FakeReleaseHost([])

    github.release.reconcile_draft_release(
        host=host,
        tag_name='v1.1.0',
        name='1.1.0',
        body='x' * (github.release.release_body_limit + 1),
    )

    (_, _, body), = host.mutations
    assert body.startswith('body was too large')


def test_reconcile_draft_release_stops_at_failing_deletion():
    host = FakeReleaseHost(
        [
            release(1, 'v1.0.1', draft=True),
            release(2, 'v1.0.2', draft=True),
            release(3, 'v1.0.3', draft=True),
        ],
        fail_delete_for=(2,),
    )

    with pytest.raises(RuntimeError):
        github.release.reconcile_draft_release(
            host=host,
            tag_name='v1.1.0',
            name='1.1.0',
            body='notes',
        )

    # preceding deletion is not rolled back, subsequent ones are not attempted
    assert host.mutations == [
        ('create', 4, 'notes'),
        ('delete', 1),
    ]
    assert {r.id for r in host.releases()} == {2, 3, 4}
