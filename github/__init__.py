# SPDX-FileCopyrightText: 2024 SAP SE or an SAP affiliate company and Gardener contributors
#
# SPDX-License-Identifier: Apache-2.0

import logging
import os

import github3
import github3.exceptions
import github3.repos

logger = logging.getLogger(__name__)


def host_org_and_repo(
    repo_url: str=None,
) -> tuple[str, str, str]:
    '''
    returns a three-tuple of `host`, `org`, `repo`. If repo_url is passed, it is assumed point to
    a github-hosted repository (it may or may not have a schema). Otherwise, fallback to
    environment variables GITHUB_SERVER_URL, GITHUB_REPOSITORY, as set for GitHub-Actions-runs
    is done.
    '''
    if repo_url:
        if '://' in repo_url:
            repo_url = repo_url.split('://')[-1]
        try:
            host, org, repo = repo_url.strip('/').split('/')
        except ValueError:
            raise ValueError(f'expected repo-url of form {{host}}/{{org}}/{{repo}}: {repo_url=}')
    else:
        host = os.environ['GITHUB_SERVER_URL'].removeprefix('https://')
        org, repo = os.environ['GITHUB_REPOSITORY'].split('/')

    return host, org, repo


def github_api(
    repo_url: str=None,
    token: str=None,
) -> github3.GitHub:
    '''
    returns an initialised github-api instance, honouring some environment variables typically
    present for GitHub-Actions-runs (GITHUB_SERVER_URL, GITHUB_REPOSITORY, GITHUB_TOKEN).
    '''
    host, _, _ = host_org_and_repo(
        repo_url=repo_url,
    )

    token = token or os.environ.get('GITHUB_TOKEN')

    if host == 'github.com':
        return github3.GitHub(token=token)

    server_url = os.environ.get('GITHUB_SERVER_URL', f'https://{host}')
    return github3.GitHubEnterprise(
        url=server_url,
        token=token,
    )


def repository(
    repo_url: str=None,
    token: str=None,
) -> github3.repos.Repository:
    '''
    returns the github3-repository-object for the given repo_url (defaulting to the repository
    a GitHub-Action runs for).
    '''
    _, org, repo = host_org_and_repo(repo_url=repo_url)
    api = github_api(
        repo_url=repo_url,
        token=token,
    )

    try:
        return api.repository(
            owner=org,
            repository=repo,
        )
    except github3.exceptions.NotFoundError as nfe:
        raise RuntimeError(
            f'failed to retrieve repository {org}/{repo} (missing privileges?)',
        ) from nfe
