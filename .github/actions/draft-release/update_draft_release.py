#!/usr/bin/env python

import argparse
import logging
import os
import sys

import yaml

try:
    import draft_release
except ImportError:
    # make local development more comfortable
    repo_root = os.path.join(os.path.dirname(__file__), '../../..')
    sys.path.insert(1, repo_root)
    print(f'note: added {repo_root} to python-path (sys.path)', file=sys.stderr)
    import draft_release

import ci.log
import github
import github.host

logger = logging.getLogger('draft-release-action')


def parse_args():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        '--cfg',
        default=None,
        help='path to YAML-file to read configuration from (overwritten by passed arguments)',
    )
    parser.add_argument(
        '--repo-url',
        required=False,
        default=None,
        help='github-repo-url ({host}/{org}/{repo}). derived from GitHubActions-Env-Vars by default',
    )
    parser.add_argument(
        '--github-auth-token',
        default=os.environ.get('GITHUB_TOKEN', None),
        help='the github-auth-token to use (defaults to GitHub-Action\'s default)',
    )
    # cannot set defaults here, as we need to check actually passed arguments
    parser.add_argument(
        '--release-branch',
        default=None,
        help='branch to release from (overrides --cfg; GITHUB_REF_NAME is used if neither sets it)',
    )
    parser.add_argument('--tag-prefix', default=None)
    parser.add_argument('--initial-version', default=None)
    parser.add_argument(
        '--release-notes-template',
        default=None,
        help=(
            'mako-template to render release-notes with (built-in template is used if empty). '
            'note: lines starting w/ `##` are mako-comments; write headings as `${"##"}`'
        ),
    )
    parser.add_argument(
        '--release-notes-template-file',
        default=None,
        help='path to file to read release-notes-template from',
    )
    parser.add_argument(
        '--dry-run',
        action='store_true',
        default=None,
        help='if set, only compute version and release-notes (no release will be touched)',
    )
    parser.add_argument(
        '--outputs',
        default=os.environ.get('GITHUB_OUTPUT', '-'),
        help='file to append outputs to (`-` for stdout). defaults to GITHUB_OUTPUT',
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        default=False,
    )

    return parser.parse_args()


def release_cfg(parsed) -> draft_release.ReleaseCfg:
    raw = {}
    if parsed.cfg:
        with open(parsed.cfg) as f:
            raw = yaml.safe_load(f) or {}

    # accept both `tag_prefix` and `tag-prefix`
    raw = {
        key.replace('-', '_'): value
        for key, value in raw.items()
    }

    # GITHUB_REF_NAME is only a fallback for branches neither passed nor configured
    if not raw.get('release_branch') and (ref_name := os.environ.get('GITHUB_REF_NAME')):
        raw['release_branch'] = ref_name

    if parsed.release_notes_template_file:
        with open(parsed.release_notes_template_file) as f:
            raw['release_notes_template'] = f.read()

    overwrites = {
        'release_branch': parsed.release_branch,
        'tag_prefix': parsed.tag_prefix,
        'initial_version': parsed.initial_version,
        'release_notes_template': parsed.release_notes_template,
        'dry_run': parsed.dry_run,
    }
    for key, value in overwrites.items():
        if value is None:
            continue
        raw[key] = value

    return draft_release.ReleaseCfg.from_dict(raw)


def write_outputs(outputs: dict[str, str], path: str):
    lines = ''.join(f'{key}={value}\n' for key, value in outputs.items())

    if path == '-':
        sys.stdout.write(lines)
        return

    with open(path, 'a') as f:
        f.write(lines)


def main():
    parsed = parse_args()

    ci.log.configure_default_logging(
        stdout_level=logging.DEBUG if parsed.verbose else logging.INFO,
    )

    cfg = release_cfg(parsed)
    logger.info(f'{cfg.release_branch=} {cfg.tag_prefix=} {cfg.dry_run=}')

    host = github.host.GitHubRepositoryHost(
        repository=github.repository(
            repo_url=parsed.repo_url,
            token=parsed.github_auth_token,
        ),
    )

    result = draft_release.reconcile(
        host=host,
        cfg=cfg,
    )
    logger.info(f'finished w/ {result.state=}')

    if (outputs := result.outputs()):
        write_outputs(
            outputs=outputs,
            path=parsed.outputs,
        )
        logger.info(f'wrote outputs to {parsed.outputs}')


if __name__ == '__main__':
    main()
