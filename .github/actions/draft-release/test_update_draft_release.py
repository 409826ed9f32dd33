import argparse

import pytest

import update_draft_release


def parsed_args(**kwargs):
    args = {
        'cfg': None,
        'release_branch': None,
        'tag_prefix': None,
        'initial_version': None,
        'release_notes_template': None,
        'release_notes_template_file': None,
        'dry_run': None,
    }
    args.update(kwargs)
    return argparse.Namespace(**args)


@pytest.fixture(autouse=True)
def no_ref_name(monkeypatch):
    monkeypatch.delenv('GITHUB_REF_NAME', raising=False)


def test_release_cfg_defaults():
    cfg = update_draft_release.release_cfg(parsed_args())

    assert cfg.release_branch == 'main'
    assert cfg.tag_prefix == ''
    assert not cfg.dry_run


def test_release_cfg_precedence(tmp_path, monkeypatch):
    cfg_file = tmp_path / 'cfg.yaml'
    cfg_file.write_text(
        'release-branch: from-file\n'
        'tag-prefix: file-\n'
        'initial-version: 1.0.0\n'
    )
    monkeypatch.setenv('GITHUB_REF_NAME', '42/merge')

    cfg = update_draft_release.release_cfg(parsed_args(
        cfg=str(cfg_file),
        tag_prefix='v',
    ))

    # configured branch is not overridden by GITHUB_REF_NAME
    assert cfg.release_branch == 'from-file'
    assert cfg.tag_prefix == 'v'
    assert cfg.initial_version == '1.0.0'

    cfg = update_draft_release.release_cfg(parsed_args(
        cfg=str(cfg_file),
        release_branch='from-args',
        dry_run=True,
    ))

    assert cfg.release_branch == 'from-args'
    assert cfg.tag_prefix == 'file-'
    assert cfg.dry_run


def test_release_cfg_branch_falls_back_to_ref_name(tmp_path, monkeypatch):
    monkeypatch.setenv('GITHUB_REF_NAME', 'release-1.x')

    cfg = update_draft_release.release_cfg(parsed_args())
    assert cfg.release_branch == 'release-1.x'

    cfg_file = tmp_path / 'cfg.yaml'
    cfg_file.write_text('tag_prefix: v\n')

    cfg = update_draft_release.release_cfg(parsed_args(cfg=str(cfg_file)))
    assert cfg.release_branch == 'release-1.x'
    assert cfg.tag_prefix == 'v'

    cfg = update_draft_release.release_cfg(parsed_args(release_branch='main'))
    assert cfg.release_branch == 'main'


def test_release_cfg_template_file(tmp_path):
    template_file = tmp_path / 'template.mako'
    template_file.write_text('Release ${version}')

    cfg = update_draft_release.release_cfg(parsed_args(
        release_notes_template_file=str(template_file),
    ))
    assert cfg.release_notes_template == 'Release ${version}'

    # inline template takes precedence
    cfg = update_draft_release.release_cfg(parsed_args(
        release_notes_template_file=str(template_file),
        release_notes_template='inline',
    ))
    assert cfg.release_notes_template == 'inline'


def test_write_outputs(tmp_path, capsys):
    outputs = {
        'release-url': 'https://github.com/org/repo/releases/tag/v1.1.0',
        'release-id': '3',
        'version': 'v1.1.0',
    }
    expected = (
        'release-url=https://github.com/org/repo/releases/tag/v1.1.0\n'
        'release-id=3\n'
        'version=v1.1.0\n'
    )

    outputs_file = tmp_path / 'github-output'
    outputs_file.write_text('existing=value\n')

    update_draft_release.write_outputs(outputs, path=str(outputs_file))
    assert outputs_file.read_text() == 'existing=value\n' + expected

    update_draft_release.write_outputs(outputs, path='-')
    assert capsys.readouterr().out == expected
