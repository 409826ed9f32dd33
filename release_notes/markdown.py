import collections
import collections.abc
import logging
import os
import re

import makoutil
import release_notes.model as rnm

logger = logging.getLogger(__name__)

own_dir = os.path.abspath(os.path.dirname(__file__))
default_template_path = os.path.join(own_dir, 'release_notes.mako')

GENERAL_SCOPE = 'General'


def default_template() -> str:
    with open(default_template_path) as f:
        return f.read()


def scope_display_name(scope: str | None) -> str:
    '''
    returns the name to display for the given scope. Absent scopes are displayed as `General`;
    words separated by `-` or `_` are capitalised and joined w/ a space (e.g. `user-auth` becomes
    `User Auth`).
    '''
    if not scope:
        return GENERAL_SCOPE

    words = [word for word in re.split(r'[-_]', scope) if word]
    if not words:
        return GENERAL_SCOPE

    return ' '.join(word[0].upper() + word[1:] for word in words)


def group_by_scope(
    commits: collections.abc.Iterable[rnm.Commit],
) -> list[rnm.ScopeGroup]:
    '''
    groups the given commits by their scope's display-name. Groups are sorted alphabetically, except
    for `General` (commits w/o scope), which is always last. Within each group, the order of the
    passed commits is preserved.
    '''
    groups: dict[str, list[rnm.Commit]] = collections.defaultdict(list)
    for commit in commits or ():
        groups[scope_display_name(commit.scope)].append(commit)

    return [
        rnm.ScopeGroup(scope=scope, commits=tuple(groups[scope]))
        for scope in sorted(
            groups,
            key=lambda scope: (scope == GENERAL_SCOPE, scope.casefold(), scope),
        )
    ]


def render(
    template: str | None,
    data: rnm.ReleaseNotesData,
) -> str:
    '''
    renders release-notes for the given data. If template is empty (or consists only of
    whitespace), the built-in default template is used.

    Templates are mako-templates. They are passed `version`, `features`, `fixes`, `breaking`, and
    the `group_by_scope` helper. Failures to compile or render raise `makoutil.RenderError`.

    Note that mako treats lines starting w/ `##` as comments, i.e. markdown-headings written
    literally (`## Fixes`) are silently dropped. Emit them as expressions instead (e.g.
    `${'##'} Fixes`), as done in the default template.
    '''
    if not template or not template.strip():
        logger.debug('no release-notes-template passed - using default template')
        template = default_template()

    return makoutil.render(
        template,
        version=data.version,
        features=data.features,
        fixes=data.fixes,
        breaking=data.breaking,
        group_by_scope=group_by_scope,
    )
