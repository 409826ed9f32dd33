'''
Release Notes

Computes release notes from conventional commits (see `release_notes.conventional`), and renders
them into markdown using either a built-in default template, or a caller-supplied (mako)
template (see `release_notes.markdown`).
'''
