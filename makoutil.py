import logging
import threading

import mako.exceptions
import mako.template

logger = logging.getLogger(__name__)

'''
workaround bug in mako use lock to sequentialise invocations of mako.template.Template
see: https://github.com/sqlalchemy/mako/issues/378
'''
template_lock = threading.Lock()


class RenderError(RuntimeError):
    '''
    raised if a template could not be compiled or rendered. No partial output is returned in
    this case.
    '''
    pass


def render(
    template: str,
    /,
    **context,
) -> str:
    '''
    compiles the given (mako) template and renders it w/ the given context. All values (including
    helper-functions) are passed explicitly via `context`; there is no shared/global state between
    renderings.
    '''
    with template_lock:
        try:
            compiled = mako.template.Template(template)
        except Exception as e:
            logger.error(f'failed to compile template: {e}')
            raise RenderError(f'failed to compile template: {e}') from e

        try:
            return compiled.render(**context)
        except Exception as e:
            details = mako.exceptions.text_error_template().render()
            logger.error(f'failed to render template: {e}')
            logger.debug(details)
            raise RenderError(f'failed to render template: {e}') from e
