from copy import copy
import logging
import re
import sys

# zero-width space
ZWSP = '\u200b'

_colon_pair_pattern = re.compile(r':(?=:)')


def sanitise(text: str) -> str:
    '''
    GitHub-Actions interprets lines containing `::<command>::` as workflow-commands (e.g. to set
    outputs, or to mask values). As logged text (e.g. commit-messages, or release-notes) may contain
    such sequences, break them up by inserting a zero-width space between the two colons.
    '''
    if not text:
        return text
    # break up every pair of adjacent colons (also within longer runs, e.g. `::::`)
    return _colon_pair_pattern.sub(f':{ZWSP}', text)


class CCFormatter(logging.Formatter):
    level_colors = {
        logging.DEBUG: lambda level_name:
        f'{Bcolors.BOLD}{Bcolors.BLUE}{level_name}{Bcolors.RESET_ALL}',
        logging.INFO: lambda level_name:
        f'{Bcolors.BOLD}{Bcolors.GREEN}{level_name}{Bcolors.RESET_ALL}',
        logging.WARNING: lambda level_name:
        f'{Bcolors.BOLD}{Bcolors.YELLOW}{level_name}{Bcolors.RESET_ALL}',
        logging.ERROR: lambda level_name:
        f'{Bcolors.BOLD}{Bcolors.RED}{level_name}{Bcolors.RESET_ALL}',
    }

    def color_level_name(self, level_name, level_number):
        def default(level_name):
            return str(level_name)

        func = self.level_colors.get(level_number, default)
        return func(level_name)

    def formatMessage(self, record):
        record_copy = copy(record)
        levelname = record_copy.levelname
        if sys.stderr.isatty():
            levelname = self.color_level_name(levelname, record_copy.levelno)
        record_copy.__dict__['levelprefix'] = levelname
        return super().formatMessage(record_copy)

    def format(self, record):
        # also covers exception-texts and stack-infos appended by base-class
        return sanitise(super().format(record))


class Bcolors:
    RESET_ALL = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'


def configure_default_logging(
    stdout_level=None,
    force=True,
    custom_format_string: str = '',
):
    if not stdout_level:
        stdout_level = logging.INFO

    # make sure to have a clean root logger (in case setup is called multiple times)
    if force:
        handlers = list(logging.root.handlers)
        for h in handlers:
            logging.root.removeHandler(h)
            h.close()

    # stdout is reserved for outputs (see update_draft_release.py)
    sh = logging.StreamHandler(stream=sys.stderr)
    sh.setLevel(stdout_level)
    sh.setFormatter(CCFormatter(fmt=custom_format_string or default_fmt_string()))

    logging.root.addHandler(hdlr=sh)
    logging.root.setLevel(level=stdout_level)

    # too verbose
    logging.getLogger('github3').setLevel(logging.WARNING)


def default_fmt_string():
    return '%(asctime)s [%(levelprefix)s] %(name)s: %(message)s'
