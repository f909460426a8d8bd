import argparse
import logging
import sys
from pathlib import Path

from actiontools.purge import __version__, run
from actiontools.purge.config import load_config
from actiontools.purge.err import PurgeException
from actiontools.purge.util import log as log_util

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


def parse_args(argv):
    parser = argparse.ArgumentParser(
        prog='artifact-purge',
        description='Delete GitHub Actions artifacts older than the configured age. '
                    'Configuration is read from the GitHub Action environment (INPUT_AGE, INPUT_GITHUB_TOKEN, ...) '
                    'and optionally from a purge.toml file.')
    parser.add_argument('--config', type=Path, help='TOML configuration file with a [purge] table')
    parser.add_argument('--dry-run', action='store_true', help='Only log artifacts which would be removed')
    parser.add_argument('--log-level', default='info', choices=['debug', 'info', 'warning', 'error'])
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def main(argv=None, environ=None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    log_util.configure(args.log_level)

    try:
        config = load_config(environ, args.config, simulate=True if args.dry_run else None)
        run(config)
    except PurgeException as e:
        log.error(f"[purge_failed] reason=[{e}]", exc_info=e)
        return EXIT_FAILED
    except KeyboardInterrupt:
        log.warning("[purge_interrupted]")
        return EXIT_INTERRUPTED

    return EXIT_OK
