"""screen-tester: compare a screenshot against its stored baseline.

Usage: screen-tester compare <base_dir> <image> [options]

The image plays the part of a fresh capture. With no baseline at
<base_dir>/<name><ext> it becomes the baseline and the run passes.
Otherwise the run fails (exit 1) when dimensions differ or the mismatch
percentage is above --threshold, and <name>-diff<ext> is written.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, screen-tester looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
  SCREEN_TESTER_* variables supply defaults; flags always win.
"""

import argparse
import asyncio
import logging
import os
import sys

from screen_checker import registry
from screen_checker.capture import FileCapture
from screen_checker.configurator import screen_test_factory
from screen_checker.core.env import load_env, settings_from_env
from screen_checker.core.errors import ScreenTestError
from screen_checker.core.report import format_json, format_text


def _rectangle(value: str) -> tuple[int, int, int, int]:
    parts = value.split(',')
    if len(parts) != 4:
        raise argparse.ArgumentTypeError(f'expected x,y,width,height, got {value!r}')
    try:
        x, y, w, h = (int(p) for p in parts)
    except ValueError:
        raise argparse.ArgumentTypeError(f'rectangle values must be integers: {value!r}') from None
    return (x, y, w, h)


def _build_parser() -> argparse.ArgumentParser:
    epilog = (
        'Examples:\n'
        '  screen-tester compare ./baselines shot.png --name home\n'
        '  screen-tester compare ./baselines shot.png --threshold 0.5 --ignore 0,0,1280,64\n'
        '  screen-tester compare ./baselines shot.png --path out/home.jpg --save-new --json\n'
        '  screen-tester formats\n'
    )
    parser = argparse.ArgumentParser(
        prog='screen-tester',
        description='Visual regression testing: compare screenshots against stored baselines.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging to stderr')
    sub = parser.add_subparsers(dest='command', help='Command to run')

    p = sub.add_parser('compare', help='Compare an image file against its baseline')
    p.add_argument('base_dir', nargs='?', default=None, help='Baseline directory (or SCREEN_TESTER_BASE_DIR)')
    p.add_argument('image', help='Path to the freshly captured PNG/JPEG/WEBP')
    p.add_argument('-n', '--name', default='test', help='Test name, baseline is <name><ext> (default: test)')
    p.add_argument('-t', '--threshold', type=float, default=None, help='Tolerated mismatch percentage (default 0)')
    p.add_argument('--type', choices=['png', 'jpeg', 'webp'], help='Capture type, also sets the extension')
    p.add_argument('--path', help='Explicit baseline path, overrides base_dir, name and extension')
    p.add_argument('--include-aa', action='store_true', default=None, help='Compare anti-aliased pixels too')
    p.add_argument('--ignore-colors', action='store_true', default=None, help='Compare brightness only')
    p.add_argument(
        '--ignore', type=_rectangle, action='append', default=[], metavar='X,Y,W,H', help='Region to ignore'
    )
    p.add_argument(
        '--include', type=_rectangle, action='append', default=[], metavar='X,Y,W,H', help='Only compare here'
    )
    p.add_argument('--force-ext', help='Codec for written artifacts, regardless of extension')
    p.add_argument('--compression-level', type=int, help='Quality (jpeg/webp) or zlib level (png)')
    p.add_argument('--save-new', action='store_true', help='On failure write <name>-new<ext>')
    p.add_argument('--overwrite', action='store_true', help='On failure replace the baseline')
    p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')

    sub.add_parser('formats', help='List supported output formats')
    return parser


def _print_formats() -> None:
    """Print each codec with its aliases and default quality."""
    print('Supported formats:\n')
    for name, codec in sorted(registry.all_codecs().items()):
        aliases = f' (also {", ".join(codec.aliases)})' if codec.aliases else ''
        print(f'  {name:<6} {codec.help}{aliases}')


def _factory_kwargs(args: argparse.Namespace) -> dict:
    """Merge SCREEN_TESTER_* defaults with command-line flags."""
    kwargs = settings_from_env()
    if args.base_dir is not None:
        kwargs['base_dir'] = args.base_dir
    if args.threshold is not None:
        kwargs['threshold'] = args.threshold
    if args.include_aa is not None:
        kwargs['include_aa'] = args.include_aa
    if args.ignore_colors is not None:
        kwargs['ignore_colors'] = args.ignore_colors
    if args.ignore or args.include:
        kwargs['matching_box'] = {'ignore_rectangles': args.ignore, 'include_rectangles': args.include}

    output = dict(kwargs.get('output_settings', {}))
    if args.force_ext is not None:
        output['force_ext'] = args.force_ext
    if args.compression_level is not None:
        output['compression_level'] = args.compression_level
    kwargs['output_settings'] = output
    return kwargs


def _screenshot_options(args: argparse.Namespace) -> dict:
    options: dict = {}
    if args.type:
        options['type'] = args.type
    if args.path:
        options['path'] = args.path
    if args.save_new:
        options['save_new_image_on_error'] = True
    if args.overwrite:
        options['overwrite_image_on_change'] = True
    return options


async def _run_compare(args: argparse.Namespace) -> bool:
    kwargs = _factory_kwargs(args)
    if 'base_dir' not in kwargs:
        kwargs['base_dir'] = '.'
    tester = await screen_test_factory(**kwargs)
    outcome = await tester.evaluate(FileCapture(args.image), args.name, _screenshot_options(args))
    print(format_json(outcome) if args.json else format_text(outcome))
    return outcome.passed


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    # Load .env before anything else, OS env vars always win
    env_path = load_env(env_file=args.env_file)
    if env_path:
        print(f'screen-tester: loaded {env_path}', file=sys.stderr)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == 'formats':
        _print_formats()
        return

    if not os.path.isfile(args.image):
        print(f'Error: image not found: {args.image}', file=sys.stderr)
        sys.exit(1)

    try:
        passed = asyncio.run(_run_compare(args))
    except (ScreenTestError, ValueError) as e:
        print(f'Error: {e}', file=sys.stderr)
        sys.exit(2)

    if not passed:
        sys.exit(1)


if __name__ == '__main__':
    main()
