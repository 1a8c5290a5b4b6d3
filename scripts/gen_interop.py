#!/usr/bin/env python3
"""
gen_interop.py - interop surface generator entry point

Generates TypeScript declarations, JavaScript bindings and the C# serializer
context from compiled-module descriptors.

Usage:
    python scripts/gen_interop.py MODULE.json [MODULE.json ...] [--entry NAME]
        [--rule PATTERN=REPLACEMENT] [--ignore NAME] [--output-dir DIR]
"""

import argparse
import logging
import os
import sys
import time

# Add scripts directory to path
script_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, script_dir)

from interop_gen import Generator, InteropError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate interop declarations, bindings and serializer')
    parser.add_argument('modules', nargs='+',
                        help='Compiled-module descriptor JSON files')
    parser.add_argument('--entry', default='',
                        help='Entry module name; its namespace rules apply (default: first module)')
    parser.add_argument('--rule', action='append', default=[], metavar='PATTERN=REPLACEMENT',
                        help='Namespace override rule, applied after the entry module rules')
    parser.add_argument('--ignore', action='append', default=[], metavar='NAME',
                        help='Interop method to skip, by full or short name')
    parser.add_argument('--output-dir', default='gen',
                        help='Directory for outputs without explicit paths')
    parser.add_argument('--declarations', default=None,
                        help='Declarations output path (default: OUTPUT_DIR/bindings.d.ts)')
    parser.add_argument('--bindings', default=None,
                        help='Bindings output path (default: OUTPUT_DIR/bindings.g.js)')
    parser.add_argument('--serializer', default=None,
                        help='Serializer output path (default: OUTPUT_DIR/SerializerContext.g.cs)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log discovered methods and types')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s',
    )

    start = time.time()
    gen = Generator(entry_module=args.entry)
    try:
        for path in args.modules:
            gen.load(path)
        for rule in args.rule:
            pattern, sep, replacement = rule.partition('=')
            if not sep:
                print(f'Error: invalid rule "{rule}", expected PATTERN=REPLACEMENT', file=sys.stderr)
                return 1
            gen.namespace_rule(pattern, replacement)
        gen.ignore(*args.ignore)

        paths = {
            'declarations': args.declarations or os.path.join(args.output_dir, 'bindings.d.ts'),
            'bindings': args.bindings or os.path.join(args.output_dir, 'bindings.g.js'),
            'serializer': args.serializer or os.path.join(args.output_dir, 'SerializerContext.g.cs'),
        }
        artifacts = gen.write(paths['declarations'], paths['bindings'], paths['serializer'])
    except (InteropError, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    for name, path in paths.items():
        if name in artifacts.errors:
            print(f'Failed: {path} ({artifacts.errors[name]})')
        else:
            print(f'Generated: {path}')

    elapsed = time.time() - start
    print(f'Done in {elapsed:.2f}s')
    return 0 if artifacts.ok else 1


if __name__ == '__main__':
    sys.exit(main())
