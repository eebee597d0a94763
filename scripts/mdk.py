#!/usr/bin/env python3
'''
Modding toolkit for level files.

 $ mdk.py build -o out.lvl spec.yaml
 $ mdk.py export-texture side/all.lvl all/all_fly_snowspeeder -o speeder.png
 $ mdk.py merge -o merged.lvl a.lvl b.lvl
 $ mdk.py dump out.lvl
'''
import argparse
import logging
import os
import sys

from munge import mdk
from munge.enum import Compliant
from munge.exceptions import MungeException


logging.basicConfig(level=logging.DEBUG if 'DEBUG' in os.environ else logging.INFO)
logger = logging.getLogger(__name__)


def parse_args(argv):
    parser = argparse.ArgumentParser(description='munge level files toolkit')
    parser.add_argument('--strict', action='store_true', help='unknown nodes are errors')
    subparsers = parser.add_subparsers(dest='command', required=True)

    build = subparsers.add_parser('build', help='build a level file from a specification')
    build.add_argument('-o', '--output', required=True)
    build.add_argument('specification')

    texture = subparsers.add_parser('export-texture', help='export a texture as an image')
    texture.add_argument('file_path')
    texture.add_argument('path', help='texture path, packs separated by "/"')
    texture.add_argument('-o', '--output', required=True)
    texture.add_argument('--format', type=mdk.parse_format, default=None)
    texture.add_argument('--mipmap', type=int, default=0)

    script = subparsers.add_parser('export-script', help='export the body of a script')
    script.add_argument('file_path')
    script.add_argument('path')
    script.add_argument('-o', '--output', required=True)

    merge = subparsers.add_parser('merge', help='merge level files into a new one')
    merge.add_argument('-o', '--output', required=True)
    merge.add_argument('files', nargs='+')

    dump = subparsers.add_parser('dump', help='print the tree of nodes')
    dump.add_argument('file_path')

    hash_ = subparsers.add_parser('hash', help='print the hash of a name')
    hash_.add_argument('name')

    return parser.parse_args(argv)


def main(argv):
    args = parse_args(argv)
    compliant = Compliant.STRICT if args.strict else Compliant.NONE

    try:
        if args.command == 'build':
            mdk.build(args.specification, args.output)
        elif args.command == 'export-texture':
            mdk.export_texture(args.file_path, args.path, args.output,
                               format=args.format, mipmap=args.mipmap, compliant=compliant)
        elif args.command == 'export-script':
            mdk.export_script(args.file_path, args.path, args.output, compliant=compliant)
        elif args.command == 'merge':
            mdk.merge(args.files, args.output)
        elif args.command == 'dump':
            for line in mdk.dump(args.file_path):
                print(line)
        elif args.command == 'hash':
            print(mdk.hash_name(args.name))
    except (MungeException, KeyError, ValueError, OSError) as e:
        logger.error('%s failed: %s' % (args.command, e))
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
