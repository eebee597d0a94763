'''
# Modding toolkit

Operations behind the command line tools: they drive the codec with files
and specification files. A specification for build() looks like

    textures:
      - name: sky
        file: sky.png
        formats: [A8R8G8B8, R5G6B5]
        kind: cubemap      # or "color", the default
        mipmaps: 4         # optional, down to 1 pixel otherwise
    scripts:
      - name: setup
        file: setup.luac
        info: 1
'''
import logging
import os
from pathlib import Path

import yaml
from PIL import Image

from .enum import Compliant
from .exceptions import MagicException, MungeException, PackException
from .header import NodeTree, parse_header, read_children, check_bounds, HEADER_SIZE
from .lazy import LazyData
from .level import LevelData, LevelScript, load_level
from .level.convert import texture_from_image, texture_to_image
from .level.texture import FormatKind, TextureKind
from .name import fnv1a_hash, tag_from_int
from .streams import Stream
from .writer import NodeWriter
from . import fields


logger = logging.getLogger(__name__)

TEXTURE_KINDS = {
    'color': TextureKind.NORMAL,
    'cubemap': TextureKind.CUBEMAP,
}


def load_specification(path):
    with open(path, 'r') as f:
        spec = yaml.safe_load(f) or {}

    if not isinstance(spec, dict):
        raise PackException(f'specification \'{path}\' must be a mapping')

    return spec


def parse_format(value) -> FormatKind:
    try:
        return FormatKind[value.upper()]
    except KeyError:
        raise PackException(f'\'{value}\' is not a known texture format')


def build_level(spec, basedir='.') -> LevelData:
    '''Assemble the level data described by a specification.'''
    level = LevelData()
    basedir = Path(basedir)

    for entry in spec.get('textures', []):
        logger.info('  - Writing %s...' % entry['name'])
        kind = TEXTURE_KINDS.get(entry.get('kind', 'color'))
        if kind is None:
            raise PackException(f'texture \'{entry["name"]}\' has an unknown kind \'{entry["kind"]}\'')

        with Image.open(basedir / entry['file']) as image:
            level.textures.append(texture_from_image(
                entry['name'],
                image,
                [parse_format(_) for _ in entry.get('formats', ['A8R8G8B8'])],
                kind=kind,
                mipmaps=entry.get('mipmaps'),
            ))

    for entry in spec.get('scripts', []):
        logger.info('  - Writing %s...' % entry['name'])
        body = (basedir / entry['file']).read_bytes()
        level.scripts.append(LevelScript(
            name=entry['name'],
            info=entry.get('info', 0),
            data=LazyData.of(fields.BytesField(), body),
        ))

    return level


def build(specification, output) -> int:
    spec = load_specification(specification)
    level = build_level(spec, basedir=os.path.dirname(os.path.abspath(specification)))

    data = level.pack()
    with open(output, 'wb') as f:
        f.write(data)

    logger.info('wrote %d bytes to \'%s\'' % (len(data), output))

    return len(data)


def export_texture(file_path, path, output, format=None, mipmap=0, compliant=Compliant.NONE):
    '''Save as an image the texture found at "path" ("pack/.../texture").'''
    with Stream(file_path) as stream:
        level, name = load_level(stream, compliant=compliant).resolve(path)
        texture = level.find_texture(name)
        image = texture_to_image(texture, stream, format=format, mipmap=mipmap)

    image.save(output)
    logger.info('texture \'%s\' exported to \'%s\'' % (path, output))

    return image


def export_script(file_path, path, output, compliant=Compliant.NONE) -> int:
    with Stream(file_path) as stream:
        level, name = load_level(stream, compliant=compliant).resolve(path)
        body = level.find_script(name).data.read(stream)

    with open(output, 'wb') as f:
        f.write(body)

    return len(body)


def merge(files, output) -> int:
    '''Put the children of the roots of all the files under a single root.'''
    writer = NodeWriter(LevelData.tag)

    # the output must not exist already
    with open(output, 'xb') as f:
        for input_path in files:
            logger.info('  Merging %s...' % input_path)
            try:
                with Stream(input_path) as stream:
                    root = parse_header(stream)
                    if root.tag != writer.tag:
                        raise MagicException(f'root is {root.name} instead of ucfb')
                    check_bounds(stream, root)

                    # a broken input contributes nothing
                    nodes = []
                    for child in read_children(stream, root):
                        stream.seek(child.header_offset)
                        nodes.append(stream.read_exact(HEADER_SIZE + child.payload_size))

                for node in nodes:
                    writer.write_raw(node)
            except MungeException as e:
                logger.warning('    \'%s\' is not valid (%s), skipping...' % (input_path, e))

        return writer.finish(f)


def dump(file_path):
    '''Yield a line for each node of the file, indented by depth.'''
    with Stream(file_path) as stream:
        tree = NodeTree.from_stream(stream)
        for depth, header in tree.walk(stream):
            yield '%s%s offset=0x%08x size=%d' % ('  ' * depth, header.name, header.header_offset, header.payload_size)


def hash_name(name) -> str:
    '''The hash and the tag it takes as bytes.'''
    value = fnv1a_hash(name)
    return '0x%08x %r' % (value, tag_from_int(value))
