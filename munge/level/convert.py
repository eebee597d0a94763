'''
Conversion between the texel data stored in the mip levels and RGBA images.

The 16-bit formats pack their channels starting from the most significant bit
of a little endian u16, e.g. R5G6B5 is rrrrrggggggbbbbb.
'''
import logging
import struct

import numpy as np
from bitstring import BitArray, pack
from PIL import Image

from ..exceptions import PackException
from ..lazy import LazyData
from .. import fields
from .texture import (
    FormatKind,
    LevelTexture,
    MipmapInfo,
    TextureFace,
    TextureFormat,
    TextureFormatInfo,
    TextureKind,
    TextureMipmap,
)


logger = logging.getLogger(__name__)

# channel widths, from the most significant bit, in RGBA order of appearance
PACKED_LAYOUTS = {
    FormatKind.R5G6B5:   (('R', 5), ('G', 6), ('B', 5)),
    FormatKind.A1R5G5B5: (('A', 1), ('R', 5), ('G', 5), ('B', 5)),
    FormatKind.A4R4G4B4: (('A', 4), ('R', 4), ('G', 4), ('B', 4)),
}

BCN_DECODERS = {
    FormatKind.DXT1: 1,
    FormatKind.DXT3: 2,
}

CUBEMAP_FACES = 6


def _expand(value, bits):
    '''Scale a channel of "bits" bits to 8 bits.'''
    return (value * 255) // ((1 << bits) - 1)


def iter_packed_texels(data, layout):
    for (value,) in struct.iter_unpack('<H', data):
        bits = BitArray(uint=value, length=16)
        texel = {'R': 0, 'G': 0, 'B': 0, 'A': 255}
        offset = 0
        for channel, width in layout:
            texel[channel] = _expand(bits[offset:offset + width].uint, width)
            offset += width

        yield texel['R'], texel['G'], texel['B'], texel['A']


def decode_texels(format: FormatKind, data: bytes, width: int, height: int) -> Image.Image:
    '''Build an RGBA image from the raw texels of a mip level.'''
    size = (width, height)
    logger.debug('decoding %dx%d texels in format %s' % (width, height, format.name))

    if format in BCN_DECODERS:
        return Image.frombytes('RGBA', size, data, 'bcn', BCN_DECODERS[format])

    if format == FormatKind.A8R8G8B8:
        return Image.frombytes('RGBA', size, data, 'raw', 'BGRA')

    if format in PACKED_LAYOUTS:
        texels = list(iter_packed_texels(data[:width * height * 2], PACKED_LAYOUTS[format]))
        return Image.fromarray(np.array(texels, dtype=np.uint8).reshape(height, width, 4))

    if format == FormatKind.L8:
        return Image.frombytes('L', size, data).convert('RGBA')

    if format == FormatKind.A8:
        alpha = Image.frombytes('L', size, data)
        white = Image.new('L', size, 255)
        return Image.merge('RGBA', (white, white, white, alpha))

    if format == FormatKind.A8L8:
        return Image.frombytes('LA', size, data).convert('RGBA')

    if format == FormatKind.A4L4:
        texels = []
        for byte in data[:width * height]:
            bits = BitArray(uint=byte, length=8)
            luminance = _expand(bits[4:].uint, 4)
            texels.append((luminance, luminance, luminance, _expand(bits[:4].uint, 4)))
        return Image.fromarray(np.array(texels, dtype=np.uint8).reshape(height, width, 4))

    if format == FormatKind.V8U8:
        uv = np.frombuffer(data[:width * height * 2], dtype=np.int8).reshape(height, width, 2)
        rgba = np.full((height, width, 4), 255, dtype=np.uint8)
        rgba[..., :2] = (uv.astype(np.int16) + 128).astype(np.uint8)
        return Image.fromarray(rgba)

    raise ValueError(f'format {format!r} is not supported')


def encode_texels(format: FormatKind, image: Image.Image) -> bytes:
    '''Inverse of decode_texels(), only for the uncompressed formats.'''
    image = image.convert('RGBA')

    if format == FormatKind.A8R8G8B8:
        return image.tobytes('raw', 'BGRA')

    if format == FormatKind.L8:
        return image.convert('L').tobytes()

    if format == FormatKind.A8:
        return image.getchannel('A').tobytes()

    if format == FormatKind.A8L8:
        return image.convert('LA').tobytes()

    if format in PACKED_LAYOUTS:
        layout = PACKED_LAYOUTS[format]
        spec = ', '.join('uint:%d' % width for _, width in layout)
        raw = b''
        for r, g, b, a in np.asarray(image).reshape(-1, 4).tolist():
            texel = {'R': r, 'G': g, 'B': b, 'A': a}
            values = [texel[channel] >> (8 - width) for channel, width in layout]
            raw += struct.pack('<H', pack(spec, *values).uint)
        return raw

    if format == FormatKind.A4L4:
        raw = bytearray()
        for luminance, alpha in np.asarray(image.convert('LA')).reshape(-1, 2).tolist():
            raw.append(pack('uint:4, uint:4', alpha >> 4, luminance >> 4).uint)
        return bytes(raw)

    raise PackException(f'format {format.name} is not supported for writing')


def downscale(image: Image.Image) -> Image.Image:
    '''Shrink by a factor of 2 averaging 2x2 blocks, i.e. the next mip level.'''
    pixels = np.asarray(image.convert('RGBA'), dtype=np.uint16)
    height, width = pixels.shape[:2]
    if width == 1 or height == 1:
        return image.copy()

    pixels = pixels[:height // 2 * 2, :width // 2 * 2]
    blocks = pixels[0::2, 0::2] + pixels[1::2, 0::2] + pixels[0::2, 1::2] + pixels[1::2, 1::2]

    return Image.fromarray((blocks // 4).astype(np.uint8))


def generate_mipmaps(image: Image.Image, count: int):
    mipmaps = [image.convert('RGBA')]
    while len(mipmaps) < count:
        mipmaps.append(downscale(mipmaps[-1]))

    return mipmaps


def default_mipmap_count(width, height):
    '''The whole chain down to 1 pixel, the level 0 included.'''
    return max(width, height).bit_length()


def texture_from_image(name, image: Image.Image, formats, kind=TextureKind.NORMAL, mipmaps=None) -> LevelTexture:
    width, height = image.size
    if width > 0x7fff or height > 0x7fff:
        raise PackException(f'image of {width}x{height} is too large')

    mipmaps = mipmaps or default_mipmap_count(width, height)
    chain = generate_mipmaps(image, mipmaps)
    faces = CUBEMAP_FACES if kind == TextureKind.CUBEMAP else 1
    body_kind = fields.BytesField()

    texture = LevelTexture(name=name)
    for format in formats:
        bodies = [encode_texels(format, _) for _ in chain]

        texture.formats.append(TextureFormat(
            info=TextureFormatInfo(
                format=format,
                width=width,
                height=height,
                mipmaps=mipmaps,
                kind=kind,
            ),
            faces=[TextureFace(mipmaps=[
                TextureMipmap(
                    info=MipmapInfo(level=level, body_size=len(body)),
                    body=LazyData.of(body_kind, body),
                ) for level, body in enumerate(bodies)
            ]) for _ in range(faces)],
        ))

    return texture


def texture_to_image(texture: LevelTexture, source, format=None, mipmap=0, face=0) -> Image.Image:
    texture_format = texture.get_format(format)
    info = texture_format.info

    try:
        level = texture_format.faces[face].mipmaps[mipmap]
    except IndexError:
        raise KeyError(f'texture \'{texture.name}\' has no mip level {mipmap} on face {face}')

    width = max(1, info.width >> mipmap)
    height = max(1, info.height >> mipmap)

    return decode_texels(info.format, level.body.read(source), width, height)
