'''
# Textures

A texture can be stored in more than one format (`FMT_`) and each format has
one face for plain textures, six for cubemaps; each face is a chain of mip
levels (`LVL_`) whose body is the raw texel data.

    tex_
     NAME
     FMT_
      INFO
      FACE
       LVL_
        INFO
        BODY
       LVL_
       ...
'''
from enum import Enum

from ..core import Node, NodeField, NodesField, Lazy, PackedStruct
from ..name import tag_to_int
from .. import fields


class FormatKind(Enum):
    '''Subset of the D3D9 formats, the only ones the munge tools produce.'''
    DXT1     = tag_to_int(b'DXT1')  # compressed
    DXT3     = tag_to_int(b'DXT3')  # compressed
    A8R8G8B8 = 0x15
    R5G6B5   = 0x17
    A1R5G5B5 = 0x19
    A4R4G4B4 = 0x1a
    A8       = 0x1c
    L8       = 0x32
    A8L8     = 0x33
    A4L4     = 0x34
    V8U8     = 0x3c

    @property
    def is_compressed(self):
        return self in (FormatKind.DXT1, FormatKind.DXT3)


class TextureKind(Enum):
    NORMAL  = 1
    CUBEMAP = 2


class TextureFormatInfo(PackedStruct):
    format  = fields.StructField('I', enum=FormatKind, default=FormatKind.A8R8G8B8)
    width   = fields.StructField('H')
    height  = fields.StructField('H')
    unknown = fields.StructField('H', default=1)
    mipmaps = fields.StructField('H', default=1)
    kind    = fields.StructField('I', enum=TextureKind, default=TextureKind.NORMAL)


class MipmapInfo(PackedStruct):
    level     = fields.StructField('I')
    body_size = fields.StructField('I')


class TextureMipmap(Node):
    info = NodeField('INFO', MipmapInfo)
    body = NodeField('BODY', Lazy(fields.BytesField()))


class TextureFace(Node):
    mipmaps = NodesField('LVL_', TextureMipmap)


class TextureFormat(Node):
    info  = NodeField('INFO', TextureFormatInfo)
    faces = NodesField('FACE', TextureFace)


class LevelTexture(Node):
    name    = NodeField('NAME', fields.CStringField(encoding='utf-8'))
    formats = NodesField('FMT_', TextureFormat)

    def get_format(self, format=None) -> TextureFormat:
        '''The format can be omitted when there is only one.'''
        if format is None:
            if len(self.formats) != 1:
                raise ValueError(f'texture \'{self.name}\' has {len(self.formats)} formats, indicate one')
            return self.formats[0]

        for texture_format in self.formats:
            if texture_format.info.format == format:
                return texture_format

        raise KeyError(f'texture \'{self.name}\' has no format {format.name}')
