'''
# Models

Proceed with caution: the layout of some of these structures is guessed,
the fields named "unknown" are kept only to write them back unchanged.
'''
from enum import Enum, IntFlag

from ..core import Node, NodeField, NodesField, Lazy, PackedStruct
from .. import fields


def _vector(n=3):
    return fields.ArrayField(fields.StructField('f', default=0.0), n)


class ModelSegmentTopology(Enum):
    POINT_LIST     = 1
    LINE_LIST      = 2
    LINE_STRIP     = 3
    TRIANGLE_LIST  = 4
    TRIANGLE_STRIP = 5
    TRIANGLE_FAN   = 6


class MaterialFlags(IntFlag):
    NONE             = 0
    NORMAL           = 1 << 0
    HARDEDGED        = 1 << 1
    TRANSPARENT      = 1 << 2
    GLOSS_MAP        = 1 << 3
    GLOW             = 1 << 4
    NORMAL_MAP       = 1 << 5
    ADDITIVE         = 1 << 6
    SPECULAR         = 1 << 7
    ENVIRONMENT_MAP  = 1 << 8
    VERTEX_LIGHTING  = 1 << 9
    TILED_NORMAL_MAP = 1 << 11
    DOUBLE_SIDED     = 1 << 16
    SCROLLING        = 1 << 24
    ENERGY           = 1 << 25
    ANIMATED         = 1 << 26
    ATTACHED_LIGHT   = 1 << 27


class ModelInfo(PackedStruct):
    unknown0x00    = fields.StructField('I')
    unknown0x04    = fields.StructField('I')
    unknown0x08    = fields.StructField('I')
    unknown0x0c    = fields.StructField('I')
    vertex_box     = fields.ArrayField(_vector(), 2)
    visibility_box = fields.ArrayField(_vector(), 2)
    unknown0x40    = fields.StructField('I')
    face_count     = fields.StructField('I')


class ModelSegmentInfo(PackedStruct):
    topology        = fields.StructField('I', enum=ModelSegmentTopology, default=ModelSegmentTopology.TRIANGLE_LIST)
    vertex_count    = fields.StructField('I')
    primitive_count = fields.StructField('I')


class ModelMaterial(PackedStruct):
    flags             = fields.StructField('I', enum=MaterialFlags, default=MaterialFlags.NONE)
    diffuse_color     = fields.BytesField(4, default=b'\xff\xff\xff\xff')
    specular_color    = fields.BytesField(4, default=b'\xff\xff\xff\xff')
    specular_exponent = fields.StructField('I')
    parameters        = fields.ArrayField(fields.StructField('I'), 2)
    attached_light    = fields.CStringField(encoding='utf-8')


class ModelTextureName(PackedStruct):
    index = fields.StructField('I')
    name  = fields.CStringField(encoding='utf-8')


class ModelSegmentAABB(PackedStruct):
    min = _vector()
    max = _vector()


class ModelSphere(PackedStruct):
    position = _vector()
    radius   = fields.StructField('f', default=0.0)


class ModelSegment(Node):
    info           = NodeField('INFO', ModelSegmentInfo)
    material       = NodeField('MTRL', ModelMaterial)
    render_type    = NodeField('RTYP', fields.CStringField(encoding='utf-8'))
    texture_names  = NodesField('TNAM', ModelTextureName)
    aabb           = NodeField('BBOX', ModelSegmentAABB)
    index_buffer   = NodeField('IBUF', Lazy(fields.BytesField()))
    vertex_buffers = NodesField('VBUF', Lazy(fields.BytesField()))
    bone_map_name  = NodeField('BNAM', fields.CStringField(encoding='utf-8'))


class LevelModel(Node):
    name     = NodeField('NAME', fields.CStringField(encoding='utf-8'))
    vertex   = NodeField('VRTX', fields.StructField('I'))
    node     = NodeField('NODE', fields.CStringField(encoding='utf-8'))
    info     = NodeField('INFO', ModelInfo)
    segments = NodesField('segm', ModelSegment)
    sphere   = NodeField('SPHR', ModelSphere)
