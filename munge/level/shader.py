from ..core import Node, NodeField
from .. import fields


class LevelWgslShader(Node):
    '''Extension of the format: the source code of a WGSL shader.'''
    name = NodeField('NAME', fields.CStringField(encoding='utf-8'))
    code = NodeField('CODE', fields.CStringField(encoding='utf-8', limit=0xffffffff))
