from ..core import Node, NodeField, Lazy
from .. import fields


class LevelScript(Node):
    '''Compiled script: the body is kept lazy since only the VM cares about it.'''
    name = NodeField('NAME', fields.CStringField(encoding='utf-8'))
    info = NodeField('INFO', fields.StructField('B'))
    data = NodeField('BODY', Lazy(fields.BytesField()))
