'''
# Config nodes

Some of the data of the engine, like the particle effects, comes from source
files of nested expressions

    ParticleEmitter("Something")
    {
        MaxParticles(-1, -1);
        Spawner()
        {
            PositionX(-0.1, 0.0);
        }
    }

that are munged to a tree of nodes: `NAME` with the hash of the name of the
object, then `DATA` for every expression and `SCOP` for every block between
braces, in the order they appear in the source.

The payload of `DATA` is

    name_hash: u32 | count: u8 | values: count * u32 | tail_length: u32 | tail

and the type of the values is not stored: a float is the value itself, a
string is an offset into the payload, shifted by 9, pointing into the tail.

Nothing else is expected in a config, an unknown node is always an error.
'''
import struct

from ..core import ChoicesField, Node, NodeField, PackedStruct
from ..enum import Compliant
from ..name import fnv1a_matches
from .. import fields


# name hash, value count and tail length
DATA_HEADER_SIZE = 4 + 1 + 4
STRING_OFFSET_SHIFT = 9
MAX_VALUES = 126


class ConfigData(PackedStruct):
    name_hash = fields.StructField('I')
    values    = fields.CountedArrayField(fields.StructField('I'), 'B', limit=MAX_VALUES)
    tail      = fields.SizedBytesField('I')

    def __repr__(self):
        return '<%s(name_hash=0x%08x,values=%r)>' % (self.__class__.__name__, self.name_hash, self.values)

    def matches(self, name) -> bool:
        return fnv1a_matches(self.name_hash, name)

    @property
    def size_before_tail(self) -> int:
        return DATA_HEADER_SIZE + 4 * len(self.values)

    def get_float(self, index):
        return struct.unpack('<f', struct.pack('<I', self.values[index]))[0]

    def get_string(self, index):
        '''The string parameter at "index", None if it doesn't point into the tail.'''
        offset = self.values[index] + STRING_OFFSET_SHIFT - self.size_before_tail
        if offset < 0:
            return None

        end = self.tail.find(b'\x00', offset)
        if end < 0:
            return None

        return self.tail[offset:end]


class ConfigExpressions(Node):
    '''Records whose "children" are a sequence of DATA and SCOP.'''
    compliant = Compliant.STRICT

    def find(self, name) -> ConfigData:
        for child in self.children:
            if isinstance(child, ConfigData) and child.matches(name):
                return child

        raise KeyError(f'no data named \'{name}\'')

    @property
    def scopes(self):
        return [_ for _ in self.children if isinstance(_, ConfigScope)]


class ConfigScope(ConfigExpressions):
    '''The expressions between a pair of braces.'''


EXPRESSIONS = {'DATA': ConfigData, 'SCOP': ConfigScope}

# a scope contains other scopes
ConfigScope.add_to_class('children', ChoicesField(EXPRESSIONS))


class LevelConfig(ConfigExpressions):
    '''A config object: the top level expressions are its children.'''
    name_hash = NodeField('NAME', fields.StructField('I', exact=True))
    children  = ChoicesField(EXPRESSIONS)

    def __repr__(self):
        return '<%s(name_hash=0x%08x,children=%r)>' % (self.__class__.__name__, self.name_hash, self.children)
