'''
# Level files

Level files (`.lvl`) are a single `ucfb` root node containing the resources
of a level: scripts, textures, models, WGSL shaders and nested data packs (`lvl_`) that
the game loads dynamically as needed, like `side/all.lvl` for the assets
of the rebel alliance.

Only raw data is exposed: textures aren't decoded, script bodies are
bytecode for the VM.
'''
import logging

from ..core import Node, NodesField, Pack
from ..enum import Compliant
from .script import LevelScript
from .texture import LevelTexture
from .model import LevelModel
from .shader import LevelWgslShader


logger = logging.getLogger(__name__)


class LevelDataPack(Pack):
    '''A `lvl_` node: the name of the pack is known only through its hash.'''

    @classmethod
    def get_contents_kind(cls):
        return LevelData


class LevelData(Node):
    '''Main representation of a level file, read it with LevelData.from_stream().'''
    tag = 'ucfb'

    hashed   = NodesField('lvl_', LevelDataPack)
    scripts  = NodesField('scr_', LevelScript)
    textures = NodesField('tex_', LevelTexture)
    models   = NodesField('modl', LevelModel)
    shaders  = NodesField('WGSL', LevelWgslShader)

    def find_pack(self, name) -> LevelDataPack:
        for pack in self.hashed:
            if pack.matches(name):
                return pack

        raise KeyError(f'no pack named \'{name}\'')

    def find_script(self, name) -> LevelScript:
        return self._find(self.scripts, name)

    def find_texture(self, name) -> LevelTexture:
        return self._find(self.textures, name)

    def find_model(self, name) -> LevelModel:
        return self._find(self.models, name)

    def find_shader(self, name) -> LevelWgslShader:
        return self._find(self.shaders, name)

    def _find(self, resources, name):
        for resource in resources:
            if resource.name == name:
                return resource

        raise KeyError(f'no resource named \'{name}\'')

    def resolve(self, path):
        '''Split "pack/pack/resource" into the level data containing the
        resource and the name of the resource itself.'''
        components = [_ for _ in path.split('/') if _]
        if not components:
            raise KeyError(f'\'{path}\' is not a valid path')

        level = self
        for pack_name in components[:-1]:
            logger.debug('entering pack \'%s\'' % pack_name)
            level = level.find_pack(pack_name).contents

        return level, components[-1]


def load_level(source, compliant=Compliant.NONE) -> LevelData:
    return LevelData.from_stream(source, compliant=compliant)
