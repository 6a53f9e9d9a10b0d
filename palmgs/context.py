from .system import System
from .statevar import system
from .logger import logger

import os
import toml

class Context(System):
    def __init__(self, config=None):
        self.configure(config)
        super().__init__()

    @system
    def context(self):
        return self

    def configure(self, config):
        if config is None:
            d = {}
        elif isinstance(config, dict):
            d = config
        elif isinstance(config, os.PathLike) or (isinstance(config, str) and (config.endswith('.toml') or os.path.isfile(config))):
            logger.debug(f'loading configuration from {config}')
            d = toml.load(config)
        else:
            d = toml.loads(config)
        self._config = d

def instance(systemcls, config=None, **kwargs):
    c = Context(config)
    return systemcls(context=c, parent=c, **kwargs)
