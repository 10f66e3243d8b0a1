from pool_core import config as _config
from pool_core import errors as _errors
from stack_pool import arena as _arena
from stack_pool import cursor as _cursor
from pool_core.config import *
from pool_core.domains import Handle, NULL_HANDLE
from pool_core.errors import *
from stack_pool.arena import *
from stack_pool.cursor import *

__all__ = ["Handle", "NULL_HANDLE"]
__all__ += _config.__all__
__all__ += [name for name in _errors.__all__ if not name.startswith("_")]
__all__ += _arena.__all__
__all__ += _cursor.__all__

