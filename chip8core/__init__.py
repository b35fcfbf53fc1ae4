from chip8core.core import Machine, initialize
from chip8core.errors import Chip8Error, PoppedEmptyStack, UndefinedOp
from chip8core.quirks import Quirks

__all__ = ["Machine", "initialize", "Quirks", "Chip8Error", "UndefinedOp", "PoppedEmptyStack"]
