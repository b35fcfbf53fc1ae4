class Chip8Error(Exception):
    """base class for every error raised while executing a program"""


class UndefinedOp(Chip8Error):
    def __init__(self, instruction):
        self.instruction = instruction
        super().__init__(f"undefined opcode 0x{instruction:04x}")


class PoppedEmptyStack(Chip8Error):
    def __init__(self):
        super().__init__("return from subroutine with an empty call stack")
