# COMPATIBILITY QUIRKS TABLE
# https://games.gulrak.net/cadmium/chip8-opcode-table.html#quirk6
from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class Quirks:
    """
    points where historical interpreters disagree on the semantics of an opcode
    the defaults reproduce the behavior of this interpreter, flip a field to get the alternative
    """
    vf_reset: bool = True       # 8XY1/8XY2/8XY3 clear VF
    memory: bool = True         # FX55/FX65 advance I by one
    display_wait: bool = True   # a frame ends after a drawing instruction
    clipping: bool = True       # sprites clip at the screen edges instead of wrapping
    shifting: bool = False      # 8XY6/8XYE shift Vx in place instead of reading Vy
    jumping: bool = False       # BXNN jumps to XNN + Vx instead of NNN + V0

    @classmethod
    def names(cls):
        return [f.name for f in fields(cls)]

    @classmethod
    def from_names(cls, names):
        """build a quirks record with every named toggle flipped from its default"""
        default = cls()
        changes = {}
        for name in names:
            if name not in cls.names():
                raise ValueError(f"unknown quirk '{name}', expected one of {', '.join(cls.names())}")
            changes[name] = not getattr(default, name)
        return replace(default, **changes)
