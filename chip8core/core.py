# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import os
from functools import wraps

from chip8core.errors import Chip8Error, PoppedEmptyStack, UndefinedOp
from chip8core.quirks import Quirks


# ******************** STATIC SECTION
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F
FONT_BYTES = 5              # every glyph is 5 rows tall

MEMORY_SIZE = 4096
ROM_START_ADDRESS = 0x200
REGISTERS_COUNT = 16
KEYS_COUNT = 16
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64
MASK_64 = 0xFFFFFFFFFFFFFFFF    # a framebuffer row and the rng seed are both 64 bits wide
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


# ******************** UTILITIES SECTION
def asm(msg):
    """trace the mnemonic of every executed instruction when DEBUG is on"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = args[0].pc       # args[0] equals self of the decorated method
            vals = fn(*args, **kwargs)  # use the locals() values of each decorated function in the print
            vals['mem_addr'] = mem_addr
            if DEBUG: print(msg.format(**vals))
        return wrapper_fn
    return decorator


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT THE CALL STACK, POPPING AN EMPTY STACK IS AN ERROR
class Stack:
    def __init__(self):
        self.addr_list = []

    def __len__(self):
        return len(self.addr_list)

    def __str__(self):
        return "[" + ", ".join(f"0x{addr:04x}" for addr in self.addr_list) + "]"

    def append(self, address):
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise PoppedEmptyStack()
        return self.addr_list.pop()

# ********** WRAPS A BYTEARRAY TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self):
        self.inner = bytearray(MEMORY_SIZE)
        self.inner[0x00:0x00+len(C8_FONTS)] = bytes(C8_FONTS)

    def __len__(self):
        return len(self.inner)

    @staticmethod
    def _check_slice(key):
        # a slice past the end would grow the bytearray on write and come back short on read
        if key.step not in (None, 1):
            raise IndexError("memory slices must be contiguous")
        start = 0 if key.start is None else key.start
        stop = MEMORY_SIZE if key.stop is None else key.stop
        if not 0 <= start <= stop <= MEMORY_SIZE:
            raise IndexError(f"memory range 0x{start:04x}-0x{stop:04x} outside of the 4KB address space")
        return stop - start

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            value = bytes(value)
            if len(value) != self._check_slice(key):
                raise IndexError("memory slice assignment can not change the size of memory")
        self.inner[key] = value

    def __getitem__(self, index):
        if isinstance(index, slice):
            self._check_slice(index)
        return self.inner[index]

    def load(self, program):
        """copy the program bytes at ROM_START_ADDRESS, IndexError if they run past the end of memory"""
        self[ROM_START_ADDRESS:ROM_START_ADDRESS+len(program)] = program

# ********** WRAPS A LIST TO REPRESENT THE 16 VARIABLE REGISTERS (V0 -> VF), ONE BYTE EACH
class Registers:
    def __init__(self):
        self.inner = [0] * REGISTERS_COUNT

    def __len__(self):
        return REGISTERS_COUNT

    def __iter__(self):
        return iter(self.inner)

    def __str__(self):
        return " ".join(f"V{i:X}={v:02x}" for i, v in enumerate(self.inner))

    @staticmethod
    def _check_index(index):
        if not 0 <= index < REGISTERS_COUNT:
            raise IndexError(f"register index {index} out of range, valid registers are V0 to VF")

    @staticmethod
    def _check_value(value):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"register value {value} does not fit in a byte")

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.inner[index]
        self._check_index(index)
        return self.inner[index]

    def __setitem__(self, index, value):
        if isinstance(index, slice):
            values = list(value)
            if len(values) != len(range(REGISTERS_COUNT)[index]):
                raise ValueError("register slice assignment can not change the number of registers")
            for v in values:
                self._check_value(v)
            self.inner[index] = values
            return
        self._check_index(index)
        self._check_value(value)
        self.inner[index] = value


# ******************** CPU SECTION
class Machine:
    def __init__(self, seed=0, quirks=None):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = Registers()
        self.pc = 0     # only valid for execution once a program is loaded
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = 0     # delay timer, active when non-zero
        self.st = 0     # sound timer, active when non-zero
        self.keys = 0   # one bit per key, bit 0 is key 0x0
        self.fbuf = [0] * SCREEN_HEIGHT     # one 64 bit mask per row, the MSB is the leftmost pixel
        self.rng_seed = seed & MASK_64
        self.quirks = quirks if quirks is not None else Quirks()
        self.draw = False
        self.instructions = {
            0x00E0: self._clear_screen,
            0x00EE: self._return,
            0x1000: self._jump,
            0x2000: self._call_addr,
            0x3000: self._skip_if_eq,
            0x4000: self._skip_if_not_eq,
            0x5000: self._skip_if_eq_regs,
            0x6000: self._set_vk,
            0x7000: self._add_to_vk,
            0x8000: self._set_vx_to_vy,
            0x8001: self._set_vx_or_vy,
            0x8002: self._set_vx_and_vy,
            0x8003: self._set_vx_xor_vy,
            0x8004: self._add_vx_vy,
            0x8005: self._sub_vx_vy,
            0x8006: self._shr,
            0x8007: self._subn_vx_vy,
            0x800E: self._shl,
            0x9000: self._skip_if_not_eq_regs,
            0xA000: self._set_idx,
            0xB000: self._jump_plus,
            0xC000: self._random_byte_and,
            0xD000: self._to_screen,
            0xE09E: self._skip_if_pressed,
            0xE0A1: self._skip_if_not_pressed,
            0xF007: self._set_vx_dt,
            0xF00A: self._wait_keypress,
            0xF015: self._set_dt_vx,
            0xF018: self._set_st,
            0xF01E: self._add_to_idx,
            0xF029: self._select_char,
            0xF033: self._bcd_repr,
            0xF055: self._store_vregs,
            0xF065: self._load_vregs,
        }

    def __str__(self):
        registers = f"PC_REGISTER:0x{self.pc:04x} | IDX_REGISTER:0x{self.idx:04x} | VARIABLE_REGISTERS:{self.v_regs}"
        stack = f"STACK:{self.stack}"
        timers = f"DELAY_TIMER:{self.dt} | SOUND_TIMER:{self.st}"
        keys = f"KEYS:{self.keys:016b}"
        return f"{registers}\n{stack}\n{timers}\n{keys}"

    # ********** PUBLIC INTERFACE
    def load_program(self, program):
        """copy the program in memory starting at 0x200 and point the program counter at it"""
        self.mem.load(program)
        self.pc = ROM_START_ADDRESS

    def read_framebuffer(self):
        """snapshot of the 32 framebuffer rows"""
        return tuple(self.fbuf)

    def press_key(self, key):
        self._check_key(key)
        self.keys |= 1 << key

    def release_key(self, key):
        self._check_key(key)
        self.keys &= ~(1 << key) & 0xFFFF

    def key_is_pressed(self, key):
        return (self.keys >> key) & 1 == 1

    @staticmethod
    def _check_key(key):
        if not 0 <= key < KEYS_COUNT:
            raise ValueError(f"key {key} out of range, valid keys are 0x0 to 0xF")

    def rand(self):
        """xorshift64, see https://en.wikipedia.org/wiki/Xorshift"""
        self.rng_seed ^= (self.rng_seed << 13) & MASK_64
        self.rng_seed ^= self.rng_seed >> 17
        self.rng_seed ^= (self.rng_seed << 5) & MASK_64
        return self.rng_seed & 0xFF

    # ********** INSTRUCTIONS
    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x:X}")
    def _skip_if_pressed(self, opcode):
        """skip one instruction when the key numbered by Vx is held down"""
        x = (opcode & 0x0F00) >> 8
        key = self.v_regs[x]
        if self.key_is_pressed(key):
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x:X}")
    def _skip_if_not_pressed(self, opcode):
        """skip one instruction when the key numbered by Vx is up"""
        x = (opcode & 0x0F00) >> 8
        key = self.v_regs[x]
        if not self.key_is_pressed(key):
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, K")
    def _wait_keypress(self, opcode):
        """wait for a key press and store the lowest pressed key in Vx"""
        x = (opcode & 0x0F00) >> 8
        # stay on the same instruction until a key is pressed
        for key in range(KEYS_COUNT):
            if self.key_is_pressed(key):
                self.v_regs[x] = key
                self._goto_next_instruction()
                break
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, DT")
    def _set_vx_dt(self, opcode):
        """copy the delay timer into Vx"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[x] = self.dt
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x:X}")
    def _set_dt_vx(self, opcode):
        """load the delay timer from Vx"""
        x = (opcode & 0x0F00) >> 8
        self.dt = self.v_regs[x]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, opcode):
        self.fbuf = [0] * SCREEN_HEIGHT
        self.draw = True
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, opcode):
        """pop the return address pushed by CALL"""
        self.pc = self.stack.pop()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP 0x{address:04x}")
    def _jump(self, opcode):
        address = opcode & 0x0FFF
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CALL 0x{address:04x}")
    def _call_addr(self, opcode):
        address = opcode & 0x0FFF
        self.stack.append(self.pc + 0x2)    # return to the instruction following the call
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, {comparison_value}")
    def _skip_if_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] == comparison_value:
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, {comparison_value}")
    def _skip_if_not_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] != comparison_value:
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x:X}, V{y:X}")
    def _skip_if_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] == self.v_regs[y]:
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x:X}, V{y:X}")
    def _skip_if_not_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] != self.v_regs[y]:
            self._goto_next_instruction()
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, {value}")
    def _set_vk(self, opcode):
        """load the byte KK into Vx"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = value
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, V{y:X}")
    def _set_vx_to_vy(self, opcode):
        """copy Vy into Vx"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] = self.v_regs[y]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x:X}, V{y:X}")
    def _set_vx_or_vy(self, opcode):
        """bitwise OR of Vy into Vx"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] |= self.v_regs[y]
        if self.quirks.vf_reset:
            self.v_regs[0xF] = 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x:X}, V{y:X}")
    def _set_vx_and_vy(self, opcode):
        """bitwise AND of Vy into Vx"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] &= self.v_regs[y]
        if self.quirks.vf_reset:
            self.v_regs[0xF] = 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x:X}, V{y:X}")
    def _set_vx_xor_vy(self, opcode):
        """bitwise XOR of Vy into Vx"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] ^= self.v_regs[y]
        if self.quirks.vf_reset:
            self.v_regs[0xF] = 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, V{y:X}")
    def _add_vx_vy(self, opcode):
        """set the value of Vx to Vx + Vy, VF = carry"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        total = self.v_regs[x] + self.v_regs[y]
        self.v_regs[x] = total & 0xFF     # wrap to a byte
        self.v_regs[0xF] = 1 if total > 0xFF else 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x:X}, V{y:X}")
    def _sub_vx_vy(self, opcode):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        vx, vy = self.v_regs[x], self.v_regs[y]
        self.v_regs[x] = (vx - vy) & 0xFF
        self.v_regs[0xF] = 1 if vx > vy else 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x:X}, V{y:X}")
    def _subn_vx_vy(self, opcode):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        vx, vy = self.v_regs[x], self.v_regs[y]
        self.v_regs[x] = (vy - vx) & 0xFF
        self.v_regs[0xF] = 1 if vy > vx else 0
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x:X}, V{y:X}")
    def _shr(self, opcode):
        """set Vx equal to Vy SHR 1, VF = bit shifted out"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        source = self.v_regs[x] if self.quirks.shifting else self.v_regs[y]
        LSB = source & 0x1
        self.v_regs[x] = source >> 1
        self.v_regs[0xF] = LSB
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x:X}, V{y:X}")
    def _shl(self, opcode):
        """set Vx equal to Vy SHL 1, VF = bit shifted out"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        source = self.v_regs[x] if self.quirks.shifting else self.v_regs[y]
        MSB = (source & 0x80) >> 7
        self.v_regs[x] = (source << 1) & 0xFF   # drop the bit shifted past bit 7
        self.v_regs[0xF] = MSB
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x:X}, {value}")
    def _add_to_vk(self, opcode):
        """add to the value already present in one of the variable registers, VF untouched"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x0FF
        self.v_regs[x] = (self.v_regs[x] + value) & 0xFF    # wrap to a byte
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{value:04x}")
    def _set_idx(self, opcode):
        """point I at address NNN"""
        value = opcode & 0x0FFF
        self.idx = value
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V{register:X}, 0x{address:04x}")
    def _jump_plus(self, opcode):
        address = opcode & 0x0FFF
        register = (opcode & 0x0F00) >> 8 if self.quirks.jumping else 0x0
        self.pc = address + self.v_regs[register]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x:X}, 0x{kk:02x}")
    def _random_byte_and(self, opcode):
        x, kk = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        rnd = self.rand()
        self.v_regs[x] = rnd & kk
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{register:X}")
    def _set_st(self, opcode):
        """load the sound timer from Vx"""
        register = (opcode & 0x0F00) >> 8
        self.st = self.v_regs[register]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{register:X}")
    def _add_to_idx(self, opcode):
        """set I = I + Vx, I is not wrapped to 12 bits"""
        register = (opcode & 0x0F00) >> 8
        self.idx += self.v_regs[register]
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{register:X}")
    def _select_char(self, opcode):
        """point I at the font glyph of the hex digit in Vx"""
        register = (opcode & 0x0F00) >> 8
        self.idx = self.v_regs[register] * FONT_BYTES
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x:X}")
    def _store_vregs(self, opcode):
        """dump V0..Vx to memory at I"""
        x = (opcode & 0x0F00) >> 8
        self.mem[self.idx:self.idx+x+1] = bytes(self.v_regs[:x+1])
        if self.quirks.memory:
            self.idx += 1
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x:X}, [I]")
    def _load_vregs(self, opcode):
        """fill V0..Vx from memory at I"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[:x+1] = self.mem[self.idx:self.idx+x+1]
        if self.quirks.memory:
            self.idx += 1
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x:X}")
    def _bcd_repr(self, opcode):
        """store the hundreds digit of Vx in memory at I, the tens digit at I+1, the ones digit at I+2"""
        x = (opcode & 0x0F00) >> 8
        value = self.v_regs[x]
        hundreds, tens, ones = value // 100, (value % 100) // 10, value % 10
        self.mem[self.idx], self.mem[self.idx+1], self.mem[self.idx+2] = hundreds, tens, ones
        self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{vx:X}, V{vy:X}, {n_bytes}")
    def _to_screen(self, opcode):
        """XOR the N rows of sprite at I onto the framebuffer at (Vx, Vy), VF tells whether a pixel was erased"""
        vx, vy = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        x, y = self.v_regs[vx] % SCREEN_WIDTH, self.v_regs[vy] % SCREEN_HEIGHT
        n_bytes = opcode & 0x000F
        self.v_regs[0xF] = 0
        for i in range(n_bytes):
            sprite_byte = self.mem[self.idx + i]
            # align the byte to the leftmost column then move it to column x,
            # bits pushed past the right edge are lost unless sprites wrap
            line = (sprite_byte << 56) >> x
            if not self.quirks.clipping:
                line |= (sprite_byte << (120 - x)) & MASK_64
            compare = self.fbuf[y] | line
            self.fbuf[y] ^= line
            # collision detection
            # a pixel gets erased only when it was ON and is turned ON again,
            # VF reflects the last row drawn
            self.v_regs[0xF] = 1 if self.fbuf[y] != compare else 0
            y += 1
            if y >= SCREEN_HEIGHT:
                if self.quirks.clipping:
                    break
                y = 0
        self.draw = True
        self._goto_next_instruction()
        return locals()

    def _goto_next_instruction(self):
        self.pc += 0x2

    def decode(self, opcode):
        """match the opcode against the masks and return its bound handler"""
        # masks are tried from the most to the least specific,
        # the first hit wins
        masks = {
            0xFFFF: [0x00E0,0x00EE],
            0xF0FF: [0xE09E,0xE0A1,0xF007,0xF00A,0xF015,0xF018,0xF01E,0xF029,0xF033,0xF055,0xF065],
            0xF00F: [0x5000,0x8000,0x8001,0x8002,0x8003,0x8004,0x8005,0x8006,0x8007,0x800E,0x9000],
            0xF000: [0x1000,0x2000,0x3000,0x4000,0x6000,0x7000,0xA000,0xB000,0xC000,0xD000],
        }
        if DEBUG: print(f"opcode: 0x{opcode:04x}", end="    ")
        for m, ops in masks.items():
            if (opcode & m) in ops:
                return self.instructions[opcode & m]     # retrieve and return relative instruction
        if DEBUG: print()
        raise UndefinedOp(opcode)

    def tick(self):
        """fetch, decode and execute one instruction then update the delay/sound timers"""
        # fetch (each instruction is two bytes long, big-endian)
        opcode = self.mem[self.pc] << 8 | self.mem[self.pc + 1]
        instruction = self.decode(opcode)
        # every instruction moves the program counter on its own
        drew_before, self.draw = self.draw, False
        try:
            instruction(opcode)
        except (Chip8Error, IndexError):
            self.draw = drew_before     # a failed instruction leaves the machine as it found it
            raise
        # delay/sound timers (dt/st)
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1


def initialize(seed, quirks=None):
    """build a machine with zeroed state, the hex font in memory and the given rng seed"""
    return Machine(seed, quirks)
