# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# http://devernay.free.fr/hacks/chip8/C8TECH10.HTM
#
# This module is the machine itself: memory, registers, timers, framebuffer,
# keypad state and the fetch-decode-execute engine. It never touches pygame;
# the window, the keyboard and the emulation loop live in chip8.py.


import enum
import os
import random
import time
from functools import wraps


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

FONT_START_ADDRESS = 0x000
GLYPH_SIZE = 5                  # every glyph is 8x5 pixels, one byte per row
MEMORY_SIZE = 4096
ROM_START_ADDRESS = 0x200
STACK_SIZE = 16
NUM_KEYS = 16
TIMER_HZ = 60
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False


# ******************** ERRORS SECTION
class Chip8Error(Exception):
    """base class for every condition that stops or rejects a VM operation"""


class UnsupportedInstruction(Chip8Error, NotImplementedError):
    def __init__(self, opcode, pc):
        self.opcode = opcode
        self.pc = pc
        super().__init__(f"Unsupported instruction 0x{opcode:04x} at address 0x{pc:04x}")


class OutOfRangeGlyph(Chip8Error, ValueError):
    def __init__(self, digit):
        self.digit = digit
        super().__init__(f"Glyphs exist only for digits 0x0 through 0xF, got {digit!r}")


class StackOverflow(Chip8Error, IndexError):
    pass


class StackUnderflow(Chip8Error, IndexError):
    pass


class RomTooLarge(Chip8Error, ValueError):
    pass


# ******************** UTILITIES SECTION
def asm(msg):
    """decorator to print out the ASM of the instruction being called"""
    def decorator(fn):
        @wraps(fn)
        def wrapper_fn(*args, **kwargs):
            mem_addr = args[0].opcode_addr  # args[0] equals self of the decorated method
            vals = fn(*args, **kwargs)      # use the locals() values of each decorated function in the print
            vals['mem_addr'] = mem_addr
            if DEBUG: print(msg.format(**vals))
        return wrapper_fn
    return decorator


# ******************** MEMORY SECTION
# ********** WRAPS A LIST TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    """
    4096 bytes of RAM, glyph table preloaded at 0x000-0x04F
    every address wraps around the 4KB boundary, every stored value is truncated to a byte
    """
    def __init__(self):
        self.inner = [0] * MEMORY_SIZE
        self.load_fonts()

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            for addr, v in zip(self._addresses(key), value):
                self.inner[addr] = v & 0xFF
        else:
            self.inner[key % MEMORY_SIZE] = value & 0xFF

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self.inner[addr] for addr in self._addresses(index)]
        return self.inner[index % MEMORY_SIZE]

    @staticmethod
    def _addresses(s):
        # slices are address ranges that may run past 0xFFF, not python slices of the list
        start = 0 if s.start is None else s.start
        stop = MEMORY_SIZE if s.stop is None else s.stop
        return [addr % MEMORY_SIZE for addr in range(start, stop)]

    def clear(self):
        """zero every byte, glyphs included"""
        self.inner = [0] * MEMORY_SIZE

    def load_fonts(self):
        self.inner[FONT_START_ADDRESS:FONT_START_ADDRESS+len(C8_FONTS)] = C8_FONTS

    def glyph_address(self, digit):
        """address of the sprite for hex digit 0x0-0xF"""
        if not isinstance(digit, int) or not 0x0 <= digit <= 0xF:
            raise OutOfRangeGlyph(digit)
        return FONT_START_ADDRESS + digit * GLYPH_SIZE

    def glyph(self, digit):
        """the 5 bytes making up the sprite for hex digit 0x0-0xF"""
        start = self.glyph_address(digit)
        return self[start:start+GLYPH_SIZE]

    def load(self, program, address=ROM_START_ADDRESS):
        """copy raw program bytes into memory starting at address"""
        if address + len(program) > MEMORY_SIZE:
            raise RomTooLarge(
                f"The program is {len(program)} bytes long, only {MEMORY_SIZE - address} fit from 0x{address:03x}"
            )
        self.inner[address:address+len(program)] = list(program)

    def load_rom(self, path=None):
        """load ROM file from user specified path if present, raise an exception otherwise"""
        with open(path, mode='rb') as f:
            rom = f.read()
        self.load(rom)
        if DEBUG: print(f"The ROM at path {path} has been loaded successfully")

    def dump(self, width=16):
        """memory as rows of hex bytes, each row prefixed by its address"""
        rows = []
        for addr in range(0, MEMORY_SIZE, width):
            data = " ".join(f"{b:02x}" for b in self.inner[addr:addr+width])
            rows.append(f"0x{addr:03x}: {data}")
        return "\n".join(rows)


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self):
        self.addr_list = [0] * STACK_SIZE
        self.sp = 0                     # number of addresses currently stored

    def __len__(self):
        return self.sp

    def __str__(self):
        return str([f"0x{addr:03x}" for addr in self.addr_list[:self.sp]])

    def append(self, address):
        if self.sp >= STACK_SIZE:
            raise StackOverflow(f"The CHIP-8 stack can contain at most {STACK_SIZE} addresses. Limit exceeded")
        self.addr_list[self.sp] = address
        self.sp += 1

    def pop(self):
        if self.sp == 0:
            raise StackUnderflow("Return without a matching call, the CHIP-8 stack is empty")
        self.sp -= 1
        return self.addr_list[self.sp]


# ******************** TIMERS SECTION
class Timer:
    """
    8 bit countdown register decremented at 60Hz of wall clock time
    the 60Hz window is measured from the last decrement (or load), so the
    number of instructions executed in between never changes how fast it runs
    """
    PERIOD = 1 / TIMER_HZ

    def __init__(self, clock=time.monotonic):
        self.clock = clock
        self.value = 0
        self.last_tick = clock()

    def load(self, value):
        self.value = value & 0xFF
        self.last_tick = self.clock()

    def tick(self):
        """decrement once if a full period elapsed, return True when it did"""
        now = self.clock()
        if self.value == 0:
            self.last_tick = now
            return False
        if now - self.last_tick < self.PERIOD:
            return False
        self.value -= 1
        self.last_tick = now
        return True


# ******************** I/O STATE SECTION
class DisplayMode(enum.Enum):
    LORES = (64, 32)
    HIRES = (128, 64)

    @property
    def width(self):
        return self.value[0]

    @property
    def height(self):
        return self.value[1]


class DisplayBuffer:
    """monochrome framebuffer, pixels[y][x] is True when the pixel is ON"""
    def __init__(self, mode=DisplayMode.LORES):
        self.mode = mode
        self.w, self.h = mode.width, mode.height
        self.clear()

    @property
    def resolution(self):
        return self.w, self.h

    def __getitem__(self, xy):
        x, y = xy
        return self.pixels[y % self.h][x % self.w]

    def clear(self):
        self.pixels = [[False] * self.w for _ in range(self.h)]

    def rows(self):
        """read-only copy of the pixel grid for renderers"""
        return tuple(tuple(row) for row in self.pixels)

    def set_pixel(self, x, y):
        """
        toggle the pixel at (x, y), coordinates wrap around the screen edges
        return True (collision) when the pixel was ON and got erased
        """
        x, y = x % self.w, y % self.h     # python's modulo is already non-negative
        collided = self.pixels[y][x]
        self.pixels[y][x] = not collided  # XOR with True
        return collided

    def write_sprite(self, x, y, sprite):
        """
        XOR an 8 pixel wide sprite onto the buffer, one byte per row, MSB leftmost
        return True if any pixel got erased
        """
        collision = False
        for row, sprite_byte in enumerate(sprite):
            for bit in range(8):
                if sprite_byte & (0x80 >> bit):
                    collision |= self.set_pixel(x + bit, y + row)
        return collision


class InputState:
    """pressed flags for the 16 hex keys plus the system exit key"""
    def __init__(self, pressed=(), exit=False):
        self.keys = [False] * NUM_KEYS
        for key in pressed:
            self.keys[key] = True
        self.exit = exit

    def __getitem__(self, key):
        return 0 <= key < NUM_KEYS and self.keys[key]

    def __repr__(self):
        return f"InputState(pressed={self.active()}, exit={self.exit})"

    def active(self):
        return [key for key, pressed in enumerate(self.keys) if pressed]

    def untouched(self):
        return not any(self.keys)

    def first_pressed(self):
        """lowest hex key currently pressed, None if no key is"""
        active = self.active()
        return active[0] if active else None


# ******************** CPU SECTION
class Chip8:
    def __init__(self, mode=DisplayMode.LORES, clock=time.monotonic, rng=None):
        self.mem = Memory()
        self.stack = Stack()
        self.v_regs = [0] * 16
        self.pc = ROM_START_ADDRESS
        self.opcode_addr = ROM_START_ADDRESS  # address of the instruction being executed
        self.idx = 0    # specify where the sprites reside in memory
        self.dt = Timer(clock)  # delay timer, active when non-zero
        self.st = Timer(clock)  # sound timer, active when non-zero
        self.display = DisplayBuffer(mode)
        self.keys = InputState()
        self.rng = rng if rng is not None else random
        self.draw = False
        self.instructions = {
            0x0000: self._sys,
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
        stack = f"STACK:{self.stack} | SP:{self.stack.sp}"
        timers = f"DELAY_TIMER:{self.dt.value} | SOUND_TIMER:{self.st.value}"
        flags = f"DRAW: {self.draw} | DISPLAY:{self.display.w}x{self.display.h}"
        return f"{registers}\n{stack}\n{timers}\n{flags}"

    def load_rom(self, path):
        self.mem.load_rom(path)

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SYS 0x{address:04x}")
    def _sys(self, opcode):
        """jump to a machine code routine, ignored by modern interpreters"""
        address = opcode & 0x0FFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKP V{x}")
    def _skip_if_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is pressed"""
        x = (opcode & 0x0F00) >> 8
        key = self.v_regs[x]
        if self.keys[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SKNP V{x}")
    def _skip_if_not_pressed(self, opcode):
        """skip the following instruction if the key corresponding to the hex value stored in Vx is NOT pressed"""
        x = (opcode & 0x0F00) >> 8
        key = self.v_regs[x]
        if not self.keys[key]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, K")
    def _wait_keypress(self, opcode):
        """wait for a key press and store its value in Vx"""
        x = (opcode & 0x0F00) >> 8
        key = self.keys.first_pressed()
        if key is None:
            self.pc = (self.pc - 0x2) & 0x0FFF     # stay on the same instruction until a key is pressed
        else:
            self.v_regs[x] = key
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, DT")
    def _set_vx_dt(self, opcode):
        """set Vx = DT (delay timer) value"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[x] = self.dt.value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD DT, V{x}")
    def _set_dt_vx(self, opcode):
        """set DT (delay timer) = Vx"""
        x = (opcode & 0x0F00) >> 8
        self.dt.load(self.v_regs[x])
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: CLS")
    def _clear_screen(self, opcode):
        self.display.clear()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RET")
    def _return(self, opcode):
        """return from a subroutine"""
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
        self.stack.append(self.pc)
        self.pc = address
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, {comparison_value}")
    def _skip_if_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] == comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, {comparison_value}")
    def _skip_if_not_eq(self, opcode):
        x = (opcode & 0x0F00) >> 8
        comparison_value = opcode & 0x00FF
        if self.v_regs[x] != comparison_value:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SE V{x}, V{y}")
    def _skip_if_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] == self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SNE V{x}, V{y}")
    def _skip_if_not_eq_regs(self, opcode):
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        if self.v_regs[x] != self.v_regs[y]:
            self._goto_next_instruction()
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, {value}")
    def _set_vk(self, opcode):
        """set the value of one of the 16 variable registers, Vx"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, V{y}")
    def _set_vx_to_vy(self, opcode):
        """set the value of Vx equal to that of Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] = self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: OR V{x}, V{y}")
    def _set_vx_or_vy(self, opcode):
        """set the value of Vx to Vx OR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] |= self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: AND V{x}, V{y}")
    def _set_vx_and_vy(self, opcode):
        """set the value of Vx to Vx AND Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] &= self.v_regs[y]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: XOR V{x}, V{y}")
    def _set_vx_xor_vy(self, opcode):
        """set the value of Vx to Vx XOR Vy"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        self.v_regs[x] ^= self.v_regs[y]
        return locals()

    # the flag setting ALU instructions below write VF first and Vx last,
    # when x is F the result of the operation wins over the flag

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, V{y}")
    def _add_vx_vy(self, opcode):
        """set the value of Vx to Vx + Vy, VF = carry"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        sum = self.v_regs[x] + self.v_regs[y]
        self.v_regs[0xF] = 1 if sum > 255 else 0
        self.v_regs[x] = sum & 0xFF     # keep only the lowest 8 bits from the result and store them in Vx
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUB V{x}, V{y}")
    def _sub_vx_vy(self, opcode):
        """set the value of Vx to Vx - Vy, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        vx, vy = self.v_regs[x], self.v_regs[y]
        self.v_regs[0xF] = 1 if vx > vy else 0
        self.v_regs[x] = (vx - vy) & 0xFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHR V{x}")
    def _shr(self, opcode):
        """set Vx equal to Vx SHR 1, VF = bit shifted out"""
        x = (opcode & 0x0F00) >> 8
        vx = self.v_regs[x]
        self.v_regs[0xF] = vx & 0x1
        self.v_regs[x] = vx >> 1
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SUBN V{x}, V{y}")
    def _subn_vx_vy(self, opcode):
        """set the value of Vx to Vy - Vx, VF = NOT borrow"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        vx, vy = self.v_regs[x], self.v_regs[y]
        self.v_regs[0xF] = 1 if vy > vx else 0
        self.v_regs[x] = (vy - vx) & 0xFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: SHL V{x}")
    def _shl(self, opcode):
        """set Vx equal to Vx SHL 1, VF = bit shifted out"""
        x = (opcode & 0x0F00) >> 8
        vx = self.v_regs[x]
        self.v_regs[0xF] = (vx >> 7) & 0x1
        self.v_regs[x] = (vx << 1) & 0xFF   # multiply by 2 and keep only the lowest 8 bits from the result
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD V{x}, {value}")
    def _add_to_vk(self, opcode):
        """add to the value already present in one of the variable registers, VF untouched"""
        x, value = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        self.v_regs[x] = (self.v_regs[x] + value) & 0xFF    # keep only the lowest 8 bits from the result and store them in Vx
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD I, 0x{value:04x}")
    def _set_idx(self, opcode):
        """set the value of the I register"""
        value = opcode & 0x0FFF
        self.idx = value
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: JP V0, 0x{address:04x}")
    def _jump_plus(self, opcode):
        address = opcode & 0x0FFF
        v0 = self.v_regs[0x0]
        self.pc = (address + v0) & 0x0FFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: RND V{x}, 0x{kk:02x}")
    def _random_byte_and(self, opcode):
        x, kk = (opcode & 0x0F00) >> 8, opcode & 0x00FF
        rnd = self.rng.randint(0, 255)
        self.v_regs[x] = rnd & kk
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD ST, V{register}")
    def _set_st(self, opcode):
        """set ST = Vx"""
        register = (opcode & 0x0F00) >> 8
        self.st.load(self.v_regs[register])
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: ADD I, V{register}")
    def _add_to_idx(self, opcode):
        """set I = I + Vx, no overflow flag"""
        register = (opcode & 0x0F00) >> 8
        self.idx = (self.idx + self.v_regs[register]) & 0xFFFF
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD F, V{register}")
    def _select_char(self, opcode):
        """set I to location of sprite for digit Vx"""
        register = (opcode & 0x0F00) >> 8
        self.idx = FONT_START_ADDRESS + self.v_regs[register] * GLYPH_SIZE
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD [I], V{x}")
    def _store_vregs(self, opcode):
        """store registers V0 through Vx (included) in memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.mem[self.idx:self.idx+x+1] = self.v_regs[:x+1]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD V{x}, [I]")
    def _load_vregs(self, opcode):
        """read registers V0 through Vx (included) from memory starting at location I"""
        x = (opcode & 0x0F00) >> 8
        self.v_regs[:x+1] = self.mem[self.idx:self.idx+x+1]
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: LD B, V{x}")
    def _bcd_repr(self, opcode):
        """takes the decimal value of Vx and the hundreds digit in memory at I, the tens digit at I+1, the ones digit at I+2"""
        x = (opcode & 0x0F00) >> 8
        ones = self.v_regs[x] % 10
        tens = (self.v_regs[x] // 10) % 10
        hundreds = self.v_regs[x] // 100
        self.mem[self.idx], self.mem[self.idx+1], self.mem[self.idx+2] = hundreds, tens, ones
        return locals()

    @asm("mem_addr: 0x{mem_addr:04x}    instruction: DRW V{x}, V{y}, {n_bytes}")
    def _to_screen(self, opcode):
        """display n-byte sprite starting at memory location I at (Vx, Vy), set VF = collision"""
        x, y = (opcode & 0x0F00) >> 8, (opcode & 0x00F0) >> 4
        n_bytes = opcode & 0x000F
        sprite = self.mem[self.idx:self.idx+n_bytes]
        collision = self.display.write_sprite(self.v_regs[x], self.v_regs[y], sprite)
        self.v_regs[0xF] = 1 if collision else 0
        self.draw = True
        return locals()

    def _goto_next_instruction(self):
        self.pc = (self.pc + 0x2) & 0x0FFF

    def decode(self, opcode):
        """decode opcodes using masks and return respective function"""
        # WATCH OUT: masks order is important!!!
        # as the for loop breaks out as soon as it finds a match
        masks = {
            0xFFFF: [0x00E0, 0x00EE],
            0xF0FF: [0xE09E, 0xE0A1, 0xF007, 0xF00A, 0xF015, 0xF018, 0xF01E, 0xF029, 0xF033, 0xF055, 0xF065],
            0xF00F: [0x5000, 0x8000, 0x8001, 0x8002, 0x8003, 0x8004, 0x8005, 0x8006, 0x8007, 0x800E, 0x9000],
            0xF000: [0x0000, 0x1000, 0x2000, 0x3000, 0x4000, 0x6000, 0x7000, 0xA000, 0xB000, 0xC000, 0xD000],
        }
        if DEBUG: print(f"opcode: 0x{opcode:04x}", end="    ")
        # get correct mask to decode the opcode
        for m, ops in masks.items():
            if (opcode & m) in ops:
                return self.instructions[opcode & m]     # retrieve and return relative instruction
        raise UnsupportedInstruction(opcode, self.opcode_addr)

    def cycle(self):
        """run one fetch-decode-execute step, return True when the screen needs a redraw"""
        self.draw = False
        # fetch (each instruction is two bytes long)
        self.opcode_addr = self.pc
        opcode = self.mem[self.pc] << 8 | self.mem[self.pc + 1]
        self._goto_next_instruction()
        # decode + execute
        instruction = self.decode(opcode)
        instruction(opcode)
        return self.draw

    def update_timers(self):
        """delay/sound timers (dt/st), called once per host loop iteration"""
        self.dt.tick()
        self.st.tick()
