# CHIP-8 INFO
# https://chip-8.github.io/extensions/#chip-8
# https://chip-8.github.io/links/
#
# MASTERING CHIP-8
# https://github.com/mattmikolay/chip-8/wiki/Mastering-CHIP%E2%80%908
#
# TEST SUITE
# https://github.com/Timendus/chip8-test-suite


import argparse
import sys

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_1, K_2, K_3, K_4,
    K_q, K_w, K_e, K_r,
    K_a, K_s, K_d, K_f,
    K_z, K_x, K_c, K_v,
    K_ESCAPE,
)

from vm import Chip8, Chip8Error, DisplayMode, InputState


# ******************** STATIC SECTION
# the 4x4 block on the left of a QWERTY keyboard mirrors the COSMAC VIP keypad
#   1 2 3 4        1 2 3 C
#   q w e r   ->   4 5 6 D
#   a s d f        7 8 9 E
#   z x c v        A 0 B F
KEY_MAPPINGS = {
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0xC,
    K_q: 0x4,
    K_w: 0x5,
    K_e: 0x6,
    K_r: 0xD,
    K_a: 0x7,
    K_s: 0x8,
    K_d: 0x9,
    K_f: 0xE,
    K_z: 0xA,
    K_x: 0x0,
    K_c: 0xB,
    K_v: 0xF,
}
EXIT_KEY = K_ESCAPE

CPU_HZ = 500                            # instructions per second, also how often the keyboard is polled
SCREEN_FLAGS = 0                        # if more than one use | to combine them
SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="CHIP-8 interpreter")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--hires", action="store_true", help="use the 128x64 display instead of 64x32")
    parser.add_argument("--speed", type=int, default=CPU_HZ, help=f"instructions per second (default {CPU_HZ})")
    parser.add_argument("--scale", type=int, default=SCALE, help=f"size in pixels of a CHIP-8 pixel (default {SCALE})")
    return parser.parse_args(argv)


# ******************** I/O SECTION
class Renderer:
    """something able to show a DisplayBuffer, it must only read from it"""
    def present(self, buffer):
        raise NotImplementedError


class InputSource:
    """something able to tell which keys are down right now"""
    def poll(self):
        """return a brand new InputState, nothing is carried over from the previous poll"""
        raise NotImplementedError


class Screen(Renderer):
    def __init__(self, w=64, h=32, s=SCALE, flgs=SCREEN_FLAGS, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
            flgs,
        )
        self.surface.fill(self.background)

    def write_pixel(self, x, y, on):
        """
        set a pixel on the screen, being it a foreground pixel or a background one
        the change won't be immediatly visible because it'll require a call to the static method refresh
        """
        pygame.draw.rect(
            self.surface,
            self.foreground if on else self.background,
            (x * self.scale, y * self.scale, self.scale, self.scale)
        )

    @staticmethod
    def refresh():
        pygame.display.flip()

    def present(self, buffer):
        self.surface.fill(self.background)
        for y, row in enumerate(buffer.rows()):
            for x, on in enumerate(row):
                if on:
                    self.write_pixel(x, y, on)
        self.refresh()


class TextScreen(Renderer):
    """draws the framebuffer as text, one line per row, '*' for every pixel ON"""
    def __init__(self, stream=None, on="*", off=" "):
        self.stream = stream if stream is not None else sys.stdout
        self.on, self.off = on, off

    def present(self, buffer):
        lines = ["".join(self.on if pixel else self.off for pixel in row) for row in buffer.rows()]
        self.stream.write("\n".join(lines) + "\n")
        self.stream.flush()


class Keypad(InputSource):
    def __init__(self, mappings=KEY_MAPPINGS, exit_key=EXIT_KEY):
        self.mappings = mappings
        self.exit_key = exit_key

    def poll(self):
        exit = False
        # loop throught the event queue, the keyboard state itself is read in one go below
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                exit = True
        pressed = pygame.key.get_pressed()
        keys = [hex_key for key, hex_key in self.mappings.items() if pressed[key]]
        return InputState(keys, exit=exit or bool(pressed[self.exit_key]))


# ******************** EMULATION LOOP SECTION
def run(chip, renderer, input_source, pace=None):
    """
    drive the machine until the exit key is pressed, return the number of executed cycles
    every iteration polls the input, runs one instruction, redraws if the instruction
    asked for it and lets the 60Hz timers catch up with the wall clock
    """
    cycles = 0
    while True:
        keys = input_source.poll()
        if keys.exit:
            return cycles
        chip.keys = keys
        if chip.cycle():
            renderer.present(chip.display)
        chip.update_timers()
        cycles += 1
        if pace is not None:
            pace()


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    mode = DisplayMode.HIRES if args.hires else DisplayMode.LORES
    # CPU
    chip = Chip8(mode)
    try:
        chip.load_rom(args.file)
    except (OSError, Chip8Error) as e:
        sys.exit(f"Cannot load {args.file}: {e}")
    # pygame initialization
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.file))
    # IO
    s = Screen(mode.width, mode.height, args.scale)
    k = Keypad()
    try:
        run(chip, s, k, pace=lambda: clock.tick(args.speed))
    except Chip8Error as e:
        sys.exit(f"********** THE EMULATOR CRASHED: {e}\n{chip}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
