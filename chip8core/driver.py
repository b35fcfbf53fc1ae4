import argparse
import os
import sys
import time
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
)

from chip8core.core import SCREEN_HEIGHT, SCREEN_WIDTH, initialize
from chip8core.errors import Chip8Error
from chip8core.quirks import Quirks


# ******************** STATIC SECTION
KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

REFRESH_HZ = 60
SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(description="run a CHIP-8 rom")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--hz", type=int, default=REFRESH_HZ, help="frames per second")
    parser.add_argument("--scale", type=int, default=SCALE, help="size in pixels of a CHIP-8 pixel")
    parser.add_argument("--ipf", type=int, default=1, help="instructions executed per frame")
    parser.add_argument("--seed", type=int, default=None, help="rng seed, defaults to the current unix time")
    parser.add_argument("--quirk", action="append", default=[], choices=Quirks.names(),
                        help="flip a compatibility quirk from its default, can be repeated")
    args = parser.parse_args(argv)
    if args.hz <= 0 or args.scale <= 0 or args.ipf <= 0:
        parser.error("--hz, --scale and --ipf must be positive")
    return args


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def render(self, framebuffer):
        """paint every row of the framebuffer, the most significant bit of a row is its leftmost pixel"""
        self.surface.fill(self.background)
        for y, row in enumerate(framebuffer):
            for x in range(self.w):
                if (row >> (self.w - 1 - x)) & 1:
                    pygame.draw.rect(
                        self.surface,
                        self.foreground,
                        (x * self.scale, y * self.scale, self.scale, self.scale)
                    )

    @staticmethod
    def refresh():
        pygame.display.flip()


def poll_input(events):
    """
    fold a batch of pygame events into two key masks, pressed and released keys
    return None when the user asked to quit
    """
    down, up = 0, 0
    for event in events:
        if event.type == pygame.QUIT:
            return None
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return None
            if event.key in KEY_MAPPINGS:
                down |= 1 << KEY_MAPPINGS[event.key]
        elif event.type == pygame.KEYUP:
            if event.key in KEY_MAPPINGS:
                up |= 1 << KEY_MAPPINGS[event.key]
    return down, up


def run_frame(machine, down, up, ipf=1):
    """
    emulate one frame: register the pressed keys, execute up to ipf instructions and release the keys let go
    return True if the framebuffer changed during the frame
    """
    machine.keys |= down
    drew = False
    for _ in range(ipf):
        machine.tick()
        if machine.draw:
            drew = True
            if machine.quirks.display_wait:
                break
    machine.keys &= ~up & 0xFFFF
    return drew


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    with open(args.file, mode='rb') as f:
        rom = f.read()
    seed = args.seed if args.seed is not None else int(time.time())
    chip = initialize(seed, Quirks.from_names(args.quirk))
    chip.load_program(rom)
    # pygame initialization
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.file))
    s = Screen(s=args.scale)
    Screen.refresh()
    # emulation loop
    try:
        while True:
            clock.tick(args.hz)
            keys = poll_input(pygame.event.get())
            if keys is None:
                break
            down, up = keys
            if run_frame(chip, down, up, args.ipf):
                s.render(chip.read_framebuffer())
                Screen.refresh()
    except Chip8Error as err:
        sys.exit(f"********** THE EMULATOR CRASHED WITH THE FOLLOWING STATE\n{err}\n{chip}")
    finally:
        pygame.quit()


if __name__ == "__main__":
    main()
