"""Command line entry point: ``chipvm ROM [options] [key=value ...]``."""

import argparse
import sys
from typing import Optional, Sequence

import jax

from chipvm.config import EmulatorConfig, load_config
from chipvm.controller import Controller, FramePacer, NullPacer, RunState
from chipvm.emulator import load_rom
from chipvm.errors import ConfigError, LoadError, MachineError
from chipvm.logging import ConsoleLogger, InstructionTracer
from chipvm.state import create_state

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chipvm",
        description="Run a CHIP-8 program.",
        epilog="Keys: 1234/QWER/ASDF/ZXCV = keypad, SPACE = pause, ESC = quit",
    )
    parser.add_argument("rom", help="Path to the CHIP-8 program image")
    parser.add_argument("--config", help="YAML file with configuration overrides")
    parser.add_argument("--headless", action="store_true", help="Run without a window")
    parser.add_argument("--cycles", type=int, default=None,
                        help="Stop after this many controller cycles")
    parser.add_argument("--screenshot", help="Save the last frame to this image file (headless only)")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--no-throttle", action="store_true",
                        help="Do not pace headless runs against wall-clock time")
    parser.add_argument("overrides", nargs="*", metavar="key=value",
                        help="Configuration overrides, e.g. scale=10 color_scheme=amber")
    return parser


def _run(args, config: EmulatorConfig, logger: ConsoleLogger) -> int:
    state = create_state(
        jax.random.PRNGKey(config.seed),
        width=config.width,
        height=config.height,
        modern_mode=config.modern_mode,
    )
    state = load_rom(state, args.rom)
    logger.info(f"Loaded: {args.rom}")

    trace = InstructionTracer(logger) if config.trace else None

    if args.headless:
        from chipvm.frontend import HeadlessFrontend
        frontend = HeadlessFrontend()
        pacer = NullPacer() if args.no_throttle else FramePacer(config.cadence_hz)
        controller = Controller(state, frontend, frontend, config, pacer=pacer, logger=logger, trace=trace)
        _drive(controller, args, logger)
        if args.screenshot:
            frontend.save(args.screenshot, config.scale)
            logger.info(f"Screenshot saved: {args.screenshot}")
        return EXIT_SUCCESS

    from chipvm.frontend import PygameFrontend
    with PygameFrontend(config) as frontend:
        controller = Controller(state, frontend, frontend, config, pacer=frontend, logger=logger, trace=trace)
        _drive(controller, args, logger)
    return EXIT_SUCCESS


def _drive(controller: Controller, args, logger: ConsoleLogger) -> None:
    try:
        final_state = controller.run(max_cycles=args.cycles, progress=args.progress)
    except MachineError as e:
        logger.critical(f"Fatal {e.kind}: {e}")
        logger.log_state(controller.state, level="CRITICAL")
        raise
    if final_state is RunState.QUIT:
        logger.info("Emulator stopped")
    logger.info(f"{controller.cycles} cycles, {controller.instructions} instructions executed")


def main(argv: Optional[Sequence[str]] = None) -> int:
    # Overrides may follow options, so positionals are collected across them
    args = build_parser().parse_intermixed_args(argv)

    try:
        config = load_config(args.config, args.overrides)
    except ConfigError as e:
        ConsoleLogger().error(str(e))
        return EXIT_FAILURE

    logger = ConsoleLogger(log_level=config.log_level)
    try:
        return _run(args, config, logger)
    except LoadError as e:
        logger.error(str(e))
        return EXIT_FAILURE
    except MachineError:
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
