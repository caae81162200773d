#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Interactive terminal helper for Primel (https://converged.yt/primel/).

Proposes a guess, asks for the colour of every digit and narrows the
remaining five-digit primes until the number is found.
"""

import sys
import logging
import argparse
from typing import List, Optional, Sequence, TextIO

from primel_solver import (
    PrimelSolver, SolverConfig, Feedback, FeedbackKind, FeedbackReport,
    EmptyCandidateSetError, InvalidFeedbackKindError, SimulationStrategy,
    config, logger, digits_of, format_number, is_solved,
)

EXIT_SOLVED = 0
EXIT_NO_CANDIDATES = 1
EXIT_INVALID_FEEDBACK = 2
EXIT_INTERRUPTED = 130

FEEDBACK_TOKENS = {
    'c': FeedbackKind.CORRECT,
    'p': FeedbackKind.PRESENT,
    'a': FeedbackKind.ABSENT,
}

# Simulation above this many candidates takes minutes
SIMULATION_WARNING_SIZE = 1000

# =========================
# 1. Prompting
# =========================

def render_guess(guess_digits: Sequence[int], cfg: SolverConfig,
                 highlight: Optional[int] = None) -> str:
    """Guess digits most significant first, underlining the position being asked"""
    parts = []
    for position in range(len(guess_digits) - 1, -1, -1):
        style = cfg.bold + (cfg.underline if position == highlight else "")
        parts.append(f"{style}{guess_digits[position]}{cfg.reset}")
    return "".join(parts)


def feedback_prompt(guess_digits: Sequence[int], position: int, cfg: SolverConfig) -> str:
    label = len(guess_digits) - position
    return (
        f"Was the digit in position {cfg.bold}{label}{cfg.reset} of the guess "
        f"({render_guess(guess_digits, cfg, highlight=position)}) in the "
        f"{cfg.green}correct{cfg.reset} position, {cfg.yellow}present{cfg.reset} "
        f"but in the wrong position or {cfg.red}absent{cfg.reset}? "
        f"[{cfg.green}c{cfg.reset}/{cfg.yellow}p{cfg.reset}/{cfg.red}a{cfg.reset}] "
    )


def read_feedback_for_digits(guess_digits: Sequence[int],
                             cfg: SolverConfig = config,
                             stdin: Optional[TextIO] = None,
                             stdout: Optional[TextIO] = None,
                             stderr: Optional[TextIO] = None) -> FeedbackReport:
    """
    Ask for the feedback of every digit, leftmost first.

    Anything other than exactly 'c', 'p' or 'a' is reported and the same
    position is asked again. Raises EOFError when input runs out.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    result: List[Optional[Feedback]] = [None] * len(guess_digits)
    for position in range(len(guess_digits) - 1, -1, -1):
        while True:
            stdout.write(feedback_prompt(guess_digits, position, cfg))
            stdout.flush()

            line = stdin.readline()
            if not line:
                raise EOFError("Input closed while reading feedback")

            token = line.rstrip("\r\n")
            kind = FEEDBACK_TOKENS.get(token)
            if kind is None:
                stderr.write(f"Invalid feedback: {token}\n")
                continue

            result[position] = Feedback(guess_digits[position], kind)
            break

    return tuple(result)

# =========================
# 2. Game Loop
# =========================

def announce_guess(guess: int, remaining: int, first: bool,
                   cfg: SolverConfig, stdout: TextIO):
    prefix = "The best first guess is" if first else "The new best guess is"
    stdout.write(f"{prefix}: {format_number(guess, cfg.number_length)}. "
                 f"The number of remaining candidates is {remaining}\n")


def run_session(solver: PrimelSolver,
                cfg: SolverConfig = config,
                stdin: Optional[TextIO] = None,
                stdout: Optional[TextIO] = None,
                stderr: Optional[TextIO] = None) -> int:
    """Play rounds until solved; returns the process exit code"""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    guess = solver.best_guess()
    announce_guess(guess, len(solver.candidates), True, cfg, stdout)

    while True:
        report = read_feedback_for_digits(digits_of(guess, cfg.number_length), cfg,
                                          stdin=stdin, stdout=stdout, stderr=stderr)
        if is_solved(report):
            stdout.write(f"We found the correct number ({cfg.green}{cfg.bold}"
                         f"{format_number(guess, cfg.number_length)}{cfg.reset})! 🎉\n")
            logger.info(f"Solved in {len(solver.attempts) + 1} guesses")
            return EXIT_SOLVED

        try:
            solver.add_feedback(guess, report)
        except EmptyCandidateSetError:
            stderr.write("No more candidates found!\n")
            return EXIT_NO_CANDIDATES
        except InvalidFeedbackKindError as e:
            logger.error(f"Internal feedback error: {e}")
            stderr.write("Unknown feedback type\n")
            return EXIT_INVALID_FEEDBACK

        guess = solver.best_guess()
        announce_guess(guess, len(solver.candidates), False, cfg, stdout)


def print_opening(solver: PrimelSolver, top_n: int, cfg: SolverConfig, stdout: TextIO):
    """Top opening guesses for the configured strategy"""
    direction = "higher" if solver.strategy.higher_is_better else "lower"
    stdout.write(f"\n🎯 BEST OPENING GUESSES ({solver.strategy.name}, {direction} is better)\n")
    stdout.write("="*40 + "\n")
    stdout.write(f"{'Rank':<6}{'Guess':<10}{'Score':<10}\n")
    stdout.write("-"*26 + "\n")
    for i, (guess, score) in enumerate(solver.suggest_guesses(top_n), 1):
        stdout.write(f"{i:<6}{format_number(guess, cfg.number_length):<10}{score}\n")

# =========================
# 3. Main Entry Point
# =========================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive helper for Primel, the five-digit prime guessing game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage examples:
  primel-solver                         # Play with the frequency heuristic
  primel-solver --strategy simulation   # Simulate every candidate (slow)
  primel-solver --opening 10            # Show the 10 best opening guesses
        """
    )
    parser.add_argument('--strategy', choices=['frequency', 'simulation'],
                        default=config.strategy, help='Guess scoring strategy')
    parser.add_argument('--workers', type=int, default=config.max_workers,
                        help='Worker processes for the simulation strategy')
    parser.add_argument('--opening', '-o', type=int, nargs='?', const=10, default=None,
                        metavar='N', help='Show the N best opening guesses and exit')
    parser.add_argument('--stats', '-s', action='store_true',
                        help='Display statistics when the session ends')
    parser.add_argument('--no-color', action='store_true',
                        help='Disable ANSI colours')
    parser.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='WARNING', help='Logging level')
    parser.add_argument('--log-dir', default=None,
                        help='Also write a debug log file into this directory')
    return parser


def main(argv: Optional[List[str]] = None,
         stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None,
         stderr: Optional[TextIO] = None) -> int:
    """Main function with argument handling"""
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    args = build_parser().parse_args(argv)

    # Adjust log level
    logger.set_level(getattr(logging, args.log_level))

    cfg = SolverConfig(strategy=args.strategy, max_workers=args.workers, log_dir=args.log_dir)
    if args.no_color:
        cfg = cfg.without_colors()
    if cfg.log_dir:
        path = logger.attach_file(cfg.log_dir)
        logger.info(f"Logging to {path}")

    solver: Optional[PrimelSolver] = None
    try:
        solver = PrimelSolver(cfg)
        if (solver.strategy.name == SimulationStrategy.name
                and len(solver.candidates) > SIMULATION_WARNING_SIZE):
            logger.warning(f"Simulation on {len(solver.candidates)} candidates will take a long time")

        if args.opening is not None:
            print_opening(solver, args.opening, cfg, stdout)
            return EXIT_SOLVED

        return run_session(solver, cfg, stdin=stdin, stdout=stdout, stderr=stderr)

    except (KeyboardInterrupt, EOFError):
        stderr.write("\n\n⚠️  User interruption\n")
        logger.info("Program interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        if args.stats and solver is not None:
            stdout.write(solver.get_statistics() + "\n")


if __name__ == "__main__":
    raise SystemExit(main())
