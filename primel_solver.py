#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Primel Solver v1.0
Candidate filtering and guess evaluation for the five-digit prime guessing game.
"""

import os
import time
import logging
from collections import Counter, defaultdict
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import IntEnum
from typing import List, Dict, Tuple, Sequence, Optional

# =========================
# 0. Configuration
# =========================

@dataclass
class SolverConfig:
    """Centralized solver configuration"""

    number_length: int = 5
    lower_bound: int = 10000
    upper_bound: int = 100000
    strategy: str = "frequency"
    max_workers: int = field(default_factory=lambda: min(4, os.cpu_count() or 1))
    # Simulation on fewer candidates than this stays in-process
    serial_threshold: int = 64
    log_dir: Optional[str] = None

    # ANSI escape codes for the terminal
    green: str = "\033[32m"
    yellow: str = "\033[33m"
    red: str = "\033[31m"
    bold: str = "\033[1m"
    underline: str = "\033[4m"
    reset: str = "\033[0m"

    def without_colors(self) -> "SolverConfig":
        """Copy of this config with every escape code blanked"""
        return replace(self, green="", yellow="", red="", bold="", underline="", reset="")

# Global config instance
config = SolverConfig()

# =========================
# 1. Logging System
# =========================

class SolverLogger:
    """Log manager with different levels"""

    FORMAT = '%(asctime)s | %(levelname)-8s | %(funcName)-20s | %(message)s'
    DATEFMT = '%Y-%m-%d %H:%M:%S'

    def __init__(self, name: str = "primel_solver", level: int = logging.WARNING):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.formatter = logging.Formatter(self.FORMAT, datefmt=self.DATEFMT)

        # Console handler on stderr, stdout belongs to the game transcript
        self.console = logging.StreamHandler()
        self.console.setLevel(level)
        self.console.setFormatter(self.formatter)
        self.logger.addHandler(self.console)
        self.file_handler: Optional[logging.FileHandler] = None

    def set_level(self, level: int):
        self.console.setLevel(level)

    def attach_file(self, log_dir: str) -> str:
        """Also write DEBUG and above to a timestamped file in log_dir"""
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = os.path.join(log_dir, f"primel_{timestamp}.log")

        if self.file_handler is not None:
            self.logger.removeHandler(self.file_handler)
            self.file_handler.close()

        self.file_handler = logging.FileHandler(path, encoding='utf-8')
        self.file_handler.setLevel(logging.DEBUG)
        self.file_handler.setFormatter(self.formatter)
        self.logger.addHandler(self.file_handler)
        return path

    def debug(self, msg: str): self.logger.debug(msg, stacklevel=2)
    def info(self, msg: str): self.logger.info(msg, stacklevel=2)
    def warning(self, msg: str): self.logger.warning(msg, stacklevel=2)
    def error(self, msg: str, exc_info: bool = False): self.logger.error(msg, exc_info=exc_info, stacklevel=2)

# Global instance
logger = SolverLogger()

# =========================
# 2. Errors
# =========================

class SolverError(Exception):
    """Base class for solver errors"""


class LengthMismatchError(SolverError, ValueError):
    """Guess and solution digit sequences differ in length"""


class EmptyCandidateSetError(SolverError):
    """No number satisfies all the feedback given so far"""


class InvalidFeedbackKindError(SolverError):
    """A feedback value outside Absent/Present/Correct reached the filter"""

# =========================
# 3. Statistics
# =========================

class SolverStats:
    """Performance statistics collection and analysis"""

    def __init__(self):
        self.phase_times: Dict[str, List[float]] = defaultdict(list)
        self.candidate_counts: List[int] = []
        self.rounds: int = 0

    def log_phase(self, phase_name: str, duration: float):
        self.phase_times[phase_name].append(duration)

    def log_round(self, num_candidates: int):
        self.candidate_counts.append(num_candidates)
        self.rounds += 1

    def reset(self):
        self.phase_times.clear()
        self.candidate_counts = []
        self.rounds = 0

    def get_summary(self) -> str:
        if not self.phase_times and not self.rounds:
            return "No statistics available."

        lines = [
            "\n" + "="*60,
            "📊 PERFORMANCE STATISTICS",
            "="*60,
            f"Rounds played           : {self.rounds}",
        ]
        if self.candidate_counts:
            history = " -> ".join(str(c) for c in self.candidate_counts)
            lines.append(f"Candidates per round    : {history}")

        if self.phase_times:
            lines.append("")
            lines.append("Phase breakdown:")
            for phase, times in sorted(self.phase_times.items()):
                avg = sum(times) / len(times)
                lines.append(f"  • {phase:<20}: {avg:.3f}s (x{len(times)})")

        lines.append("="*60)
        return "\n".join(lines)

# Global instance
stats = SolverStats()

# =========================
# 4. Prime Generator
# =========================

def sieve(limit: int) -> List[int]:
    """All primes strictly below limit (sieve of Eratosthenes)"""
    if limit < 2:
        return []

    is_prime = [True] * limit
    is_prime[0] = is_prime[1] = False
    for value in range(2, int(limit ** 0.5) + 1):
        if is_prime[value]:
            for multiple in range(value * value, limit, value):
                is_prime[multiple] = False

    return [value for value, flag in enumerate(is_prime) if flag]


def primes_in_range(lower: int, upper: int) -> List[int]:
    """Primes in [lower, upper), ascending"""
    start = time.time()
    primes = [p for p in sieve(upper) if p >= lower]
    elapsed = time.time() - start
    stats.log_phase("Sieve", elapsed)
    logger.debug(f"{len(primes)} primes in [{lower}, {upper}) found in {elapsed:.3f}s")
    return primes

# =========================
# 5. Digit Codec
# =========================

def digits_of(number: int, count: int) -> Tuple[int, ...]:
    """
    Digits of number, least significant first (position 0 = units).
    Missing high digits come out as zeros.
    """
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")

    digits = []
    for _ in range(count):
        digits.append(number % 10)
        number //= 10
    return tuple(digits)


def number_from_digits(digits: Sequence[int]) -> int:
    """Inverse of digits_of (Horner's method from the most significant digit)"""
    number = 0
    for digit in reversed(digits):
        number = number * 10 + digit
    return number


def format_number(number: int, length: int = 5) -> str:
    return f"{number:0{length}d}"

# =========================
# 6. Feedback Evaluator
# =========================

class FeedbackKind(IntEnum):
    ABSENT = 0
    PRESENT = 1
    CORRECT = 2


@dataclass(frozen=True)
class Feedback:
    digit: int
    kind: FeedbackKind


FeedbackReport = Tuple[Feedback, ...]


def evaluate(guess_digits: Sequence[int], solution_digits: Sequence[int]) -> FeedbackReport:
    """
    Feedback for a guess against a hypothetical solution.

    Correct positions are settled first and are never reconsidered. A guess
    digit is Present when any solution position that is not Correct holds
    the same digit; one solution digit may back several Present marks.
    """
    if len(guess_digits) != len(solution_digits):
        raise LengthMismatchError(
            f"guess has {len(guess_digits)} digits, solution has {len(solution_digits)}"
        )

    kinds: List[Optional[FeedbackKind]] = [None] * len(guess_digits)

    # Phase 1: Correct (exact match)
    for i, (guess_digit, solution_digit) in enumerate(zip(guess_digits, solution_digits)):
        if guess_digit == solution_digit:
            kinds[i] = FeedbackKind.CORRECT

    # Phase 2: Present/Absent against the non-correct solution positions
    open_digits = {
        solution_digits[j] for j in range(len(solution_digits))
        if kinds[j] is not FeedbackKind.CORRECT
    }
    for i, guess_digit in enumerate(guess_digits):
        if kinds[i] is FeedbackKind.CORRECT:
            continue
        kinds[i] = FeedbackKind.PRESENT if guess_digit in open_digits else FeedbackKind.ABSENT

    return tuple(Feedback(digit, kind) for digit, kind in zip(guess_digits, kinds))


def evaluate_numbers(guess: int, solution: int, length: int = 5) -> FeedbackReport:
    return evaluate(digits_of(guess, length), digits_of(solution, length))


def is_solved(report: Sequence[Feedback]) -> bool:
    """True when every position is Correct"""
    return bool(report) and all(f.kind == FeedbackKind.CORRECT for f in report)

# =========================
# 7. Candidate Filter
# =========================

def filter_candidates(report: Sequence[Feedback],
                      candidates: Sequence[int],
                      length: Optional[int] = None) -> Tuple[int, ...]:
    """
    Candidates consistent with a feedback report, as a new tuple.

    Correct positions are applied first because the Present and Absent
    checks ignore them.
    """
    if length is None:
        length = len(report)
    elif length != len(report):
        raise LengthMismatchError(f"report has {len(report)} positions, expected {length}")

    digit_table = [(c, digits_of(c, length)) for c in candidates]

    correct_positions = set()
    for i, fb in enumerate(report):
        if fb.kind == FeedbackKind.CORRECT:
            correct_positions.add(i)
            digit_table = [(c, d) for c, d in digit_table if d[i] == fb.digit]

    open_positions = [p for p in range(length) if p not in correct_positions]

    for i, fb in enumerate(report):
        kind = fb.kind
        if kind == FeedbackKind.CORRECT:
            continue  # already applied
        elif kind == FeedbackKind.PRESENT:
            digit_table = [
                (c, d) for c, d in digit_table
                if any(d[p] == fb.digit for p in open_positions if p != i)
            ]
        elif kind == FeedbackKind.ABSENT:
            digit_table = [
                (c, d) for c, d in digit_table
                if all(d[p] != fb.digit for p in open_positions)
            ]
        else:
            raise InvalidFeedbackKindError(f"Unknown feedback kind at position {i}: {kind!r}")

    return tuple(c for c, _ in digit_table)

# =========================
# 8. Guess Scoring Strategies
# =========================

def _simulation_total(guess: int, candidates: Sequence[int], length: int) -> int:
    """Sum of remaining-set sizes after guessing against every candidate"""
    guess_digits = digits_of(guess, length)
    total = 0
    for solution in candidates:
        report = evaluate(guess_digits, digits_of(solution, length))
        total += len(filter_candidates(report, candidates, length))
    return total


def init_worker(candidates: Tuple[int, ...], length: int):
    """Initializer for the process pool: hand each worker its snapshot."""
    _simulate_guess.candidates = candidates
    _simulate_guess.length = length


def _simulate_guess(guess: int) -> Tuple[int, int]:
    return guess, _simulation_total(guess, _simulate_guess.candidates, _simulate_guess.length)

# Attach snapshot to the worker function
_simulate_guess.candidates = ()
_simulate_guess.length = 5


class GuessStrategy:
    """Common interface of the guess scoring strategies"""

    name = "base"
    higher_is_better = True

    def __init__(self, length: int = 5):
        self.length = length

    def score_all(self, candidates: Sequence[int]) -> List[int]:
        raise NotImplementedError

    def is_better(self, score: int, best: int) -> bool:
        """Strict comparison, so the first-seen guess keeps a tie"""
        return score > best if self.higher_is_better else score < best


class FrequencyStrategy(GuessStrategy):
    """Sum over positions of how often the guess digit sits there among candidates"""

    name = "frequency"
    higher_is_better = True

    def position_frequencies(self, candidates: Sequence[int]) -> List[Counter]:
        frequencies = [Counter() for _ in range(self.length)]
        for candidate in candidates:
            for position, digit in enumerate(digits_of(candidate, self.length)):
                frequencies[position][digit] += 1
        return frequencies

    def score_all(self, candidates: Sequence[int]) -> List[int]:
        frequencies = self.position_frequencies(candidates)
        return [
            sum(frequencies[p][d] for p, d in enumerate(digits_of(c, self.length)))
            for c in candidates
        ]


class SimulationStrategy(GuessStrategy):
    """
    Total remaining candidates after playing a guess against every candidate
    as the hypothetical solution. Lower is better.

    Each guess is scored independently, in worker processes when the set is
    large enough. The per-guess sums are only combined once every future is
    done.
    """

    name = "simulation"
    higher_is_better = False

    def __init__(self, length: int = 5, max_workers: Optional[int] = None,
                 serial_threshold: int = 64):
        super().__init__(length)
        self.max_workers = max_workers if max_workers is not None else config.max_workers
        self.serial_threshold = serial_threshold

    def score_all(self, candidates: Sequence[int]) -> List[int]:
        snapshot = tuple(candidates)
        if self.max_workers <= 1 or len(snapshot) < self.serial_threshold:
            return [_simulation_total(g, snapshot, self.length) for g in snapshot]
        return self._score_parallel(snapshot)

    def _score_parallel(self, snapshot: Tuple[int, ...]) -> List[int]:
        totals: Dict[int, int] = {}
        with ProcessPoolExecutor(max_workers=self.max_workers,
                                 initializer=init_worker,
                                 initargs=(snapshot, self.length)) as executor:
            logger.info(f"Using up to {self.max_workers} workers to simulate {len(snapshot)} guesses.")
            futures = [executor.submit(_simulate_guess, guess) for guess in snapshot]

            processed = 0
            for future in as_completed(futures):
                guess, total = future.result()
                totals[guess] = total
                processed += 1
                if processed % 500 == 0:
                    pct = (processed / len(snapshot)) * 100
                    logger.debug(f"Progress: {processed}/{len(snapshot)} ({pct:.1f}%)")

        return [totals[guess] for guess in snapshot]


STRATEGIES = {
    FrequencyStrategy.name: FrequencyStrategy,
    SimulationStrategy.name: SimulationStrategy,
}


def get_strategy(name: str, length: int = 5, **options) -> GuessStrategy:
    """Build a strategy from its configured name"""
    try:
        strategy_cls = STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown strategy '{name}'. Choose from: {', '.join(STRATEGIES)}") from None
    if options and strategy_cls is not SimulationStrategy:
        raise ValueError(f"Strategy '{name}' takes no options, got: {', '.join(sorted(options))}")
    return strategy_cls(length, **options)

# =========================
# 9. Guess Selection
# =========================

def select_best_guess(candidates: Sequence[int], strategy: GuessStrategy) -> int:
    """Best-scoring candidate in the strategy's direction; ties keep the first seen."""
    if not candidates:
        raise EmptyCandidateSetError("Cannot select a guess from an empty candidate set")

    start = time.time()
    scores = strategy.score_all(candidates)

    best_guess, best_score = candidates[0], scores[0]
    for candidate, score in zip(candidates[1:], scores[1:]):
        if strategy.is_better(score, best_score):
            best_guess, best_score = candidate, score

    elapsed = time.time() - start
    stats.log_phase(f"Scoring_{strategy.name}", elapsed)
    logger.info(f"{strategy.name} picked {best_guess} (score {best_score}) "
                f"among {len(candidates)} candidates in {elapsed:.3f}s")
    return best_guess


def rank_guesses(candidates: Sequence[int], strategy: GuessStrategy,
                 top_n: int = 10) -> List[Tuple[int, int]]:
    """Top guesses with their scores, best first, ties in candidate order"""
    if not candidates:
        raise EmptyCandidateSetError("Cannot rank guesses from an empty candidate set")

    scores = strategy.score_all(candidates)
    ranked = sorted(zip(candidates, scores), key=lambda x: x[1],
                    reverse=strategy.higher_is_better)
    return ranked[:top_n]

# =========================
# 10. Solver Session
# =========================

@dataclass(frozen=True)
class Attempt:
    guess: int
    report: FeedbackReport
    remaining: int


class PrimelSolver:
    """Holds the current candidate snapshot and the attempts made so far"""

    def __init__(self, solver_config: Optional[SolverConfig] = None,
                 strategy: Optional[GuessStrategy] = None):
        self.config = solver_config or config
        if strategy is None:
            options = {}
            if self.config.strategy == SimulationStrategy.name:
                options = {'max_workers': self.config.max_workers,
                           'serial_threshold': self.config.serial_threshold}
            strategy = get_strategy(self.config.strategy, self.config.number_length, **options)
        self.strategy = strategy

        self.universe: Tuple[int, ...] = tuple(
            primes_in_range(self.config.lower_bound, self.config.upper_bound)
        )
        self.candidates: Tuple[int, ...] = self.universe
        self.attempts: List[Attempt] = []
        logger.info(f"PrimelSolver ready: {len(self.universe)} candidates, strategy={self.strategy.name}")

    def best_guess(self) -> int:
        return select_best_guess(self.candidates, self.strategy)

    def digits(self, number: int) -> Tuple[int, ...]:
        return digits_of(number, self.config.number_length)

    def add_feedback(self, guess: int, report: Sequence[Feedback]) -> Tuple[int, ...]:
        """Filter the candidates with the report of a guess and record the attempt"""
        report = tuple(report)
        start = time.time()
        before = len(self.candidates)

        remaining = filter_candidates(report, self.candidates, self.config.number_length)
        if not is_solved(report):
            # A guess can survive its own feedback when it repeats digits
            remaining = tuple(c for c in remaining if c != guess)

        stats.log_phase("Filtering", time.time() - start)
        stats.log_round(len(remaining))
        self.attempts.append(Attempt(guess, report, len(remaining)))
        logger.info(f"Attempt added: {format_number(guess, self.config.number_length)} -> "
                    f"{before} -> {len(remaining)} candidates")

        if not remaining:
            logger.error("❌ No candidates left after filtering")
            self.candidates = remaining
            raise EmptyCandidateSetError("No number is consistent with the feedback given so far")

        self.candidates = remaining
        return remaining

    def remaining_candidates(self, max_numbers: int = 50) -> List[int]:
        return list(self.candidates[:max_numbers])

    def suggest_guesses(self, top_n: int = 10) -> List[Tuple[int, int]]:
        return rank_guesses(self.candidates, self.strategy, top_n)

    def reset(self):
        self.candidates = self.universe
        self.attempts = []
        stats.reset()

    def get_statistics(self) -> str:
        return stats.get_summary()
