import pytest

from primel_solver import (
    EmptyCandidateSetError, Feedback, FeedbackKind, PrimelSolver, SimulationStrategy,
    SolverConfig, evaluate_numbers, stats,
)

A = FeedbackKind.ABSENT


@pytest.fixture(scope="module")
def universe_solver() -> PrimelSolver:
    return PrimelSolver(SolverConfig())


def test_session_starts_from_universe(universe_solver: PrimelSolver) -> None:
    universe_solver.reset()
    assert len(universe_solver.candidates) == 8363
    assert universe_solver.candidates == universe_solver.universe


def test_feedback_replaces_snapshot(universe_solver: PrimelSolver) -> None:
    universe_solver.reset()
    before = universe_solver.candidates
    guess = universe_solver.best_guess()
    solution = 99991
    remaining = universe_solver.add_feedback(guess, evaluate_numbers(guess, solution))

    assert universe_solver.candidates is remaining
    assert len(before) == 8363
    assert len(remaining) < len(before)
    assert solution in remaining
    assert universe_solver.attempts[-1].guess == guess
    assert universe_solver.attempts[-1].remaining == len(remaining)


def test_game_reaches_solution(universe_solver: PrimelSolver) -> None:
    universe_solver.reset()
    solution = 13469
    for _ in range(50):
        guess = universe_solver.best_guess()
        report = evaluate_numbers(guess, solution)
        if guess == solution:
            break
        universe_solver.add_feedback(guess, report)
    assert guess == solution


def test_inconsistent_feedback_empties_set() -> None:
    solver = PrimelSolver(SolverConfig(number_length=2, lower_bound=10, upper_bound=20))
    assert solver.candidates == (11, 13, 17, 19)
    with pytest.raises(EmptyCandidateSetError):
        solver.add_feedback(11, (Feedback(1, A), Feedback(1, A)))
    assert solver.candidates == ()

    solver.reset()
    assert solver.candidates == (11, 13, 17, 19)
    assert solver.attempts == []


def test_configured_strategy() -> None:
    cfg = SolverConfig(number_length=2, lower_bound=10, upper_bound=40, strategy="simulation", max_workers=1)
    solver = PrimelSolver(cfg)
    assert isinstance(solver.strategy, SimulationStrategy)
    assert solver.best_guess() in solver.candidates
    assert len(solver.suggest_guesses(3)) == 3
    assert solver.remaining_candidates(2) == [11, 13]


def test_unsolved_guess_is_dropped_even_if_consistent() -> None:
    # 1122 against 2211 is all Present, and 1122 itself still fits that report
    cfg = SolverConfig(number_length=4, lower_bound=1000, upper_bound=1000)
    solver = PrimelSolver(cfg)
    solver.universe = solver.candidates = (1122, 2211, 1212)
    report = evaluate_numbers(1122, 2211, 4)
    assert all(f.kind == FeedbackKind.PRESENT for f in report)

    remaining = solver.add_feedback(1122, report)
    assert 1122 not in remaining
    assert 2211 in remaining


def test_reset_starts_fresh_statistics() -> None:
    solver = PrimelSolver(SolverConfig(number_length=2, lower_bound=10, upper_bound=20))
    solver.add_feedback(11, evaluate_numbers(11, 13, 2))
    assert stats.rounds >= 1
    assert "Rounds played" in solver.get_statistics()

    solver.reset()
    assert stats.rounds == 0
    assert stats.candidate_counts == []
    assert solver.attempts == []
    assert solver.get_statistics() == "No statistics available."
