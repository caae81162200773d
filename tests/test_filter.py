import pytest

from primel_solver import (
    Feedback, FeedbackKind, InvalidFeedbackKindError, LengthMismatchError,
    evaluate_numbers, filter_candidates, primes_in_range,
)

A, P, C = FeedbackKind.ABSENT, FeedbackKind.PRESENT, FeedbackKind.CORRECT


def test_correct_and_present() -> None:
    report = evaluate_numbers(12345, 54321)
    assert filter_candidates(report, [54321, 12345, 52341, 11311]) == (54321,)


def test_absent_rejects_digit_outside_correct_positions() -> None:
    # guess 10007: 1 correct in front, 0 and 7 absent
    report = (Feedback(7, A), Feedback(0, A), Feedback(0, A), Feedback(0, A), Feedback(1, C))
    candidates = [12343, 17341, 21343, 11113, 10343]
    assert filter_candidates(report, candidates) == (12343, 11113)


def test_absent_digit_tolerated_at_its_correct_position() -> None:
    report = evaluate_numbers(11234, 15678)
    assert filter_candidates(report, [15678, 11678, 19999, 21678]) == (15678, 19999)


def test_input_is_not_mutated() -> None:
    candidates = [12343, 17341, 21343]
    report = evaluate_numbers(10007, 12343)
    filter_candidates(report, candidates)
    assert candidates == [12343, 17341, 21343]


def test_unknown_kind_raises() -> None:
    report = (Feedback(1, A), Feedback(2, 7), Feedback(3, A), Feedback(4, A), Feedback(5, A))
    with pytest.raises(InvalidFeedbackKindError):
        filter_candidates(report, [12345])


def test_report_length_must_match() -> None:
    with pytest.raises(LengthMismatchError):
        filter_candidates((Feedback(1, C),), [12345], length=5)


def test_idempotent_monotone_and_keeps_solution() -> None:
    candidates = tuple(primes_in_range(10000, 20000))
    for guess, solution in [(10007, candidates[500]), (11113, candidates[-1]),
                            (candidates[3], candidates[700]), (19997, candidates[0])]:
        report = evaluate_numbers(guess, solution)
        once = filter_candidates(report, candidates)
        assert filter_candidates(report, once) == once
        assert len(once) <= len(candidates)
        assert solution in once


def test_correct_position_shrinks_unless_all_agree() -> None:
    universe = tuple(primes_in_range(10000, 100000))
    report = (Feedback(8, A), Feedback(8, A), Feedback(8, A), Feedback(8, A), Feedback(1, C))

    remaining = filter_candidates(report, universe)
    assert 0 < len(remaining) < len(universe)
    assert all(str(c)[0] == "1" for c in remaining)

    agreeing = (11113, 13331, 17771)
    assert filter_candidates(report, agreeing) == agreeing
