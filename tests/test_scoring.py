from datetime import datetime, timedelta

import pytest
from sqlmodel import Session, select

from playforfun.exceptions import ConflictError, NotFoundError, ScoringError, ValidationError
from playforfun.models import Match, MatchStatus, Prediction, ResultType, User
from playforfun.services import scoring
from playforfun.services.scoring import clear_match_result, record_match_result
from tests.helpers import create_match, create_space, create_user


def predict(session: Session, user: User, match, team, points: int = 0) -> Prediction:
    prediction = Prediction(
        user_id=user.id,
        match_id=match.id,
        space_id=match.space_id,
        predicted_winner=team,
        points_earned_for_this_match=points
    )
    session.add(prediction)
    session.commit()
    return prediction


def rows_for(session: Session, match) -> dict:
    predictions = session.exec(select(Prediction).where(Prediction.match_id == match.id)).all()
    return {p.user_id: p for p in predictions}


def totals(session: Session, *users: User) -> list:
    return [session.get(User, user.id).overall_total_points for user in users]


@pytest.fixture(name="members")
def members_fixture(session: Session, space):
    return [create_user(session, space, name) for name in ("alice", "bob", "carol")]


def test_winner_scenario(session, space, members):
    alice, bob, carol = members
    match = create_match(session, space)
    predict(session, alice, match, "Mumbai")
    predict(session, carol, match, "Chennai")

    match = record_match_result(session, match.id, space.id, ResultType.WINNER, "Mumbai")

    assert match.status == MatchStatus.RESULT_AVAILABLE
    assert match.winning_team == "Mumbai"
    assert match.result_entered_at is not None
    assert totals(session, alice, bob, carol) == [2, -1, -1]

    rows = rows_for(session, match)
    assert rows[alice.id].points_earned_for_this_match == 2
    assert rows[carol.id].points_earned_for_this_match == -1
    # Bob never picked; a penalty row is synthesized for him
    assert rows[bob.id].predicted_winner is None
    assert rows[bob.id].points_earned_for_this_match == -1


def test_winner_sum_of_deltas(session, space):
    users = [create_user(session, space, f"user{i}") for i in range(7)]
    match = create_match(session, space)
    picks = ["Mumbai", "Mumbai", "Chennai", None, "Chennai", "Mumbai", None]
    for user, pick in zip(users, picks):
        if pick is not None:
            predict(session, user, match, pick)

    record_match_result(session, match.id, space.id, ResultType.WINNER, "Chennai")

    correct = picks.count("Chennai")
    assert sum(totals(session, *users)) == 2 * correct - (len(users) - correct)


def test_draw_changes_no_totals(session, space, members):
    alice, bob, carol = members
    session.get(User, alice.id).overall_total_points = 7
    session.commit()
    match = create_match(session, space)
    predict(session, alice, match, "Mumbai")
    predict(session, carol, match, "Chennai")

    match = record_match_result(session, match.id, space.id, ResultType.DRAW, "Mumbai")

    assert match.status == MatchStatus.MATCH_DRAWN
    assert match.winning_team is None
    assert totals(session, alice, bob, carol) == [7, 0, 0]
    rows = rows_for(session, match)
    assert len(rows) == 3
    assert all(row.points_earned_for_this_match == 0 for row in rows.values())


def test_revert_is_exact_inverse(session, space, members):
    alice, bob, carol = members
    for user, points in zip(members, (10, 4, -3)):
        session.get(User, user.id).overall_total_points = points
    session.commit()
    match = create_match(session, space, deadline=datetime.now() - timedelta(hours=2))
    predict(session, alice, match, "Mumbai")
    predict(session, carol, match, "Chennai")

    record_match_result(session, match.id, space.id, ResultType.WINNER, "Chennai")
    assert totals(session, alice, bob, carol) == [9, 3, -1]

    match = clear_match_result(session, match.id, space.id)

    assert totals(session, alice, bob, carol) == [10, 4, -3]
    assert all(row.points_earned_for_this_match == 0 for row in rows_for(session, match).values())
    assert match.status == MatchStatus.PREDICTION_CLOSED
    assert match.result_type is None
    assert match.winning_team is None
    assert match.result_entered_at is None


def test_clear_before_deadline_reopens_predictions(session, space, members):
    match = create_match(session, space, deadline=datetime.now() + timedelta(days=2))
    record_match_result(session, match.id, space.id, ResultType.DRAW)

    match = clear_match_result(session, match.id, space.id)

    assert match.status == MatchStatus.PREDICTION_OPEN


def test_rescoring_after_clear_reuses_penalty_rows(session, space, members):
    match = create_match(session, space)

    record_match_result(session, match.id, space.id, ResultType.WINNER, "Mumbai")
    clear_match_result(session, match.id, space.id)
    record_match_result(session, match.id, space.id, ResultType.WINNER, "Chennai")

    assert len(rows_for(session, match)) == len(members)
    assert totals(session, *members) == [-1, -1, -1]


def test_entering_result_twice_is_a_conflict(session, space, members):
    match = create_match(session, space)
    record_match_result(session, match.id, space.id, ResultType.WINNER, "Mumbai")

    with pytest.raises(ConflictError):
        record_match_result(session, match.id, space.id, ResultType.WINNER, "Chennai")

    assert totals(session, *members) == [-1, -1, -1]


def test_clearing_unresulted_match_is_a_conflict(session, space, members):
    match = create_match(session, space)

    with pytest.raises(ConflictError):
        clear_match_result(session, match.id, space.id)

    assert session.get(Match, match.id).status == MatchStatus.UPCOMING


def test_winner_must_be_a_participant(session, space, members):
    match = create_match(session, space)

    with pytest.raises(ValidationError):
        record_match_result(session, match.id, space.id, ResultType.WINNER, "Delhi")
    with pytest.raises(ValidationError):
        record_match_result(session, match.id, space.id, ResultType.WINNER, None)

    assert session.get(Match, match.id).status == MatchStatus.UPCOMING
    assert rows_for(session, match) == {}


def test_match_in_other_space_is_not_found(session, space, members):
    other_space = create_space(session, "Rivals", "ZZZ999")
    match = create_match(session, other_space)

    with pytest.raises(NotFoundError):
        record_match_result(session, match.id, space.id, ResultType.DRAW)


def test_failure_mid_scoring_rolls_everything_back(session, space, members, monkeypatch):
    alice, bob, carol = members
    match = create_match(session, space)
    predict(session, alice, match, "Mumbai")

    original = scoring.calculate_points
    calls = []

    def failing_calculate_points(*args):
        calls.append(args)
        if len(calls) == 2:
            raise RuntimeError("database went away")
        return original(*args)

    monkeypatch.setattr(scoring, "calculate_points", failing_calculate_points)

    with pytest.raises(ScoringError):
        record_match_result(session, match.id, space.id, ResultType.WINNER, "Mumbai")

    stored = session.get(Match, match.id)
    assert stored.status == MatchStatus.UPCOMING
    assert stored.result_type is None
    assert stored.result_entered_at is None
    assert totals(session, alice, bob, carol) == [0, 0, 0]
    rows = rows_for(session, match)
    assert list(rows) == [alice.id]
    assert rows[alice.id].points_earned_for_this_match == 0
