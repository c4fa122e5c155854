from sqlmodel import select

from playforfun.models import Prediction, User
from tests.helpers import bearer, create_match, create_space, create_user


def test_score_override(client, session, space, admin_headers):
    alice = create_user(session, space, "alice", points=4)
    match = create_match(session, space)
    session.add(Prediction(
        user_id=alice.id,
        match_id=match.id,
        space_id=space.id,
        predicted_winner="Mumbai",
        points_earned_for_this_match=2
    ))
    session.commit()

    response = client.put(
        f"/api/admin/users/{alice.id}/score",
        json={"newScore": 42},
        headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["overall_total_points"] == 42
    assert session.get(User, alice.id).overall_total_points == 42
    prediction = session.exec(select(Prediction).where(Prediction.user_id == alice.id)).one()
    assert prediction.points_earned_for_this_match == 2


def test_score_override_accepts_negative_scores(client, session, space, admin_headers):
    alice = create_user(session, space, "alice")

    response = client.put(f"/api/admin/users/{alice.id}/score", json={"newScore": -7}, headers=admin_headers)

    assert response.status_code == 200
    assert session.get(User, alice.id).overall_total_points == -7


def test_score_override_is_scoped_to_space(client, session, space, admin_headers):
    other = create_space(session, "Rivals", "ZZZ999")
    zed = create_user(session, other, "zed", points=3)

    response = client.put(f"/api/admin/users/{zed.id}/score", json={"newScore": 0}, headers=admin_headers)

    assert response.status_code == 404
    assert session.get(User, zed.id).overall_total_points == 3


def test_score_override_requires_admin(client, session, space):
    alice = create_user(session, space, "alice")

    response = client.put(
        f"/api/admin/users/{alice.id}/score",
        json={"newScore": 100},
        headers=bearer(session, space, alice)
    )

    assert response.status_code == 403


def test_score_override_body_is_validated(client, session, space, admin_headers):
    alice = create_user(session, space, "alice")

    response = client.put(f"/api/admin/users/{alice.id}/score", json={"newScore": "lots"}, headers=admin_headers)

    assert response.status_code == 422


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
