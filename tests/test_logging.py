from harmony.core.logging import (
    actor_id_var,
    add_request_context,
    bind_actor,
    bind_request_uid,
    request_context,
    request_id_var,
    request_uid_var,
)


def reset_context():
    for var in (request_id_var, actor_id_var, request_uid_var):
        var.set("")


def test_unset_fields_are_left_out():
    reset_context()
    assert request_context() == {}
    assert add_request_context(None, "info", {"event": "http.start"}) == {"event": "http.start"}


def test_bound_actor_and_uid_reach_every_event():
    reset_context()
    request_id_var.set("req-id")
    bind_actor("user-bob")
    bind_request_uid("abc123")

    event = add_request_context(None, "info", {"event": "request.resolved"})

    assert event == {
        "event": "request.resolved",
        "request_id": "req-id",
        "actor_id": "user-bob",
        "request_uid": "abc123",
    }
    reset_context()


def test_explicit_fields_win_over_context():
    reset_context()
    bind_actor("user-bob")
    event = add_request_context(None, "info", {"event": "link.team_created", "actor_id": "user-alice"})
    assert event["actor_id"] == "user-alice"
    reset_context()
