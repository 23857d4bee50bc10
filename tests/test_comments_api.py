from conftest import auth_header, submit


def comments_url(submission_id):
    return f"/submissions/{submission_id}/comments"


def test_comments_require_full_access(client, lab1, alice, bob):
    submission_id = submit(client, alice, lab1)["submission_id"]

    r = client.get(comments_url(submission_id))
    assert r.status_code == 401
    assert r.json()["detail"]["required_action"] == "login"

    r = client.post(comments_url(submission_id), headers=auth_header(bob.student_id), json={"content": "hi"})
    assert r.status_code == 403
    assert r.json()["detail"]["required_action"] == "submit_solution"

    submit(client, bob, lab1)
    r = client.post(comments_url(submission_id), headers=auth_header(bob.student_id), json={"content": "hi"})
    assert r.status_code == 201
    assert r.json()["is_mine"] is True
    assert r.json()["author"]["name"] == "Bob Brown"


def test_comment_content_is_censored(client, lab1, alice):
    submission_id = submit(client, alice, lab1)["submission_id"]

    r = client.post(
        comments_url(submission_id),
        headers=auth_header(alice.student_id),
        json={"content": "What an IDIOT mistake"},
    )
    assert r.status_code == 201
    assert r.json()["content"] == "What an ***** mistake"
    assert r.json()["is_censored"] is True


def test_comment_validation(client, lab1, alice):
    submission_id = submit(client, alice, lab1)["submission_id"]
    headers = auth_header(alice.student_id)

    assert client.post(comments_url(submission_id), headers=headers, json={"content": "   "}).status_code == 400
    assert client.post(comments_url(submission_id), headers=headers, json={"content": "x" * 5001}).status_code == 400


def test_anonymous_comment_hidden_from_others(client, lab1, alice, bob):
    submission_id = submit(client, alice, lab1)["submission_id"]
    submit(client, bob, lab1)

    client.post(
        comments_url(submission_id),
        headers=auth_header(bob.student_id),
        json={"content": "Nice recursion", "is_anonymous": True},
    )

    seen_by_alice = client.get(comments_url(submission_id), headers=auth_header(alice.student_id)).json()
    assert seen_by_alice[0]["author"] == {"student_id": None, "name": "Anonymous"}
    assert seen_by_alice[0]["is_mine"] is False

    seen_by_bob = client.get(comments_url(submission_id), headers=auth_header(bob.student_id)).json()
    assert seen_by_bob[0]["author"]["name"] == "Bob Brown"


def test_auto_log_keeps_anonymity_it_was_written_with(client, lab1, alice, bob):
    submission_id = submit(client, alice, lab1, is_anonymous=True)["submission_id"]
    submit(client, bob, lab1)
    alice_headers = auth_header(alice.student_id)

    client.post(
        f"/submissions/{submission_id}/files",
        headers=alice_headers,
        json={"files": [{"filename": "notes.txt", "content": "todo"}]},
    )
    r = client.patch(f"/submissions/{submission_id}/anonymity", headers=alice_headers, json={"is_anonymous": False})
    assert r.status_code == 200
    assert r.json()["is_anonymous"] is False

    comments = client.get(comments_url(submission_id), headers=auth_header(bob.student_id)).json()
    assert len(comments) == 1
    log = comments[0]
    assert log["is_auto_log"] is True
    assert log["author"]["name"] == "Anonymous"
    assert log["content"] == "added: notes.txt (auto-log)"
    assert "Alice" not in log["content"]

    # The entry cannot be flipped by hand either
    r = client.patch(
        f"{comments_url(submission_id)}/{log['comment_id']}",
        headers=alice_headers,
        json={"is_anonymous": False},
    )
    assert r.status_code == 403


def test_author_can_toggle_comment_anonymity(client, lab1, alice, bob):
    submission_id = submit(client, alice, lab1)["submission_id"]
    submit(client, bob, lab1)
    comment = client.post(
        comments_url(submission_id), headers=auth_header(bob.student_id), json={"content": "hello"}
    ).json()

    url = f"{comments_url(submission_id)}/{comment['comment_id']}"
    assert client.patch(url, headers=auth_header(alice.student_id), json={"is_anonymous": True}).status_code == 403

    r = client.patch(url, headers=auth_header(bob.student_id), json={"is_anonymous": True})
    assert r.status_code == 200
    assert r.json()["is_anonymous"] is True


def test_delete_comment_by_author_or_admin(client, lab1, alice, bob, admin):
    submission_id = submit(client, alice, lab1)["submission_id"]
    submit(client, bob, lab1)
    bob_headers = auth_header(bob.student_id)

    first = client.post(comments_url(submission_id), headers=bob_headers, json={"content": "one"}).json()
    second = client.post(comments_url(submission_id), headers=bob_headers, json={"content": "two"}).json()

    r = client.delete(f"{comments_url(submission_id)}/{first['comment_id']}", headers=auth_header(alice.student_id))
    assert r.status_code == 403

    assert client.delete(f"{comments_url(submission_id)}/{first['comment_id']}", headers=bob_headers).status_code == 200
    r = client.delete(f"{comments_url(submission_id)}/{second['comment_id']}", headers=auth_header(admin.student_id))
    assert r.status_code == 200

    assert client.get(comments_url(submission_id), headers=bob_headers).json() == []


def test_admin_reveal_is_the_only_way_to_unmask(client, lab1, alice, bob, admin):
    submission_id = submit(client, alice, lab1, is_anonymous=True)["submission_id"]

    r = client.get(f"/submissions/{submission_id}", headers=auth_header(admin.student_id))
    assert r.json()["submission"]["author"]["name"] == "Anonymous"

    r = client.post(f"/admin/submissions/{submission_id}/reveal-author", headers=auth_header(bob.student_id))
    assert r.status_code == 403

    r = client.post(f"/admin/submissions/{submission_id}/reveal-author", headers=auth_header(admin.student_id))
    assert r.status_code == 200
    assert r.json() == {"student_id": alice.student_id, "name": "Alice Adams", "email": "alice@example.com"}


def test_admin_reveal_comment_author(client, lab1, alice, admin):
    submission_id = submit(client, alice, lab1)["submission_id"]
    comment = client.post(
        comments_url(submission_id),
        headers=auth_header(alice.student_id),
        json={"content": "note to self", "is_anonymous": True},
    ).json()

    r = client.post(f"/admin/comments/{comment['comment_id']}/reveal-author", headers=auth_header(admin.student_id))
    assert r.status_code == 200
    assert r.json()["name"] == "Alice Adams"

    assert client.post("/admin/comments/999/reveal-author", headers=auth_header(admin.student_id)).status_code == 404
