"""
API tests for appending comments to a grievance.
"""

from datetime import datetime



class TestComments:
    def test_owner_comments(self, client, create_grievance, student, student_headers):
        created = create_grievance(student_headers)
        resp = client.post(f"/grievances/{created['id']}/comments", json={"text": "Any update?"},
                           headers=student_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        comments = body["data"]["comments"]
        assert len(comments) == 1
        assert comments[0]["text"] == "Any update?"
        assert comments[0]["user_id"] == student.id
        assert comments[0]["user"] == {
            "id": student.id, "name": "Asha Rao", "email": "asha@example.edu", "role": "student",
        }
        assert comments[0]["created_at"]

    def test_comments_strictly_append_in_order(self, client, create_grievance, student, admin,
                                               student_headers, admin_headers):
        created = create_grievance(student_headers)
        url = f"/grievances/{created['id']}/comments"
        posts = [
            ("first", student_headers, student.id),
            ("second", admin_headers, admin.id),
            ("third", student_headers, student.id),
            ("fourth", admin_headers, admin.id),
        ]
        for n, (text, headers, _) in enumerate(posts, start=1):
            data = client.post(url, json={"text": text}, headers=headers).json()["data"]
            assert len(data["comments"]) == n

        comments = client.get(f"/grievances/{created['id']}", headers=admin_headers).json()["data"]["comments"]
        assert [(c["text"], c["user_id"]) for c in comments] == [(t, uid) for t, _, uid in posts]
        assert comments[1]["user"]["role"] == "admin"

    def test_non_owner_cannot_comment(self, client, create_grievance, student_headers, other_headers):
        created = create_grievance(student_headers)
        resp = client.post(f"/grievances/{created['id']}/comments", json={"text": "Me too"},
                           headers=other_headers)
        assert resp.status_code == 403

        data = client.get(f"/grievances/{created['id']}", headers=student_headers).json()["data"]
        assert data["comments"] == []

    def test_comment_on_missing_grievance(self, client, admin_headers):
        resp = client.post("/grievances/9999/comments", json={"text": "hello"}, headers=admin_headers)
        assert resp.status_code == 404

    def test_empty_comment_rejected(self, client, create_grievance, student_headers):
        created = create_grievance(student_headers)
        resp = client.post(f"/grievances/{created['id']}/comments", json={"text": ""}, headers=student_headers)
        assert resp.status_code == 422
        assert resp.json()["success"] is False

    def test_comment_bumps_updated_at(self, client, create_grievance, student_headers, admin_headers):
        created = create_grievance(student_headers)
        data = client.post(f"/grievances/{created['id']}/comments", json={"text": "Checked it"},
                           headers=admin_headers).json()["data"]
        assert data["status"] == "Pending"
        assert datetime.fromisoformat(data["updated_at"]) > datetime.fromisoformat(created["updated_at"])
