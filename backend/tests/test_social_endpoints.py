# backend/tests/test_social_endpoints.py
"""
关注、分类偏好、个人资料和用户搜索接口测试
"""
from app.models.category import UserCategoryPreference
from app.models.follow import Follow
from app.models.user import UserRole
from factories import API, auth_headers, make_category, make_course, make_user, make_video


class TestFollows:

    def test_follow_and_unfollow(self, client, db):
        alice = make_user(db, "alice@example.com", name="Alice")
        bob = make_user(db, "bob@example.com", name="Bob")

        response = client.post(f"{API}/follows", json={"userId": bob.id}, headers=auth_headers(alice))
        assert response.status_code == 201
        assert response.json()["data"]["followee_id"] == bob.id

        following = client.get(f"{API}/follows/following", headers=auth_headers(alice)).json()["data"]
        followers = client.get(f"{API}/follows/followers", headers=auth_headers(bob)).json()["data"]
        assert [u["id"] for u in following] == [bob.id]
        assert [u["id"] for u in followers] == [alice.id]

        response = client.request("DELETE", f"{API}/follows", json={"userId": bob.id}, headers=auth_headers(alice))
        assert response.status_code == 200
        assert db.query(Follow).count() == 0

    def test_cannot_follow_self(self, client, db):
        alice = make_user(db, "alice@example.com")

        response = client.post(f"{API}/follows", json={"userId": alice.id}, headers=auth_headers(alice))

        assert response.status_code == 400

    def test_follow_unknown_user(self, client, db):
        alice = make_user(db, "alice@example.com")

        response = client.post(f"{API}/follows", json={"userId": 4242}, headers=auth_headers(alice))

        assert response.status_code == 404

    def test_follow_twice_is_conflict(self, client, db):
        alice = make_user(db, "alice@example.com")
        bob = make_user(db, "bob@example.com")
        headers = auth_headers(alice)

        client.post(f"{API}/follows", json={"userId": bob.id}, headers=headers)
        response = client.post(f"{API}/follows", json={"userId": bob.id}, headers=headers)

        assert response.status_code == 409
        assert db.query(Follow).count() == 1

    def test_unfollow_without_edge(self, client, db):
        alice = make_user(db, "alice@example.com")
        bob = make_user(db, "bob@example.com")

        response = client.request("DELETE", f"{API}/follows", json={"userId": bob.id}, headers=auth_headers(alice))

        assert response.status_code == 404

    def test_follow_requires_auth(self, client):
        response = client.post(f"{API}/follows", json={"userId": 1})

        assert response.status_code == 401


class TestCategoriesAndPreferences:

    def test_list_categories_sorted_by_name(self, client, db):
        make_category(db, "Physics")
        make_category(db, "Biology")

        response = client.get(f"{API}/categories")

        assert [c["name"] for c in response.json()["data"]] == ["Biology", "Physics"]

    def test_admin_creates_category_with_slug(self, client, db):
        admin = make_user(db, "admin@example.com", role=UserRole.ADMIN)

        response = client.post(f"{API}/categories", json={"name": "Computer Science"}, headers=auth_headers(admin))
        duplicate = client.post(f"{API}/categories", json={"name": "Computer Science"}, headers=auth_headers(admin))

        assert response.status_code == 201
        assert response.json()["data"]["slug"] == "computer-science"
        assert duplicate.status_code == 409

    def test_learner_cannot_create_category(self, client, db):
        learner = make_user(db, "learner@example.com")

        response = client.post(f"{API}/categories", json={"name": "Art"}, headers=auth_headers(learner))

        assert response.status_code == 403

    def test_replace_preferences(self, client, db):
        user = make_user(db, "user@example.com")
        a, b, c = make_category(db, "A"), make_category(db, "B"), make_category(db, "C")
        headers = auth_headers(user)

        client.post(f"{API}/categories/prefs", json={"categoryIds": [a.id, b.id]}, headers=headers)
        response = client.post(f"{API}/categories/prefs", json={"categoryIds": [c.id, c.id]}, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["category_ids"] == [c.id]
        current = client.get(f"{API}/categories/prefs", headers=headers).json()["data"]
        assert current["category_ids"] == [c.id]

    def test_unknown_category_keeps_previous_preferences(self, client, db):
        user = make_user(db, "user@example.com")
        a = make_category(db, "A")
        headers = auth_headers(user)
        client.post(f"{API}/categories/prefs", json={"categoryIds": [a.id]}, headers=headers)

        response = client.post(f"{API}/categories/prefs", json={"categoryIds": [a.id, 999]}, headers=headers)

        assert response.status_code == 404
        db.expire_all()
        rows = db.query(UserCategoryPreference).filter(UserCategoryPreference.user_id == user.id).all()
        assert [r.category_id for r in rows] == [a.id]

    def test_empty_list_clears_preferences(self, client, db):
        user = make_user(db, "user@example.com")
        a = make_category(db, "A")
        headers = auth_headers(user)
        client.post(f"{API}/categories/prefs", json={"categoryIds": [a.id]}, headers=headers)

        response = client.post(f"{API}/categories/prefs", json={"categoryIds": []}, headers=headers)

        assert response.json()["data"]["category_ids"] == []


class TestProfile:

    def test_get_and_patch_me(self, client, db):
        user = make_user(db, "user@example.com", name="Before")
        headers = auth_headers(user)

        response = client.patch(f"{API}/profile/me", json={"bio": "Hello"}, headers=headers)

        assert response.status_code == 200
        data = client.get(f"{API}/profile/me", headers=headers).json()["data"]
        assert data["name"] == "Before"
        assert data["bio"] == "Hello"

    def test_put_profile_replaces_preferences(self, client, db):
        user = make_user(db, "user@example.com")
        a = make_category(db, "A")
        headers = auth_headers(user)

        response = client.put(
            f"{API}/profile",
            json={"name": "After", "bio": "Bio", "preferences": [a.id]},
            headers=headers
        )

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "After"
        prefs = client.get(f"{API}/categories/prefs", headers=headers).json()["data"]
        assert prefs["category_ids"] == [a.id]

    def test_patch_null_name_is_rejected(self, client, db):
        user = make_user(db, "user@example.com", name="Before")
        headers = auth_headers(user)

        response = client.patch(f"{API}/profile/me", json={"name": None}, headers=headers)

        assert response.status_code == 400
        assert client.get(f"{API}/profile/me", headers=headers).json()["data"]["name"] == "Before"

    def test_rejected_put_leaves_preferences_unchanged(self, client, db):
        user = make_user(db, "user@example.com", name="Before")
        a = make_category(db, "A")
        b = make_category(db, "B")
        headers = auth_headers(user)
        client.post(f"{API}/categories/prefs", json={"categoryIds": [a.id]}, headers=headers)

        response = client.put(f"{API}/profile", json={"name": None, "preferences": [b.id]}, headers=headers)

        assert response.status_code == 400
        prefs = client.get(f"{API}/categories/prefs", headers=headers).json()["data"]
        assert prefs["category_ids"] == [a.id]

    def test_put_profile_commits_preferences_with_profile(self, client, db):
        user = make_user(db, "user@example.com")
        a = make_category(db, "A")

        response = client.put(f"{API}/profile", json={"preferences": [a.id]}, headers=auth_headers(user))

        assert response.status_code == 200
        db.expire_all()
        rows = db.query(UserCategoryPreference).filter(UserCategoryPreference.user_id == user.id).all()
        assert [row.category_id for row in rows] == [a.id]

    def test_put_profile_requires_auth(self, client):
        assert client.put(f"{API}/profile", json={"name": "x"}).status_code == 401

    def test_my_videos_and_courses(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        make_course(db, creator, title="Draft", published=False)
        make_video(db, creator, title="one")

        videos = client.get(f"{API}/profile/videos", headers=auth_headers(creator)).json()["data"]
        courses = client.get(f"{API}/profile/courses", headers=auth_headers(creator)).json()["data"]

        assert [v["title"] for v in videos] == ["one"]
        assert [c["title"] for c in courses] == ["Draft"]

    def test_pagination_limit_is_bounded(self, client, db):
        user = make_user(db, "user@example.com")

        response = client.get(f"{API}/profile/videos?limit=1000", headers=auth_headers(user))

        assert response.status_code == 400


class TestUsers:

    def test_search(self, client, db):
        me = make_user(db, "me@example.com", name="Me")
        make_user(db, "grace@example.com", name="Grace Hopper", username="ghopper")
        make_user(db, "alan@example.com", name="Alan Turing")

        response = client.get(f"{API}/users/search?q=hop", headers=auth_headers(me))

        assert [u["name"] for u in response.json()["data"]] == ["Grace Hopper"]

    def test_public_profile(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        fan = make_user(db, "fan@example.com")
        make_course(db, creator, title="Public", published=True)
        make_course(db, creator, title="Hidden", published=False)
        make_video(db, creator, title="clip")
        client.post(f"{API}/follows", json={"userId": creator.id}, headers=auth_headers(fan))

        data = client.get(f"{API}/users/{creator.id}").json()["data"]

        assert data["follower_count"] == 1
        assert data["following_count"] == 0
        assert [c["title"] for c in data["courses"]] == ["Public"]
        assert [v["title"] for v in data["videos"]] == ["clip"]
        assert "email" not in data

    def test_unknown_user(self, client):
        assert client.get(f"{API}/users/999").status_code == 404

    def test_role_update_is_admin_only(self, client, db):
        admin = make_user(db, "admin@example.com", role=UserRole.ADMIN)
        user = make_user(db, "user@example.com")

        denied = client.patch(f"{API}/users/{user.id}/role", json={"role": "creator"}, headers=auth_headers(user))
        allowed = client.patch(f"{API}/users/{user.id}/role", json={"role": "creator"}, headers=auth_headers(admin))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["data"]["role"] == "creator"
