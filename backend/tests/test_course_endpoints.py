# backend/tests/test_course_endpoints.py
"""
课程与章节接口测试：所有权校验、可见性和删除时的级联规则
"""
from app.models.course import Chapter, Course, CourseEnrollment
from app.models.quiz import Question, Quiz, UserQuizStats
from app.models.user import UserRole
from app.models.video import Video
from factories import API, auth_headers, make_category, make_chapter, make_course, make_user, make_video

QUESTIONS = [{"text": "2 + 2 = ?", "answers": [{"text": "4", "is_correct": True}, {"text": "5"}]}]


class TestCourses:

    def test_creator_creates_course(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        category = make_category(db, "Math")

        response = client.post(
            f"{API}/courses",
            json={"title": "Algebra", "category_id": category.id, "published": True},
            headers=auth_headers(creator)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["creator_id"] == creator.id
        assert data["category_id"] == category.id

    def test_learner_cannot_create_course(self, client, db):
        learner = make_user(db, "learner@example.com")

        response = client.post(f"{API}/courses", json={"title": "Nope"}, headers=auth_headers(learner))

        assert response.status_code == 403

    def test_unknown_category(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)

        response = client.post(f"{API}/courses", json={"title": "X", "category_id": 77}, headers=auth_headers(creator))

        assert response.status_code == 404

    def test_list_only_published(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        make_course(db, creator, title="Live Algebra", published=True)
        make_course(db, creator, title="Draft Algebra", published=False)
        make_course(db, creator, title="Live Physics", published=True)

        everything = client.get(f"{API}/courses").json()["data"]
        searched = client.get(f"{API}/courses?q=algebra").json()["data"]

        assert sorted(c["title"] for c in everything) == ["Live Algebra", "Live Physics"]
        assert [c["title"] for c in searched] == ["Live Algebra"]

    def test_draft_visible_only_to_owner(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        other = make_user(db, "other@example.com")
        admin = make_user(db, "admin@example.com", role=UserRole.ADMIN)
        draft = make_course(db, creator, published=False)

        assert client.get(f"{API}/courses/{draft.id}").status_code == 404
        assert client.get(f"{API}/courses/{draft.id}", headers=auth_headers(other)).status_code == 404
        assert client.get(f"{API}/courses/{draft.id}", headers=auth_headers(creator)).status_code == 200
        assert client.get(f"{API}/courses/{draft.id}", headers=auth_headers(admin)).status_code == 200

    def test_mine(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        make_course(db, creator, title="Mine", published=False)

        response = client.get(f"{API}/courses/mine", headers=auth_headers(creator))

        assert [c["title"] for c in response.json()["data"]] == ["Mine"]

    def test_only_owner_updates(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        intruder = make_user(db, "intruder@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)

        denied = client.patch(f"{API}/courses/{course.id}", json={"title": "Hacked"}, headers=auth_headers(intruder))
        allowed = client.patch(f"{API}/courses/{course.id}", json={"title": "Renamed"}, headers=auth_headers(creator))

        assert denied.status_code == 403
        assert allowed.json()["data"]["title"] == "Renamed"

    def test_null_for_required_fields_is_rejected(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator, title="Keep me")
        course.description = "Old"
        db.commit()
        headers = auth_headers(creator)

        no_title = client.patch(f"{API}/courses/{course.id}", json={"title": None}, headers=headers)
        no_flag = client.patch(f"{API}/courses/{course.id}", json={"published": None}, headers=headers)
        cleared = client.patch(f"{API}/courses/{course.id}", json={"description": None}, headers=headers)

        assert no_title.status_code == 400
        assert no_title.json()["message"].startswith("title")
        assert no_flag.status_code == 400
        assert cleared.status_code == 200
        assert cleared.json()["data"]["title"] == "Keep me"
        assert cleared.json()["data"]["description"] is None

    def test_admin_can_delete_any_course(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        admin = make_user(db, "admin@example.com", role=UserRole.ADMIN)
        course = make_course(db, creator)

        response = client.delete(f"{API}/courses/{course.id}", headers=auth_headers(admin))

        assert response.status_code == 200


class TestChapters:

    def test_chapters_are_ordered(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)
        headers = auth_headers(creator)

        client.post(f"{API}/courses/{course.id}/chapters", json={"title": "Second", "order": 2}, headers=headers)
        client.post(f"{API}/courses/{course.id}/chapters", json={"title": "First", "order": 1}, headers=headers)

        chapters = client.get(f"{API}/courses/{course.id}").json()["data"]["chapters"]
        assert [c["title"] for c in chapters] == ["First", "Second"]

    def test_duplicate_order_is_conflict(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)
        headers = auth_headers(creator)

        client.post(f"{API}/courses/{course.id}/chapters", json={"title": "A", "order": 1}, headers=headers)
        response = client.post(f"{API}/courses/{course.id}/chapters", json={"title": "B", "order": 1}, headers=headers)

        assert response.status_code == 409

    def test_order_must_be_positive(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)

        response = client.post(
            f"{API}/courses/{course.id}/chapters", json={"title": "A", "order": 0}, headers=auth_headers(creator)
        )

        assert response.status_code == 400

    def test_delete_chapter_detaches_videos(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)
        chapter = make_chapter(db, course)
        video = make_video(db, creator, course_id=course.id)
        video.chapter_id = chapter.id
        db.commit()

        response = client.delete(f"{API}/courses/chapters/{chapter.id}", headers=auth_headers(creator))

        assert response.status_code == 200
        db.expire_all()
        assert db.get(Chapter, chapter.id) is None
        assert db.get(Video, video.id).chapter_id is None
        assert db.get(Video, video.id).course_id == course.id


class TestCourseDeletionCascade:

    def test_delete_course_cascades_and_keeps_videos(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        learner = make_user(db, "learner@example.com")
        course = make_course(db, creator)
        chapter = make_chapter(db, course)
        video = make_video(db, creator, course_id=course.id)
        headers = auth_headers(creator)

        course_quiz = client.post(
            f"{API}/quizzes", json={"course_id": course.id, "questions": QUESTIONS}, headers=headers
        ).json()["data"]
        client.post(f"{API}/quizzes", json={"chapter_id": chapter.id, "questions": QUESTIONS}, headers=headers)
        client.post(f"{API}/quizzes/{course_quiz['id']}/attempts", json={"score": 80}, headers=auth_headers(learner))

        response = client.delete(f"{API}/courses/{course.id}", headers=headers)

        assert response.status_code == 200
        db.expire_all()
        assert db.get(Course, course.id) is None
        assert db.query(Chapter).count() == 0
        assert db.query(Quiz).count() == 0
        assert db.query(Question).count() == 0
        assert db.query(UserQuizStats).count() == 0
        kept = db.get(Video, video.id)
        assert kept is not None
        assert kept.course_id is None


class TestEnrollment:

    def test_enroll_is_idempotent(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        learner = make_user(db, "learner@example.com")
        course = make_course(db, creator)
        headers = auth_headers(learner)

        first = client.post(f"{API}/courses/{course.id}/enroll", headers=headers)
        second = client.post(f"{API}/courses/{course.id}/enroll", headers=headers)

        assert first.status_code == 200
        assert first.json()["data"]["course"]["id"] == course.id
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert db.query(CourseEnrollment).count() == 1

    def test_enrollment_count_on_detail(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)
        for email in ("a@example.com", "b@example.com"):
            client.post(f"{API}/courses/{course.id}/enroll", headers=auth_headers(make_user(db, email)))

        detail = client.get(f"{API}/courses/{course.id}").json()["data"]

        assert detail["enrollment_count"] == 2

    def test_cannot_enroll_in_hidden_draft(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        learner = make_user(db, "learner@example.com")
        draft = make_course(db, creator, published=False)

        assert client.post(f"{API}/courses/{draft.id}/enroll", headers=auth_headers(learner)).status_code == 404
        assert client.post(f"{API}/courses/4242/enroll", headers=auth_headers(learner)).status_code == 404

    def test_enroll_requires_auth(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        course = make_course(db, creator)

        assert client.post(f"{API}/courses/{course.id}/enroll").status_code == 401

    def test_enrolled_lists_published_courses_newest_first(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        learner = make_user(db, "learner@example.com")
        first = make_course(db, creator, title="First")
        second = make_course(db, creator, title="Second")
        withdrawn = make_course(db, creator, title="Withdrawn")
        headers = auth_headers(learner)
        for course in (first, second, withdrawn):
            client.post(f"{API}/courses/{course.id}/enroll", headers=headers)
        withdrawn.published = False
        db.commit()

        response = client.get(f"{API}/courses/enrolled", headers=headers)

        assert response.status_code == 200
        assert [e["course"]["title"] for e in response.json()["data"]] == ["Second", "First"]

    def test_delete_course_removes_enrollments(self, client, db):
        creator = make_user(db, "creator@example.com", role=UserRole.CREATOR)
        learner = make_user(db, "learner@example.com")
        course = make_course(db, creator)
        client.post(f"{API}/courses/{course.id}/enroll", headers=auth_headers(learner))

        response = client.delete(f"{API}/courses/{course.id}", headers=auth_headers(creator))

        assert response.status_code == 200
        db.expire_all()
        assert db.query(CourseEnrollment).count() == 0
