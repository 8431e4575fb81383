from cashmemo.models.user import User


class TestUserRepo:
    def test_create_and_get(self, user_repo):
        created = user_repo.create(User(email="admin@example.com", password_hash="hash"))

        assert created.id is not None
        assert created.email == "admin@example.com"
        assert user_repo.get_by_email("admin@example.com").id == created.id

    def test_get_by_email_not_found(self, user_repo):
        assert user_repo.get_by_email("nobody@example.com") is None

    def test_list_all(self, user_repo):
        user_repo.create(User(email="a@example.com", password_hash="h1"))
        user_repo.create(User(email="b@example.com", password_hash="h2"))
        assert {u.email for u in user_repo.list_all()} == {"a@example.com", "b@example.com"}

    def test_update_password_hash(self, user_repo):
        user_repo.create(User(email="admin@example.com", password_hash="old"))
        user_repo.update_password_hash("admin@example.com", "new")
        assert user_repo.get_by_email("admin@example.com").password_hash == "new"
