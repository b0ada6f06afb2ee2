"""Tests for post read endpoints."""

from fastapi.testclient import TestClient

from services.posts.shadow_store import ShadowUserStore


class TestGetPost:
    """Test cases for GET /api/v1/posts/{post_id} endpoint."""

    def test_get_post_with_creator(
        self, client: TestClient, store: ShadowUserStore, signup_event, create_post
    ):
        """Test a post reports its creator name from the shadow table."""
        store.apply_signup(signup_event())
        post = create_post()

        response = client.get(f"/api/v1/posts/{post.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == post.id
        assert data["user_id"] == "user-1"
        assert data["creator_name"] == "alice"
        assert data["view_count"] == 0

    def test_get_post_dangling_creator(self, client: TestClient, create_post):
        """Test a post whose creator is unknown reports a null creator name."""
        post = create_post(user_id="ghost")

        response = client.get(f"/api/v1/posts/{post.id}")

        assert response.status_code == 200
        assert response.json()["creator_name"] is None

    def test_get_unknown_post(self, client: TestClient):
        """Test fetching a missing post returns 404."""
        response = client.get("/api/v1/posts/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Post not found"


class TestListPosts:
    """Test cases for post listing endpoints."""

    def test_latest_posts_newest_first(self, client: TestClient, create_post):
        """Test latest posts are ordered newest first and limited."""
        create_post(title="old", minutes=0)
        create_post(title="mid", minutes=1)
        create_post(title="new", minutes=2)

        response = client.get("/api/v1/posts/latest", params={"limit": 2})

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["new", "mid"]

    def test_posts_by_creator(
        self, client: TestClient, store: ShadowUserStore, signup_event, create_post
    ):
        """Test filtering posts by creator name."""
        store.apply_signup(signup_event(user_id="user-1", name="alice"))
        store.apply_signup(signup_event(user_id="user-2", email="b@b.com", name="bob"))
        create_post(title="by alice", user_id="user-1")
        create_post(title="by bob", user_id="user-2")

        response = client.get("/api/v1/posts/creator", params={"name": "bob"})

        assert response.status_code == 200
        titles = [p["title"] for p in response.json()]
        assert titles == ["by bob"]

    def test_posts_by_creator_requires_name(self, client: TestClient):
        """Test the creator filter needs a name."""
        response = client.get("/api/v1/posts/creator")

        assert response.status_code == 400

    def test_search_posts(self, client: TestClient, create_post):
        """Test searching matches title or content case-insensitively."""
        create_post(title="Rabbit queues", content="about brokers")
        create_post(title="Gardening", content="growing CARROTS for the rabbit")
        create_post(title="Cooking", content="pasta")

        response = client.get("/api/v1/posts/search", params={"query": "rabbit"})

        assert response.status_code == 200
        titles = {p["title"] for p in response.json()}
        assert titles == {"Rabbit queues", "Gardening"}

    def test_paginated_posts(self, client: TestClient, create_post):
        """Test the paginated listing."""
        for i in range(5):
            create_post(title=f"post {i}", minutes=i)

        response = client.get("/api/v1/posts", params={"page": 2, "page_size": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["page"] == 2
        assert data["page_size"] == 2
        assert data["total_pages"] == 3
        assert [p["title"] for p in data["items"]] == ["post 2", "post 1"]

    def test_paginated_posts_empty(self, client: TestClient):
        """Test the paginated listing with no posts."""
        response = client.get("/api/v1/posts")

        assert response.status_code == 200
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["total_pages"] == 1


class TestIncrementViews:
    """Test cases for PATCH /api/v1/posts/{post_id}/view endpoint."""

    def test_increment_views(self, client: TestClient, create_post):
        """Test each call increments the view count by one."""
        post = create_post()

        client.patch(f"/api/v1/posts/{post.id}/view")
        response = client.patch(f"/api/v1/posts/{post.id}/view")

        assert response.status_code == 200
        assert response.json() == {"id": post.id, "view_count": 2}

    def test_increment_views_unknown_post(self, client: TestClient):
        """Test incrementing a missing post returns 404."""
        response = client.patch("/api/v1/posts/missing/view")

        assert response.status_code == 404
