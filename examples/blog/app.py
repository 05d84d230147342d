"""Blog API — sessions, per-route middleware, static files, and uploads.

Demonstrates:
- A static home page served from ``public/`` (``GET /`` -> ``index.html``)
- Cookie sessions with an ``authenticate`` middleware
- Route-level middleware (``/api/user``) and method-level middleware
  (``POST /api/posts``, ``DELETE /api/logout``)
- JSON request bodies and raw uploads via ``request.file``
- Request timeouts and access logging

Run:
    cd examples/blog && python app.py
"""

import logging
import secrets
from http.cookies import SimpleCookie
from pathlib import Path
from typing import Any

from switchyard import Router
from switchyard.middleware.protocol import Next

BASE_DIR = Path(__file__).parent
UPLOAD_PATH = BASE_DIR / "image.png"
PORT = 3000

logger = logging.getLogger("blog")

# token -> user id
SESSIONS: dict[str, int] = {}

USERS: list[dict[str, Any]] = [
    {"id": 1, "name": "Ahnaf Hasan", "username": "ahnaf", "password": "string"},
    {"id": 2, "name": "Hasan Shifat", "username": "shifat", "password": "string"},
    {"id": 3, "name": "John Doe", "username": "john", "password": "string"},
]

POSTS: list[dict[str, Any]] = [
    {
        "id": 1,
        "title": "This is a post title",
        "body": "Lorem Ipsum is simply dummy text of the printing and typesetting industry...",
        "userId": 1,
    },
]

router = Router(enable_logging=True, timeout=5000)


def _find_user(user_id: int) -> dict[str, Any] | None:
    return next((user for user in USERS if user["id"] == user_id), None)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


async def authenticate(request, response, next: Next) -> None:
    """Resolve the session cookie to ``request.state["user_id"]`` or reply 401."""
    cookie = SimpleCookie(request.headers.get("cookie", ""))
    morsel = cookie.get("token")
    user_id = SESSIONS.get(morsel.value) if morsel is not None else None
    if user_id is None:
        await response.status(401).json({"error": "Unauthorized"})
        return
    request.state["user_id"] = user_id
    await next()


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def upload(request, response) -> None:
    """Save the raw request body (e.g. an image) to disk."""
    if request.file is None:
        await response.status(400).json({"error": "Send the file as the raw request body"})
        return
    try:
        await request.file.save(UPLOAD_PATH)
    except OSError:
        logger.exception("Error writing upload to %s", UPLOAD_PATH)
        await response.status(500).json({"error": "Internal Server Error"})
        return
    await response.status(200).json({"message": "File uploaded successfully"})


async def login(request, response) -> None:
    body = request.body if isinstance(request.body, dict) else {}
    user = next((u for u in USERS if u["username"] == body.get("username")), None)
    if user is None or user["password"] != body.get("password"):
        await response.status(401).json({"error": "Invalid username or password"})
        return

    token = secrets.token_hex(16)
    SESSIONS[token] = user["id"]
    response.set_header("Set-Cookie", f"token={token}; Path=/; HttpOnly")
    await response.status(200).json({"message": "Logged in successfully!"})


async def logout(request, response) -> None:
    user_id = request.state["user_id"]
    for token in [t for t, uid in SESSIONS.items() if uid == user_id]:
        del SESSIONS[token]
    response.set_header(
        "Set-Cookie", "token=deleted; Path=/; Expires=Thu, 01 Jan 1970 00:00:00 GMT"
    )
    await response.status(200).json({"message": "Logged out successfully!"})


async def get_user(request, response) -> None:
    user = _find_user(request.state["user_id"])
    assert user is not None
    await response.json({"username": user["username"], "name": user["name"]})


async def update_user(request, response) -> None:
    user = _find_user(request.state["user_id"])
    assert user is not None
    body = request.body if isinstance(request.body, dict) else {}
    user["username"] = body.get("username", user["username"])
    user["name"] = body.get("name", user["name"])
    if body.get("password"):
        user["password"] = body["password"]
    await response.status(200).json({"username": user["username"], "name": user["name"]})


async def list_posts(request, response) -> None:
    posts = []
    for post in POSTS:
        author = _find_user(post["userId"])
        posts.append({**post, "author": author["name"] if author else None})
    await response.status(200).json(posts)


async def create_post(request, response) -> None:
    body = request.body if isinstance(request.body, dict) else {}
    post = {
        "id": len(POSTS) + 1,
        "title": body.get("title"),
        "body": body.get("body"),
        "userId": request.state["user_id"],
    }
    POSTS.insert(0, post)
    await response.status(201).json(post)


async def post_detail(request, response) -> None:
    post_id = request.params["id"]
    post = next((p for p in POSTS if str(p["id"]) == post_id), None)
    if post is None:
        await response.status(404).json({"error": f"No post {post_id}"})
        return
    await response.json(post)


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

home = router.route("/")
home.send_static(BASE_DIR / "public")
home.post(upload)

router.route("/api/login").post(login)
router.route("/api/logout").delete(authenticate, logout)
router.route("/api/user").use(authenticate).get(get_user).put(update_user)
router.route("/api/posts").get(list_posts).post(authenticate, create_post)
router.route("/api/posts/:id").get(post_detail)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    router.listen(PORT, lambda: print("Server listening on port", PORT))
