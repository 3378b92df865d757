"""
=============================================================================
USER HANDLERS
=============================================================================

The CRUD endpoints. Each handler composes the store, the validator and a
response helper, and deals with its own expected failures:

    GET    /api/users            → 200 [users]
    GET    /api/users/{id:int}   → 200 user            | 404
    POST   /api/users            → 201 user + Location | 400
    PUT    /api/users/{id:int}   → 200 user            | 404 | 400
    DELETE /api/users/{id:int}   → 204                 | 404

Bad payloads (400) and unknown ids (404) never leave the handler as
exceptions. Anything else a handler raises is a genuine fault and is left
for ErrorHandlingMiddleware.

=============================================================================
"""

import logging
from typing import Optional

from ..http import (
    HTTPRequest,
    HTTPResponse,
    HTTPParseError,
    Router,
    ok,
    created,
    no_content,
    bad_request,
    validation_failed,
    not_found,
)
from .models import PayloadError, UserPayload
from .store import UserStore
from .validation import validate_user


logger = logging.getLogger(__name__)

HOME_PAGE_TEXT = "Hi, this is the home page"


def home(request: HTTPRequest) -> HTTPResponse:
    """GET /: public greeting, never touches the store."""
    return ok(HOME_PAGE_TEXT)


class UserHandlers:
    """
    Request handlers bound to one UserStore.

    Usage:
        handlers = UserHandlers(UserStore())
        handlers.register(router)
    """

    def __init__(self, store: UserStore):
        self.store = store
        self.router: Optional[Router] = None

    def register(self, router: Router) -> Router:
        """Attach the home page and the five user routes to a router."""
        self.router = router
        router.get("/", name="home")(home)
        router.get("/api/users", name="list_users")(self.list_users)
        router.get("/api/users/{id:int}", name="get_user")(self.get_user)
        router.post("/api/users", name="create_user")(self.create_user)
        router.put("/api/users/{id:int}", name="update_user")(self.update_user)
        router.delete("/api/users/{id:int}", name="delete_user")(self.delete_user)
        return router

    # =========================================================================
    # READ
    # =========================================================================

    def list_users(self, request: HTTPRequest) -> HTTPResponse:
        return ok([user.to_dict() for user in self.store.all()])

    def get_user(self, request: HTTPRequest) -> HTTPResponse:
        user = self.store.get(request.path_params["id"])
        if user is None:
            return not_found()
        return ok(user.to_dict())

    # =========================================================================
    # WRITE
    # =========================================================================

    def create_user(self, request: HTTPRequest) -> HTTPResponse:
        """
        POST /api/users

        The client's id, if any, is ignored; the store assigns one.
        """
        try:
            payload = self._read_payload(request)
        except (HTTPParseError, PayloadError) as e:
            return bad_request(str(e))

        result = validate_user(payload)
        if not result.is_valid:
            return validation_failed(result.errors)

        user = self.store.create(payload)
        logger.info(f"Created user {user.id}")
        return created(user.to_dict(), location=self.router.url_for("get_user", id=user.id))

    def update_user(self, request: HTTPRequest) -> HTTPResponse:
        """
        PUT /api/users/{id:int}

        Unknown ids are answered with 404 before the body is even looked
        at; PUT never creates users.
        """
        user_id = request.path_params["id"]
        if self.store.get(user_id) is None:
            return not_found()

        try:
            payload = self._read_payload(request)
        except (HTTPParseError, PayloadError) as e:
            return bad_request(str(e))

        result = validate_user(payload)
        if not result.is_valid:
            return validation_failed(result.errors)

        # None here means a concurrent DELETE won the race
        user = self.store.update(user_id, payload)
        if user is None:
            return not_found()
        return ok(user.to_dict())

    def delete_user(self, request: HTTPRequest) -> HTTPResponse:
        if not self.store.delete(request.path_params["id"]):
            return not_found()
        logger.info(f"Deleted user {request.path_params['id']}")
        return no_content()

    @staticmethod
    def _read_payload(request: HTTPRequest) -> UserPayload:
        data = request.json
        if data is None:
            raise PayloadError("Request body is required.")
        return UserPayload.from_json(data)
