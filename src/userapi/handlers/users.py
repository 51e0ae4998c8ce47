"""
=============================================================================
USER ROUTE HANDLERS
=============================================================================

    GET    /users       200  [User, ...]
    GET    /users/:id   200  User              404 unknown id
    POST   /users       201  User + Location   (client "id" ignored)
    PUT    /users/:id   200  User              404 unknown id
    DELETE /users/:id   204                    404 unknown id

A non-integer :id or a body that is not a JSON object raises a ClientError
(400). Handlers never catch exceptions; the error boundary renders them.

=============================================================================
"""

import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

from ..errors import InvalidUserId
from ..http.request import HTTPRequest, HTTPParseError
from ..http.response import HTTPResponse, ok, created, no_content, not_found
from ..http.router import Router
from ..store import UserStore


logger = logging.getLogger(__name__)


USER_ID_PATTERN = re.compile(r"-?[0-9]+")


class UserHandlers:
    """
    CRUD handlers bound to one UserStore.

        handlers = UserHandlers(UserStore.seeded())
        handlers.register(server.router)
    """

    def __init__(self, store: UserStore):
        self.store = store
        self._router: Optional[Router] = None

    def register(self, router: Router) -> "UserHandlers":
        """Add the five /users routes to router."""
        router.add_route("/users", self.list_users, method="GET", name="list_users")
        router.add_route("/users/:id", self.get_user, method="GET", name="get_user")
        router.add_route("/users", self.create_user, method="POST", name="create_user")
        router.add_route("/users/:id", self.update_user, method="PUT", name="update_user")
        router.add_route("/users/:id", self.delete_user, method="DELETE", name="delete_user")
        self._router = router
        return self

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def list_users(self, request: HTTPRequest) -> HTTPResponse:
        return ok([user.to_dict() for user in self.store.list_users()])

    def get_user(self, request: HTTPRequest) -> HTTPResponse:
        user_id = self._user_id(request)
        user = self.store.get_user(user_id)

        if user is None:
            return not_found(f"User {user_id} not found")

        return ok(user.to_dict())

    def create_user(self, request: HTTPRequest) -> HTTPResponse:
        name, email = self._user_fields(request)
        user = self.store.create_user(name, email)

        logger.info(f"Created user {user.id}")
        return created(user.to_dict(), location=self._location(user.id))

    def update_user(self, request: HTTPRequest) -> HTTPResponse:
        user_id = self._user_id(request)
        name, email = self._user_fields(request)
        user = self.store.update_user(user_id, name, email)

        if user is None:
            return not_found(f"User {user_id} not found")

        return ok(user.to_dict())

    def delete_user(self, request: HTTPRequest) -> HTTPResponse:
        user_id = self._user_id(request)

        if not self.store.delete_user(user_id):
            return not_found(f"User {user_id} not found")

        return no_content()

    # =========================================================================
    # REQUEST HELPERS
    # =========================================================================

    @staticmethod
    def _user_id(request: HTTPRequest) -> int:
        # int() alone would also take "+1", " 1", "1_0" and non-ASCII digits
        raw_id = request.path_params.get("id", "")
        if not USER_ID_PATTERN.fullmatch(raw_id):
            raise InvalidUserId(raw_id)
        return int(raw_id)

    @staticmethod
    def _user_fields(request: HTTPRequest) -> Tuple[Optional[str], Optional[str]]:
        """
        name and email from a JSON object body; anything else is a 400.

        Values must be representable in a UTF-8 response. JSON allows lone
        surrogate escapes ("\\ud800") that decode fine but can never be
        encoded again, so they are rejected before the store is touched.
        """
        data: Any = request.json

        if not isinstance(data, dict):
            raise HTTPParseError("Request body must be a JSON object")

        body: Dict[str, Any] = data
        name, email = body.get("name"), body.get("email")

        for field_name, value in (("name", name), ("email", email)):
            try:
                json.dumps(value, ensure_ascii=False).encode("utf-8")
            except UnicodeEncodeError:
                raise HTTPParseError(f"Field '{field_name}' is not valid UTF-8 text")

        return name, email

    def _location(self, user_id: int) -> str:
        if self._router is not None:
            url = self._router.url_for("get_user", id=user_id)
            if url:
                return url
        return f"/users/{user_id}"
