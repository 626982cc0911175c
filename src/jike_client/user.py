"""User handle bound to a client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jike_client.errors.handler import is_success, throw_request_failure
from jike_client.pagination import PaginatedOption, PaginatedSequence, paginate

if TYPE_CHECKING:
    from jike_client.client import JikeClient

LoadMoreKey = dict[str, Any]


class JikeUser:
    """A user, addressed by username; `username=None` means the logged-in user."""

    def __init__(self, client: JikeClient, username: str | None) -> None:
        self._client = client
        self.username = username

    @property
    def is_self(self) -> bool | None:
        """True for the logged-in user; None when unknown without a lookup."""
        return True if self.username is None else None

    def __repr__(self) -> str:
        return f"JikeUser(username={self.username!r})"

    async def profile(self) -> dict[str, Any]:
        """Fetch the user's profile.

        Raises:
            RequestFailureError: If the lookup fails.
        """
        result = await self._client.api.users.profile(self.username)
        if not is_success(result):
            throw_request_failure(result, "query user profile")
        if self.username is None:
            self.username = result.data["user"]["username"]
        return result.data["user"]

    async def _require_username(self) -> str:
        if self.username is None:
            await self.profile()
        return self.username

    def query_followers(self, option: PaginatedOption[LoadMoreKey] | None = None) -> PaginatedSequence[LoadMoreKey]:
        """Users following this user, as a lazy sequence."""
        return self._query_relation("followers", option)

    def query_following(self, option: PaginatedOption[LoadMoreKey] | None = None) -> PaginatedSequence[LoadMoreKey]:
        """Users this user follows, as a lazy sequence."""
        return self._query_relation("following", option)

    def _query_relation(
        self, relation: str, option: PaginatedOption[LoadMoreKey] | None
    ) -> PaginatedSequence[LoadMoreKey]:
        option = option or PaginatedOption()
        relations = self._client.api.user_relation
        endpoint = relations.get_follower_list if relation == "followers" else relations.get_following_list

        async def fetch_page(load_more_key: LoadMoreKey | None):
            username = await self._require_username()
            result = await endpoint(username, limit=option.page_size, load_more_key=load_more_key)
            if not is_success(result):
                throw_request_failure(result, f"query {relation}")
            return result.data.get("loadMoreKey"), result.data["data"]

        return paginate(fetch_page, lambda item, items: {"total": len(items) + 1}, option)
