"""Follower / following list endpoints."""

from typing import Any

from jike_client.api.base import ApiGroup, drop_none
from jike_client.errors.models import ApiResult


class UserRelationApi(ApiGroup):
    async def get_follower_list(
        self,
        username: str,
        limit: int | None = None,
        load_more_key: dict[str, Any] | None = None,
    ) -> ApiResult:
        """One page of users following `username`.

        The response body is `{"data": [...], "loadMoreKey": {...}}`, the key
        being absent on the last page.
        """
        return await self._post(
            "userRelation/getFollowerList",
            json=drop_none({"username": username, "limit": limit, "loadMoreKey": load_more_key}),
        )

    async def get_following_list(
        self,
        username: str,
        limit: int | None = None,
        load_more_key: dict[str, Any] | None = None,
    ) -> ApiResult:
        return await self._post(
            "userRelation/getFollowingList",
            json=drop_none({"username": username, "limit": limit, "loadMoreKey": load_more_key}),
        )
