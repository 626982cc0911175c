from typing import Any

from jike_client.api.base import ApiGroup, drop_none
from jike_client.errors.models import ApiResult


class NotificationsApi(ApiGroup):
    async def list(self, load_more_key: dict[str, Any] | None = None) -> ApiResult:
        return await self._post("notifications/list", json=drop_none({"loadMoreKey": load_more_key}))
