"""User and session endpoints."""

from jike_client.api.base import ApiGroup, drop_none
from jike_client.config import RENEWAL_PATH
from jike_client.errors.models import ApiResult


def resolve_area_code(area_code: str | int) -> str:
    """Normalize an area code: `+86`, `86` and `86` (int) all become `"86"`."""
    return str(area_code).strip().removeprefix("+")


class UsersApi(ApiGroup):
    async def get_sms_code(self, area_code: str | int, mobile: str) -> ApiResult:
        return await self._post(
            "users/getSmsCode",
            json={
                "action": "PHONE_MIX_LOGIN",
                "areaCode": resolve_area_code(area_code),
                "mobilePhoneNumber": mobile,
            },
        )

    async def login_with_sms_code(self, area_code: str | int, mobile: str, sms_code: str | int) -> ApiResult:
        """Log in with an SMS code; tokens come back as response headers."""
        return await self._post(
            "users/mixLoginWithPhone",
            json={
                "areaCode": resolve_area_code(area_code),
                "mobilePhoneNumber": mobile,
                "verifyCode": str(sms_code),
            },
        )

    async def login_with_phone_and_password(self, area_code: str | int, mobile: str, password: str) -> ApiResult:
        """Log in with a password; tokens come back as response headers."""
        return await self._post(
            "users/loginWithPhoneAndPassword",
            json={
                "areaCode": resolve_area_code(area_code),
                "mobilePhoneNumber": mobile,
                "password": password,
            },
        )

    async def refresh_token(self, refresh_token: str, header_name: str = "x-jike-refresh-token") -> ApiResult:
        """Exchange a refresh token for a new token pair (returned in the body)."""
        return await self._post(RENEWAL_PATH, headers={header_name: refresh_token})

    async def profile(self, username: str | None = None) -> ApiResult:
        """Fetch a user's profile; the logged-in user's when `username` is None."""
        return await self._get("users/profile", params=drop_none({"username": username}))
