from typing import Any

import httpx


class CheckInFailed(Exception):
    """The server refused or could not record a check-in."""


class PlutoClient:
    """Async HTTP client for the course viewer.

    Every call raises ``httpx.HTTPError`` on transport failures and non-2xx
    responses, and on bodies that are not JSON. Callers decide which of those
    they swallow.
    """

    def __init__(self, base_url: str, token: str, *,
                 transport: httpx.AsyncBaseTransport | None = None,
                 timeout: float = 10.0):
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "PlutoClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        response = await self._http.request(method, url, **kwargs)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as e:
            # a 200 from a proxy or captive portal is not our API
            raise httpx.DecodingError(f"Response from {url} is not JSON", request=response.request) from e

    async def get_course(self, course_id: str) -> dict:
        return await self._request("GET", f"/api/courses/{course_id}")

    async def get_dashboard(self) -> dict:
        return await self._request("GET", "/api/dashboard")

    async def get_check_in_status(self, course_id: str) -> dict:
        return await self._request("GET", f"/api/courses/{course_id}/check-in")

    async def has_checked_in_today(self, course_id: str) -> bool:
        data = await self.get_check_in_status(course_id)
        return bool(data.get("hasCheckedInToday", False))

    async def record_check_in(self, course_id: str, mood: str, notes: str) -> dict:
        try:
            data = await self._request(
                "POST",
                f"/api/courses/{course_id}/check-in",
                json={"mood": mood, "notes": notes},
            )
        except httpx.HTTPStatusError as e:
            raise CheckInFailed(_error_detail(e.response)) from e
        except httpx.HTTPError as e:
            raise CheckInFailed("Failed to check in. Please try again.") from e
        if not data.get("success"):
            raise CheckInFailed(data.get("message") or "Failed to check in")
        return data

    async def toggle_progress(self, video_id: str, completed: bool) -> dict:
        return await self._request(
            "POST",
            "/api/progress/toggle",
            json={"videoId": video_id, "completed": completed},
        )


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, str) and detail:
        return detail
    return f"Failed to check in (HTTP {response.status_code})"
