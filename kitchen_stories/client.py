"""Admin-aware HTTP client for the Kitchen Stories API.

``CredentialCache`` keeps the admin password for as long as the client
session lives and prompts for it on demand. ``AdminClient`` attaches it to
write requests and, on a 401, asks once more and retries exactly once.
Concurrent callers are not coordinated: each one may prompt on its own.
"""

import getpass
import json
import logging
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger("kitchen_stories.client")

ADMIN_HEADER = "X-Admin-Password"

PromptFn = Callable[[str], Optional[str]]
NotifyFn = Callable[[str], None]


class PasswordRequired(Exception):
    pass


class AuthenticationCancelled(Exception):
    pass


class AuthenticationFailed(Exception):
    pass


def _log_notice(message: str) -> None:
    logger.warning(message)


class CredentialCache:
    """Session-lived slot for the admin password."""

    prompt_text = "Enter admin password to continue: "

    def __init__(self, prompt: Optional[PromptFn] = None, notify: Optional[NotifyFn] = None):
        self._prompt = prompt or getpass.getpass
        self._notify = notify or _log_notice
        self._password: Optional[str] = None

    def get(self) -> Optional[str]:
        return self._password

    def set(self, password: str) -> None:
        self._password = password

    def clear(self) -> None:
        self._password = None

    def notify(self, message: str) -> None:
        self._notify(message)

    def prompt_password(self) -> Optional[str]:
        """Ask the user; an empty answer counts as cancelled."""
        password = self._prompt(self.prompt_text)
        if not password:
            return None
        self.set(password)
        return password

    def get_or_prompt(self) -> Optional[str]:
        password = self.get()
        if not password:
            password = self.prompt_password()
        return password


class AdminClient:
    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        cache: Optional[CredentialCache] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.cache = cache or CredentialCache()
        self.http = http or httpx.Client(base_url=base_url)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "AdminClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def authenticated_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        password = self.cache.get_or_prompt()
        if not password:
            raise PasswordRequired("Password required")

        headers = dict(kwargs.pop("headers", None) or {})
        headers[ADMIN_HEADER] = password
        response = self.http.request(method, url, headers=headers, **kwargs)

        if response.status_code != 401:
            return response

        self.cache.clear()
        self.cache.notify("Invalid password. Please try again.")

        new_password = self.cache.prompt_password()
        if not new_password:
            raise AuthenticationCancelled("Authentication cancelled")

        headers[ADMIN_HEADER] = new_password
        retry = self.http.request(method, url, headers=headers, **kwargs)
        if retry.status_code == 401:
            self.cache.clear()
            raise AuthenticationFailed("Authentication failed")
        return retry

    # --- Recipe helpers ---

    @staticmethod
    def _image_part(image: Optional[tuple]) -> Optional[dict]:
        """Build the files mapping; file objects are read once so a retry resends the same bytes."""
        if not image:
            return None
        filename, content, *rest = image
        if hasattr(content, "read"):
            content = content.read()
        return {"image": (filename, content, *rest)}

    @staticmethod
    def _form(fields: dict, ingredients: Optional[list], instructions: Optional[list]) -> dict:
        data = {k: v for k, v in fields.items() if v is not None}
        data["ingredients"] = json.dumps(ingredients or [])
        data["instructions"] = json.dumps(instructions or [])
        return data

    def list_recipes(self, category: Optional[str] = None, search: Optional[str] = None) -> list[dict]:
        params = {k: v for k, v in {"category": category, "search": search}.items() if v}
        response = self.http.get("/api/recipes", params=params)
        response.raise_for_status()
        return response.json()

    def get_recipe(self, recipe_id: int) -> dict:
        response = self.http.get(f"/api/recipes/{recipe_id}")
        response.raise_for_status()
        return response.json()

    def create_recipe(
        self,
        fields: dict,
        ingredients: Optional[list] = None,
        instructions: Optional[list] = None,
        image: Optional[tuple] = None,
    ) -> httpx.Response:
        """image is an httpx file tuple: (filename, bytes or file object, content_type)."""
        files = self._image_part(image)
        return self.authenticated_request(
            "POST", "/api/recipes",
            data=self._form(fields, ingredients, instructions), files=files,
        )

    def update_recipe(
        self,
        recipe_id: int,
        fields: dict,
        ingredients: Optional[list] = None,
        instructions: Optional[list] = None,
        image: Optional[tuple] = None,
    ) -> httpx.Response:
        files = self._image_part(image)
        return self.authenticated_request(
            "PUT", f"/api/recipes/{recipe_id}",
            data=self._form(fields, ingredients, instructions), files=files,
        )

    def delete_recipe(self, recipe_id: int) -> httpx.Response:
        return self.authenticated_request("DELETE", f"/api/recipes/{recipe_id}")

    def toggle_favorite(self, recipe_id: int) -> httpx.Response:
        return self.http.patch(f"/api/recipes/{recipe_id}/favorite")
