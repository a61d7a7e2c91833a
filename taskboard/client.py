"""HTTP client and in-memory task list for Taskboard consumers.

``TaskList`` keeps no local reconciliation logic: after every mutation it
refetches the caller's tasks and replaces its copy wholesale.

Usage:
    client = TaskboardClient("http://localhost:8000")
    client.login("alice@x.com", "password123")
    tasks = TaskList(client)
    tasks.add(title="Buy milk")
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Non-2xx reply from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TaskboardClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token: Optional[str] = None
        self.user: Optional[Dict[str, Any]] = None

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, path, headers=self._headers(), **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error:
            message = body.get("error", response.reason_phrase) if isinstance(body, dict) else response.reason_phrase
            logger.debug(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiError(response.status_code, message)
        return body

    def register(self, name: str, email: str, password: str) -> str:
        body = self._request("POST", "/users/register", json={"name": name, "email": email, "password": password})
        return body["message"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = body["token"]
        self.user = body["user"]
        return self.user

    def logout(self) -> None:
        self.token = None
        self.user = None

    def fetch_tasks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/task")["data"]

    def get_task(self, task_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/task/{task_id}")["data"]

    def create_task(self, **fields) -> Dict[str, Any]:
        return self._request("POST", "/task", json=fields)["data"]

    def update_task(self, task_id: str, **fields) -> Dict[str, Any]:
        return self._request("PUT", f"/task/{task_id}", json=fields)["data"]

    def delete_task(self, task_id: str) -> None:
        self._request("DELETE", f"/task/{task_id}")

    def close(self) -> None:
        self.http.close()


class TaskList:
    """The caller's tasks as last fetched from the server."""

    def __init__(self, client: TaskboardClient):
        self.client = client
        self.tasks: List[Dict[str, Any]] = []

    def refresh(self) -> List[Dict[str, Any]]:
        self.tasks = self.client.fetch_tasks()
        return self.tasks

    @property
    def visible(self) -> List[Dict[str, Any]]:
        # Completed tasks stay on the server, they are only hidden here
        return [task for task in self.tasks if task["status"] != "Completed"]

    def find(self, task_id: str) -> Optional[Dict[str, Any]]:
        return next((task for task in self.tasks if task["id"] == task_id), None)

    def add(self, **fields) -> Dict[str, Any]:
        fields.setdefault("status", "Pending")
        created = self.client.create_task(**fields)
        self.refresh()
        return created

    def edit(self, task_id: str, **changes) -> Dict[str, Any]:
        updated = self.client.update_task(task_id, **changes)
        self.refresh()
        return updated

    def set_status(self, task_id: str, status: str) -> Dict[str, Any]:
        return self.edit(task_id, status=status)

    def remove(self, task_id: str) -> None:
        self.client.delete_task(task_id)
        self.refresh()
