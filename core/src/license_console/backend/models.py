"""Records returned by the licensing backend.

The backend owns these shapes; the models only decode what the screens need and
tolerate extra or missing keys.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class BackendRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class PaginationLink(BackendRecord):
    url: str | None = None
    label: str = ""
    active: bool = False


class Pagination(BackendRecord):
    total: int = 0
    per_page: int = 0
    current_page: int = 1
    last_page: int = 1
    next_page_url: str | None = None
    prev_page_url: str | None = None
    from_: int | None = Field(default=None, alias="from")
    to: int | None = None
    links: list[PaginationLink] = Field(default_factory=list)

    @field_validator("links", mode="before")
    @classmethod
    def _null_links(cls, v: Any) -> Any:
        return [] if v is None else v


class Envelope(BackendRecord):
    success: bool = False
    message: str | None = None
    data: Any = None
    pagination: Any = None
    errors: Any = None


class CurrentUser(BackendRecord):
    id: str | int | None = Field(default=None, validation_alias=AliasChoices("id", "user_id"))
    login_id: str | None = None
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.login_id or self.email or ""


class User(BackendRecord):
    user_id: str | int
    name: str = ""
    email: str | None = None


class ProjectSummary(BackendRecord):
    project_id: int
    name: str = ""
    api_key: str | None = None
    status: str | None = None
    activated_count: int | None = None
    terminal_limit: int | None = None
    open_at: str | None = None
    close_at: str | None = None
    description: str | None = None


class Project(BackendRecord):
    id: int = Field(validation_alias=AliasChoices("id", "project_id"))
    name: str = ""
    customer_code: str | None = None
    api_key: str | None = None
    password: str | None = None
    terminal_limit: int | None = None
    open_at: str | None = None
    close_at: str | None = None
    status: str | None = None
    type: str | int | None = None
    prefix: str | None = None
    description: str | None = None
    activated_count: int | None = None


class TerminalApp(BackendRecord):
    app_id: int | None = None
    name: str | None = None
    description: str | None = None


class Terminal(BackendRecord):
    terminal_id: str | int
    name: str | None = None
    alias: str | None = None
    project_name: str | None = None
    serial_no: str | None = None
    os: str | None = None
    os_ver: str | None = None
    description: str | None = None
    app: TerminalApp | None = None


class AuthHistory(BackendRecord):
    auth_history_id: str | int
    project_id: int | None = None
    project_name: str | None = None
    api_key: str | None = None
    terminal_id: str | int | None = None
    terminal_name: str | None = None
    serial_no: str | None = None
    mac_address: str | None = None
    action: str | None = None
    result: str | None = None
    auth_msg: str | None = None
    app_id: int | None = None
    app_name: str | None = None
    app_version: str | None = None
    authenticate_at: str | None = None


class Supplier(BackendRecord):
    suppliers_id: int | None = None
    suppliers_name: str | None = None


class LicenseKeyPair(BaseModel):
    key: str
    value: str


class License(BackendRecord):
    license_id: int
    name: str = ""
    license_key: Any = None
    used: int | None = None
    limit: int | None = None
    expire_at: str | None = None
    description: str | None = None
    supplier: Supplier | None = None


class AppLicense(BackendRecord):
    license_id: int
    name: str | None = None


class App(BackendRecord):
    app_id: int
    name: str = ""
    version: str | None = None
    description: str | None = None
    status: str | None = None
    licenses: list[AppLicense] = Field(default_factory=list)

    @field_validator("licenses", mode="before")
    @classmethod
    def _null_licenses(cls, v: Any) -> Any:
        return [] if v is None else v
