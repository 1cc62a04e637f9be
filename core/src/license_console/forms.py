"""Register/edit form parsing and validation.

Each form keeps the raw submitted strings so a rejected submission re-renders
exactly what the operator typed. ``validate()`` returns ``{field: message}``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from starlette.datastructures import FormData

from license_console.backend.licenses import parse_license_key
from license_console.backend.models import App, License, LicenseKeyPair, Project

PROJECT_STATUSES: tuple[str, ...] = ("active", "inactive", "closed")
PROJECT_TYPES: dict[str, str] = {
    "1": "sales",
    "2": "rent",
    "3": "demo",
    "4": "development",
}
APP_STATUSES: tuple[str, ...] = ("active", "inactive")


def _text(form: FormData, key: str) -> str:
    raw = form.get(key)
    return raw.strip() if isinstance(raw, str) else ""


def _date_part(raw: str | None) -> str:
    # "YYYY-MM-DD HH:MM:SS" and ISO timestamps both start with the date.
    if not raw:
        return ""
    return raw.strip().split(" ")[0].split("T")[0]


def _is_date(raw: str) -> bool:
    try:
        date.fromisoformat(raw)
    except ValueError:
        return False
    return True


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass
class LoginForm:
    login_id: str = ""
    password: str = ""

    @classmethod
    def from_form(cls, form: FormData) -> LoginForm:
        password = form.get("password")
        return cls(
            login_id=_text(form, "login_id"),
            password=password if isinstance(password, str) else "",
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.login_id:
            errors["login_id"] = "Login ID is required"
        if not self.password:
            errors["password"] = "Password is required"
        return errors


@dataclass
class ProjectForm:
    name: str = ""
    customer_code: str = ""
    api_key: str = ""
    password: str = ""
    terminal_limit: str = "3"
    open_at: str = "2025-01-01"
    close_at: str = "2025-12-31"
    status: str = "active"
    type: str = "1"
    prefix: str = ""
    description: str = ""

    @classmethod
    def from_form(cls, form: FormData) -> ProjectForm:
        return cls(
            name=_text(form, "name"),
            customer_code=_text(form, "customer_code"),
            api_key=_text(form, "api_key"),
            password=_text(form, "password"),
            terminal_limit=_text(form, "terminal_limit"),
            open_at=_text(form, "open_at"),
            close_at=_text(form, "close_at"),
            status=_text(form, "status"),
            type=_text(form, "type"),
            prefix=_text(form, "prefix"),
            description=_text(form, "description"),
        )

    @classmethod
    def from_project(cls, project: Project) -> ProjectForm:
        return cls(
            name=project.name or "",
            customer_code=project.customer_code or "",
            api_key=project.api_key or "",
            password=project.password or "",
            terminal_limit=str(project.terminal_limit or 0),
            open_at=_date_part(project.open_at),
            close_at=_date_part(project.close_at),
            status=project.status or "active",
            type=str(project.type if project.type is not None else "1"),
            prefix=project.prefix or "",
            description=project.description or "",
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.name:
            errors["name"] = "Project name is required"
        if not self.customer_code:
            errors["customer_code"] = "Customer code is required"
        if not self.api_key:
            errors["api_key"] = "API key is required"
        if not self.password:
            errors["password"] = "Password is required"

        if not self.terminal_limit:
            errors["terminal_limit"] = "Terminal limit is required"
        else:
            limit = _parse_int(self.terminal_limit)
            if limit is None:
                errors["terminal_limit"] = "Terminal limit must be a whole number"
            elif limit < 1:
                errors["terminal_limit"] = "Terminal limit must be 1 or greater"

        if not self.open_at:
            errors["open_at"] = "Start date is required"
        elif not _is_date(self.open_at):
            errors["open_at"] = "Start date must be a date (YYYY-MM-DD)"
        if self.close_at and not _is_date(self.close_at):
            errors["close_at"] = "End date must be a date (YYYY-MM-DD)"

        if not self.status:
            errors["status"] = "Status is required"
        elif self.status not in PROJECT_STATUSES:
            errors["status"] = "Unknown status"
        if not self.type:
            errors["type"] = "App type is required"
        elif self.type not in PROJECT_TYPES:
            errors["type"] = "Unknown app type"
        if not self.prefix:
            errors["prefix"] = "Terminal prefix is required"
        return errors

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "customer_code": self.customer_code,
            "api_key": self.api_key,
            "password": self.password,
            "terminal_limit": int(self.terminal_limit),
            "open_at": self.open_at,
            "close_at": self.close_at,
            "status": self.status,
            "type": self.type,
            "prefix": self.prefix,
            "description": self.description,
        }


@dataclass
class LicenseForm:
    name: str = ""
    supplier_id: str = ""
    limit: str = "0"
    used: str = "0"
    expire_at: str = ""
    description: str = ""
    key_pairs: list[LicenseKeyPair] = field(default_factory=list)

    @classmethod
    def from_form(cls, form: FormData) -> LicenseForm:
        names = form.getlist("key_name")
        values = form.getlist("key_value")
        pairs: list[LicenseKeyPair] = []
        for i, raw_key in enumerate(names):
            key = raw_key.strip() if isinstance(raw_key, str) else ""
            raw_value = values[i] if i < len(values) else ""
            value = raw_value.strip() if isinstance(raw_value, str) else ""
            if not key and not value:
                continue
            pairs.append(LicenseKeyPair(key=key, value=value))

        return cls(
            name=_text(form, "name"),
            supplier_id=_text(form, "supplier_id"),
            limit=_text(form, "limit") or "0",
            used=_text(form, "used") or "0",
            expire_at=_text(form, "expire_at"),
            description=_text(form, "description"),
            key_pairs=pairs,
        )

    @classmethod
    def from_license(cls, lic: License) -> LicenseForm:
        supplier_id = lic.supplier.suppliers_id if lic.supplier is not None else None
        return cls(
            name=lic.name or "",
            supplier_id=str(supplier_id) if supplier_id else "",
            limit=str(lic.limit or 0),
            used=str(lic.used or 0),
            expire_at=_date_part(lic.expire_at)[:10],
            description=lic.description or "",
            key_pairs=parse_license_key(lic.license_key),
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.name:
            errors["name"] = "License name is required"
        if not self.supplier_id:
            errors["supplier_id"] = "Supplier ID is required"
        elif _parse_int(self.supplier_id) is None:
            errors["supplier_id"] = "Supplier ID must be a whole number"
        for key, label in (("limit", "Limit"), ("used", "Used")):
            value = _parse_int(getattr(self, key))
            if value is None:
                errors[key] = f"{label} must be a whole number"
            elif value < 0:
                errors[key] = f"{label} must be 0 or greater"
        if self.expire_at and not _is_date(self.expire_at):
            errors["expire_at"] = "Expiry date must be a date (YYYY-MM-DD)"
        if any(not pair.key for pair in self.key_pairs):
            errors["license_key"] = "Every license key value needs a key name"
        return errors

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "supplier_id": int(self.supplier_id),
            "limit": int(self.limit),
            "used": int(self.used),
            "expire_at": self.expire_at or None,
            "description": self.description,
            "license_key": [pair.model_dump() for pair in self.key_pairs],
        }


@dataclass
class AppForm:
    name: str = ""
    version: str = ""
    status: str = "active"
    description: str = ""
    license_ids: list[int] = field(default_factory=list)

    @classmethod
    def from_form(cls, form: FormData) -> AppForm:
        ids: list[int] = []
        for raw in form.getlist("license_ids"):
            value = _parse_int(raw) if isinstance(raw, str) else None
            if value is not None and value not in ids:
                ids.append(value)
        return cls(
            name=_text(form, "name"),
            version=_text(form, "version"),
            status=_text(form, "status"),
            description=_text(form, "description"),
            license_ids=ids,
        )

    @classmethod
    def from_app(cls, app: App) -> AppForm:
        return cls(
            name=app.name or "",
            version=app.version or "",
            status=app.status or "active",
            description=app.description or "",
            license_ids=[lic.license_id for lic in app.licenses],
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.name:
            errors["name"] = "App name is required"
        if not self.version:
            errors["version"] = "Version is required"
        if not self.status:
            errors["status"] = "Status is required"
        elif self.status not in APP_STATUSES:
            errors["status"] = "Unknown status"
        return errors

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "status": self.status,
            "description": self.description,
            "license_ids": list(self.license_ids),
        }


@dataclass
class UserForm:
    name: str = ""
    login_id: str = ""
    password: str = ""

    @classmethod
    def from_form(cls, form: FormData) -> UserForm:
        password = form.get("password")
        return cls(
            name=_text(form, "name"),
            login_id=_text(form, "login_id"),
            password=password if isinstance(password, str) else "",
        )

    def validate(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.name:
            errors["name"] = "User name is required"
        if not self.login_id:
            errors["login_id"] = "Login ID is required"
        if not self.password:
            errors["password"] = "Password is required"
        return errors

    def to_payload(self) -> dict[str, Any]:
        return {"name": self.name, "login_id": self.login_id, "password": self.password}
