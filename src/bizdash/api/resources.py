from __future__ import annotations

from dataclasses import dataclass


JSON = "json"
MULTIPART = "multipart"


@dataclass(frozen=True)
class ResourceSpec:
    name: str
    encoding: str = JSON
    writable: bool = True

    @property
    def path(self) -> str:
        return f"{self.name}/"


# Body encodings follow what each backend endpoint accepts.
RESOURCES: dict[str, ResourceSpec] = {
    spec.name: spec
    for spec in (
        ResourceSpec("customers", encoding=MULTIPART),
        ResourceSpec("vendors", encoding=MULTIPART),
        ResourceSpec("products", encoding=JSON),
        ResourceSpec("sales", encoding=JSON),
        ResourceSpec("wholesalepurchases", encoding=MULTIPART),
        ResourceSpec("payments", writable=False),
    )
}
