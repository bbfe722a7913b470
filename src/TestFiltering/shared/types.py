from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Annotation:
    """A single annotation (marker, tag) attached to a test."""

    name: str
    value: str | None = None


@dataclass(frozen=True)
class Test:
    """Domain entity for a discovered test, consumed by the filter engine.

    Identity is structural: two tests with the same package, class,
    method and annotations are the same test.
    """

    __test__ = False  # not a pytest test class

    package: str
    clazz: str
    method: str
    annotations: tuple[Annotation, ...] = ()

    @property
    def fully_qualified_class_name(self) -> str:
        if not self.package:
            return self.clazz
        return f"{self.package}.{self.clazz}"

    @property
    def fully_qualified_test_name(self) -> str:
        return f"{self.fully_qualified_class_name}#{self.method}"

    def to_dict(self) -> dict:
        return {
            "package": self.package,
            "clazz": self.clazz,
            "method": self.method,
            "annotations": [
                {"name": a.name, "value": a.value} for a in self.annotations
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Test:
        return cls(
            package=data.get("package", ""),
            clazz=data["clazz"],
            method=data["method"],
            annotations=tuple(
                Annotation(
                    name=a["name"],
                    value=None if a.get("value") is None else str(a["value"]),
                )
                for a in data.get("annotations", [])
            ),
        )
