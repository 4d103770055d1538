"""Directory of recognized universities and their faculty subdomains.

The directory is plain data: adding a university or a faculty never needs a
code change. It is built once at process start and shared read-only.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, TypeAdapter

DEFAULT_UNIVERSITIES: dict[str, dict[str, Any]] = {
    "cu.edu.eg": {
        "name": "Cairo University",
        "faculties": {
            "sca": "Faculty of Arts",
            "sci": "Faculty of Science",
            "eng": "Faculty of Engineering",
            "med": "Faculty of Medicine",
            "dentistry": "Faculty of Dentistry",
            "pharma": "Faculty of Pharmacy",
            "law": "Faculty of Law",
            "foc": "Faculty of Commerce",
            "edu": "Faculty of Education",
            "agr": "Faculty of Agriculture",
            "vet": "Faculty of Veterinary Medicine",
            "pt": "Faculty of Physical Therapy",
            "fci": "Faculty of Computers & AI",
            "nursing": "Faculty of Nursing",
            "masscomm": "Faculty of Mass Communication",
            "feps": "Faculty of Economics & Political Science",
            "dar": "Faculty of Dar Al-Ulum",
            "arch": "Faculty of Archaeology",
            "rup": "Faculty of Regional & Urban Planning",
        },
    },
}


class UniversityEntry(BaseModel):
    """One university: display name plus faculty subdomain -> faculty name."""

    name: str
    faculties: dict[str, str]

    model_config = ConfigDict(frozen=True)


_DIRECTORY_ADAPTER = TypeAdapter(dict[str, UniversityEntry])


@dataclass(frozen=True)
class FacultyMatch:
    university_name: str
    faculty_name: str


class UnsupportedUniversityError(LookupError):
    def __init__(self, domain: str) -> None:
        super().__init__(f"University domain '{domain}' is not supported")
        self.domain = domain


class UnsupportedFacultyError(LookupError):
    def __init__(self, domain: str, subdomain: str) -> None:
        super().__init__(f"Faculty '{subdomain}' is not supported under '{domain}'")
        self.domain = domain
        self.subdomain = subdomain


class UniversityDirectory:
    """Immutable, case-insensitive lookup of university domains and faculties."""

    def __init__(self, entries: Mapping[str, UniversityEntry]) -> None:
        normalized: dict[str, tuple[str, Mapping[str, str]]] = {}
        for domain, entry in entries.items():
            faculties = {token.strip().lower(): name for token, name in entry.faculties.items()}
            normalized[domain.strip().lower()] = (entry.name, MappingProxyType(faculties))
        self._entries: Mapping[str, tuple[str, Mapping[str, str]]] = MappingProxyType(normalized)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "UniversityDirectory":
        """Build from `{domain: {"name": ..., "faculties": {token: name}}}`."""
        return cls(_DIRECTORY_ADAPTER.validate_python(dict(raw)))

    @classmethod
    def from_json_file(cls, path: str | Path) -> "UniversityDirectory":
        with open(path, encoding="utf-8") as handle:
            return cls.from_mapping(json.load(handle))

    @classmethod
    def default(cls) -> "UniversityDirectory":
        return cls.from_mapping(DEFAULT_UNIVERSITIES)

    @property
    def domains(self) -> list[str]:
        return sorted(self._entries)

    def lookup_faculty(self, domain: str, subdomain: str) -> FacultyMatch:
        """Resolve a domain and faculty token.

        Raises:
            UnsupportedUniversityError: the domain is not in the directory
            UnsupportedFacultyError: the domain is known but the faculty is not
        """
        domain_key = domain.strip().lower()
        entry = self._entries.get(domain_key)
        if entry is None:
            raise UnsupportedUniversityError(domain_key)

        university_name, faculties = entry
        subdomain_key = subdomain.strip().lower()
        faculty_name = faculties.get(subdomain_key)
        if faculty_name is None:
            raise UnsupportedFacultyError(domain_key, subdomain_key)

        return FacultyMatch(university_name=university_name, faculty_name=faculty_name)

    def __len__(self) -> int:
        return len(self._entries)
