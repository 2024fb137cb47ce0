"""Maven coordinates as reported by the Nexus lucene search endpoint."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Gav:
    """Group, artifact and version, extended by Nexus' latest release field.

    The same type serves as a search template (empty fields are left out of
    the query) and as a discovered search hit.
    """

    group_id: str
    artifact_id: str = ""
    version: str = ""
    latest_release: str = ""

    @property
    def is_latest_release(self) -> bool:
        return self.version == self.latest_release

    def concise_notation(self) -> str:
        """Return ``group:artifact:version``."""

        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def default_layout(self) -> str:
        """Return the repository path of the version directory.

        Only group, artifact and version are supported. Addressing a single
        file would also need extension and classifier, which deleting a whole
        version does not.
        """

        group_path = self.group_id.replace(".", "/")
        return f"{group_path}/{self.artifact_id}/{self.version}"


__all__ = ["Gav"]
