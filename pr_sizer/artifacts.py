"""Score artifact persistence."""

from __future__ import annotations

from pathlib import Path

from pr_sizer.errors import ArtifactError


class FileArtifactWriter:
    """Writes artifacts under a directory for a later upload step to collect."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def write(self, filename: str, content: str) -> str:
        output_path = self.root / filename
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            output_path.write_text(content, encoding="utf-8")
        except OSError as error:
            raise ArtifactError(
                f"Unable to write score artifact '{output_path}': {error}"
            ) from error
        return str(output_path)
